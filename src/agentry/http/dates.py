"""src/agentry/http/dates.py

Conversion between HTTP date strings and epoch seconds.
"""

import time
from email.utils import formatdate, mktime_tz, parsedate_tz
from typing import Optional

__all__ = ["time2str", "str2time"]


def time2str(epoch: Optional[float] = None) -> str:
    """
    Format epoch seconds as an RFC 1123 date.

    Args:
        epoch: Seconds since the epoch, defaults to the current time.

    Returns:
        A string like ``"Sun, 06 Nov 1994 08:49:37 GMT"``.
    """
    if epoch is None:
        epoch = time.time()
    return formatdate(epoch, usegmt=True)


def str2time(text: Optional[str]) -> Optional[float]:
    """
    Parse an HTTP date into epoch seconds.

    RFC 1123, RFC 850 and asctime formats are understood. A date without
    zone information is taken to be GMT.

    Args:
        text: The header value.

    Returns:
        Seconds since the epoch, or None if the value is not a date.
    """
    if not text:
        return None
    parsed = parsedate_tz(text.strip())
    if parsed is None:
        return None
    if parsed[9] is None:
        parsed = parsed[:9] + (0,)
    return float(mktime_tz(parsed))
