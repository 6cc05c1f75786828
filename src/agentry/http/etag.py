"""src/agentry/http/etag.py

Entity tag lists as found in ETag, If-Match and If-None-Match headers.
"""

import re
from typing import Iterable, List

from agentry.http.header_words import QUOTED_STRING

__all__ = ["split_etag_list", "join_etag_list"]

_WEAK = re.compile(r"\s*[wW]/")
_QUOTED = re.compile(r"\s*(" + QUOTED_STRING + ")", re.DOTALL)
_SEPARATOR = re.compile(r"\s*,")
_BARE = re.compile(r"\s*([^,\s]+)")
_SPACE = re.compile(r"\s+")
_QUOTE_SPECIALS = re.compile(r'["\\]')

EMPTY_WEAK_TAG = 'W/""'


def split_etag_list(*values: str) -> List[str]:
    """
    Split entity tag lists into normalized tags.

    Each tag comes back as ``'"opaque"'`` or ``'W/"opaque"'``. Quoted tags
    are kept verbatim, escapes included. Bare tokens are tolerated and
    quoted, and a ``W/`` marker with nothing after it becomes ``W/""``.

    Args:
        values: Raw header values.

    Returns:
        The tags in order of appearance; empty when no tag is present.
    """
    tags: List[str] = []
    for text in values:
        pos = 0
        end = len(text)
        while pos < end:
            weak = ""
            match = _WEAK.match(text, pos)
            if match:
                weak = "W/"
                pos = match.end()

            match = _QUOTED.match(text, pos)
            if match:
                tags.append(weak + match.group(1))
                pos = match.end()
                continue

            match = _SEPARATOR.match(text, pos)
            if match:
                if weak:
                    tags.append(EMPTY_WEAK_TAG)
                pos = match.end()
                continue

            match = _BARE.match(text, pos)
            if match:
                opaque = _QUOTE_SPECIALS.sub(r"\\\g<0>", match.group(1))
                tags.append(f'{weak}"{opaque}"')
                pos = match.end()
                continue

            # Only whitespace is left.
            if weak:
                tags.append(EMPTY_WEAK_TAG)
            match = _SPACE.match(text, pos)
            pos = match.end() if match else end
    return tags


def join_etag_list(tags: Iterable[str]) -> str:
    """Join already formatted entity tags into a single header value."""
    return ", ".join(tags)
