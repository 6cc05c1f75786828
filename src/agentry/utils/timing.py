"""src/agentry/utils/timing.py

Timeouts configuration.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class Timeout:
    """
    Timeout configuration.

    Attributes:
        connect: Maximum time to wait for connection establishment (socket connect).
        read: Maximum time to wait for data to be received (socket recv).
        total: Fallback used when one of the above is not set.
    """

    connect: Optional[float] = None
    read: Optional[float] = None
    total: Optional[float] = None

    @classmethod
    def coerce(cls, timeout: Union[float, "Timeout", None]) -> "Timeout":
        """Accept a Timeout, a number of seconds or None."""
        if isinstance(timeout, Timeout):
            return timeout
        if timeout is None:
            return cls()
        return cls(connect=timeout, read=timeout, total=timeout)

    @property
    def connect_timeout(self) -> Optional[float]:
        return self.connect if self.connect is not None else self.total

    @property
    def read_timeout(self) -> Optional[float]:
        return self.read if self.read is not None else self.total
