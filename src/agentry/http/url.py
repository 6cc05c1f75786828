"""src/agentry/http/url.py

URL parsing and resolution for Agentry.
"""

import getpass
import socket
import urllib.parse
from typing import Optional, Union

__all__ = ["URL", "AnonymousIdentity"]

DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21}
ANONYMOUS_USERS = ("anonymous", "ftp")


class AnonymousIdentity:
    """
    The ``user@host`` address sent as password for anonymous FTP logins.

    The address is computed on first use and then cached for the lifetime
    of the instance.
    """

    __slots__ = ("_address",)

    def __init__(self) -> None:
        self._address: Optional[str] = None

    @property
    def address(self) -> str:
        """Return the cached ``user@fqdn`` address."""
        if self._address is None:
            try:
                user = getpass.getuser()
            except (KeyError, OSError):
                user = "nobody"
            self._address = f"{user}@{socket.getfqdn()}"
        return self._address


class URL:
    """Utility class for URL parsing and information."""

    __slots__ = ("parsed", "scheme", "host", "port", "path")

    anonymous_identity = AnonymousIdentity()

    def __init__(self, url: Union[str, "URL"]):
        self.parsed = urllib.parse.urlsplit(str(url))
        self.scheme = self.parsed.scheme.lower()
        self.host = self.parsed.hostname
        try:
            self.port = self.parsed.port
        except ValueError:
            self.port = None
        self.path = self.parsed.path

    @classmethod
    def join(cls, reference: str, base: Union[str, "URL", None]) -> "URL":
        """
        Resolve ``reference`` against ``base``.

        A reference carrying the base's own scheme but no authority
        (``http:other``) is resolved as a relative reference.
        """
        if base is None:
            return cls(reference)
        return cls(urllib.parse.urljoin(str(base), reference))

    @property
    def is_absolute(self) -> bool:
        """Whether the URL has a scheme."""
        return bool(self.scheme)

    @property
    def default_port(self) -> Optional[int]:
        """Well known port of the scheme, if any."""
        return DEFAULT_PORTS.get(self.scheme)

    @property
    def effective_port(self) -> Optional[int]:
        """Explicit port, falling back to the scheme default."""
        return self.port if self.port is not None else self.default_port

    @property
    def host_port(self) -> str:
        """``host:port`` with the port always present when known."""
        port = self.effective_port
        host = self.host or ""
        return f"{host}:{port}" if port is not None else host

    @property
    def authority(self) -> str:
        """Host for a ``Host`` header; the port is omitted when it is the default."""
        host = self.host or ""
        if ":" in host:
            host = f"[{host}]"
        if self.port is not None and self.port != self.default_port:
            return f"{host}:{self.port}"
        return host

    @property
    def path_query(self) -> str:
        """Request target in origin form, never empty."""
        target = self.path or "/"
        if self.parsed.query:
            target += f"?{self.parsed.query}"
        return target

    @property
    def user(self) -> Optional[str]:
        """User name from the URL; ``anonymous`` for FTP URLs without one."""
        user = self.parsed.username
        if user is None and self.scheme == "ftp":
            return "anonymous"
        return urllib.parse.unquote(user) if user is not None else None

    @property
    def password(self) -> Optional[str]:
        """Password from the URL, with the anonymous FTP default."""
        password = self.parsed.password
        if password is not None:
            return urllib.parse.unquote(password)
        if self.scheme != "ftp":
            return None
        if self.user in ANONYMOUS_USERS:
            return self.anonymous_identity.address
        return ""

    def __str__(self) -> str:
        return self.parsed.geturl()

    def __repr__(self) -> str:
        return f"URL({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (URL, str)):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))
