"""src/agentry/client/cookies.py

In-memory cookie jar.

Cookies are parsed with :class:`http.cookies.SimpleCookie` and stored per
domain and path. The jar only implements what the user agent needs:
adding a ``Cookie`` field to outgoing requests and collecting
``Set-Cookie`` fields from responses.
"""

import logging
import time
from http.cookies import CookieError, SimpleCookie
from typing import Dict, Iterator, List, Optional, Tuple

from agentry.http.dates import str2time
from agentry.http.message import Request, Response

__all__ = ["Cookie", "CookieJar"]

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class Cookie:
    """A stored cookie."""

    __slots__ = ("name", "value", "domain", "path", "secure", "expires", "host_only")

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        name: str,
        value: str,
        domain: str,
        path: str = "/",
        secure: bool = False,
        expires: Optional[float] = None,
        host_only: bool = True,
    ) -> None:
        self.name = name
        self.value = value
        self.domain = domain
        self.path = path
        self.secure = secure
        self.expires = expires
        self.host_only = host_only

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires is None:
            return False
        return self.expires <= (now if now is not None else time.time())

    def matches(self, host: str, path: str, secure: bool) -> bool:
        """Whether the cookie is sent to ``host`` for ``path``."""
        if self.secure and not secure:
            return False
        if self.host_only:
            if host != self.domain:
                return False
        elif host != self.domain and not host.endswith("." + self.domain):
            return False
        if path == self.path or self.path == "/":
            return True
        prefix = self.path if self.path.endswith("/") else self.path + "/"
        return path.startswith(prefix)

    def __repr__(self) -> str:
        return f"<Cookie {self.name}={self.value} for {self.domain}{self.path}>"


def _default_path(path: str) -> str:
    if not path.startswith("/") or path.count("/") == 1:
        return "/"
    return path[: path.rfind("/")]


class CookieJar:
    """
    Cookie storage keyed by ``(domain, path, name)``.

    Example::

        agent = UserAgent(cookie_jar=CookieJar())
    """

    __slots__ = ("_cookies",)

    def __init__(self) -> None:
        self._cookies: Dict[Tuple[str, str, str], Cookie] = {}

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies.values()))

    def __len__(self) -> int:
        return len(self._cookies)

    def set_cookie(self, cookie: Cookie) -> None:
        """Store ``cookie``, replacing one with the same domain, path and name."""
        key = (cookie.domain, cookie.path, cookie.name)
        if cookie.is_expired():
            self._cookies.pop(key, None)
        else:
            self._cookies[key] = cookie

    def clear(self, domain: Optional[str] = None) -> None:
        """Remove every cookie, or only those stored for ``domain``."""
        if domain is None:
            self._cookies.clear()
            return
        for key in [k for k in self._cookies if k[0] == domain.lower()]:
            del self._cookies[key]

    def cookies_for(self, request: Request) -> List[Cookie]:
        """Unexpired cookies applying to ``request``, longest path first."""
        url = request.url
        if url is None or not url.host:
            return []
        now = time.time()
        secure = url.scheme == "https"
        found = [
            cookie
            for cookie in self._cookies.values()
            if not cookie.is_expired(now) and cookie.matches(url.host, url.path or "/", secure)
        ]
        found.sort(key=lambda cookie: len(cookie.path), reverse=True)
        return found

    def add_cookie_header(self, request: Request) -> None:
        """Set the ``Cookie`` field of ``request`` from the stored cookies."""
        cookies = self.cookies_for(request)
        if cookies:
            request.headers.set("Cookie", "; ".join(f"{c.name}={c.value}" for c in cookies))

    def extract_cookies(self, response: Response) -> None:
        """
        Store the cookies set by ``response``.

        Cookies with a domain the request host does not belong to are
        ignored, and malformed ``Set-Cookie`` values are skipped.
        """
        request = response.request
        if request is None or request.url is None or not request.url.host:
            return
        host = request.url.host
        default_path = _default_path(request.url.path)

        # Set-Cookie headers should be handled individually
        for header_value in response.headers.get_all("Set-Cookie"):
            parsed: SimpleCookie = SimpleCookie()
            try:
                parsed.load(header_value)
            except CookieError:
                logger.debug("Ignoring malformed Set-Cookie %r", header_value)
                continue

            for name, morsel in parsed.items():
                domain = (morsel["domain"] or "").lower().lstrip(".")
                host_only = not domain
                if host_only:
                    domain = host
                elif host != domain and not host.endswith("." + domain):
                    logger.debug("Rejecting cookie %s for domain %s from %s", name, domain, host)
                    continue

                expires: Optional[float] = None
                if morsel["max-age"]:
                    try:
                        expires = time.time() + int(morsel["max-age"])
                    except ValueError:
                        expires = None
                elif morsel["expires"]:
                    expires = str2time(morsel["expires"])

                self.set_cookie(
                    Cookie(
                        name,
                        morsel.value,
                        domain,
                        path=morsel["path"] or default_path,
                        secure=bool(morsel["secure"]),
                        expires=expires,
                        host_only=host_only,
                    )
                )
