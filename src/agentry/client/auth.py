"""src/agentry/client/auth.py

Authentication schemes answering 401 and 407 challenges.

An authenticator is registered on the user agent under the lowercase scheme
name it handles. When a challenge for that scheme arrives, the user agent
hands over the whole exchange: the authenticator looks up credentials,
builds a retried request and returns whatever the retry produced.
"""

import hashlib
import logging
import os
import re
from typing import TYPE_CHECKING, Dict, Optional

from agentry.http.headers import Headers
from agentry.http.message import Request, Response
from agentry.http.url import URL
from agentry.transport.base import ContentSink

if TYPE_CHECKING:  # pragma: no cover
    from agentry.client.user_agent import UserAgent

__all__ = [
    "Authenticator",
    "BasicAuthenticator",
    "DigestAuthenticator",
    "build_basic_auth_header",
    "default_authenticators",
]

logger = logging.getLogger(__name__)

Challenge = Dict[str, Optional[str]]


def build_basic_auth_header(username: str, password: str) -> str:
    """
    Build Basic Auth header from username and password.

    Args:
        username: Username for authentication.
        password: Password for authentication.

    Returns:
        Basic Auth header value.

    Raises:
        InvalidArgument: If the username contains a colon.
    """
    headers = Headers()
    headers.authorization_basic = (username, password)
    return headers["Authorization"]


class Authenticator:
    """
    Base class of the bundled schemes.

    Subclasses implement :meth:`auth_header`; this class takes care of the
    credential lookup and of not retrying credentials that already failed.
    """

    scheme = ""

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def authenticate(
        self,
        agent: "UserAgent",
        is_proxy: bool,
        challenge: Challenge,
        response: Response,
        request: Request,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """
        Answer ``challenge`` and return the response to the retried request.

        ``response`` is returned unchanged when no credentials are available,
        when the request has no target, or when the same credentials were
        already rejected earlier in the response chain.

        Args:
            agent: The user agent handling the request.
            is_proxy: True for a 407 challenge.
            challenge: Challenge parameters with lowercase names.
            response: The 401 or 407 response.
            request: The request that was rejected.
            content_sink: Forwarded to the retried request.
            read_size_hint: Forwarded to the retried request.
        """
        realm = challenge.get("realm") or ""
        url: Optional[URL] = request.proxy if is_proxy else request.url
        if url is None:
            return response

        credentials = agent.get_basic_credentials(realm, url, is_proxy)
        if credentials is None:
            logger.debug("No credentials for realm %r at %s", realm, url.host_port)
            return response
        user, password = credentials

        field = "Proxy-Authorization" if is_proxy else "Authorization"
        value = self.auth_header(user, password, challenge, request)
        if self._failed_before(response, field, value):
            logger.debug("Credentials for %r were rejected before", user)
            response.headers.set("Client-Warning", f"Credentials for '{user}' failed before")
            return response

        referral = request.clone()
        referral.proxy = request.proxy
        referral.headers.set(field, value)
        return agent.request(referral, content_sink, read_size_hint, response)

    @staticmethod
    def _failed_before(response: Response, field: str, value: str) -> bool:
        current: Optional[Response] = response
        while current is not None:
            sent = current.request
            if sent is not None and sent.headers.get(field) == value:
                return True
            current = current.previous
        return False

    def auth_header(
        self, user: str, password: str, challenge: Challenge, request: Request
    ) -> str:
        """Value of the Authorization field for this scheme."""
        raise NotImplementedError


class BasicAuthenticator(Authenticator):
    """RFC 2617 Basic authentication."""

    scheme = "basic"

    def auth_header(
        self, user: str, password: str, challenge: Challenge, request: Request
    ) -> str:
        return build_basic_auth_header(user, password)


class DigestAuthenticator(Authenticator):
    """
    RFC 2617 Digest authentication with MD5 and ``qop=auth``.

    Nonce counts are kept per nonce on the instance, so every user agent
    should own its authenticator.
    """

    scheme = "digest"

    _QOP_AUTH = re.compile(r"^auth([,;]auth-int)?$")
    _ORDER = (
        "username",
        "realm",
        "qop",
        "algorithm",
        "uri",
        "nonce",
        "nc",
        "cnonce",
        "response",
        "opaque",
    )

    def __init__(self) -> None:
        self.nonce_counts: Dict[str, int] = {}

    @staticmethod
    def _md5(*parts: str) -> str:
        return hashlib.md5(":".join(parts).encode("utf-8")).hexdigest()

    def _next_nc(self, nonce: str) -> str:
        count = self.nonce_counts.get(nonce, 0) + 1
        self.nonce_counts[nonce] = count
        return f"{count:08X}"

    def auth_header(
        self, user: str, password: str, challenge: Challenge, request: Request
    ) -> str:
        realm = challenge.get("realm") or ""
        nonce = challenge.get("nonce") or ""
        qop = challenge.get("qop") or ""
        uri = request.url.path_query if request.url is not None else "/"

        ha1 = self._md5(user, realm, password)
        ha2 = self._md5(request.method or "", uri)

        fields: Dict[str, Optional[str]] = {
            "username": user,
            "realm": realm,
            "algorithm": "MD5",
            "uri": uri,
            "nonce": nonce,
            "opaque": challenge.get("opaque"),
        }
        if self._QOP_AUTH.match(qop):
            nc = self._next_nc(nonce)
            cnonce = os.urandom(8).hex()
            fields.update(qop="auth", nc=nc, cnonce=cnonce)
            fields["response"] = self._md5(ha1, nonce, nc, cnonce, "auth", ha2)
        else:
            fields["response"] = self._md5(ha1, nonce, ha2)

        pairs = [
            f'{name}="{fields[name]}"' for name in self._ORDER if fields.get(name) is not None
        ]
        return "Digest " + ", ".join(pairs)


def default_authenticators() -> Dict[str, Authenticator]:
    """Fresh instances of the bundled schemes, keyed by scheme name."""
    return {auth.scheme: auth for auth in (BasicAuthenticator(), DigestAuthenticator())}
