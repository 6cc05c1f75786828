"""src/agentry/client/__init__.py"""

from .auth import (
    Authenticator,
    BasicAuthenticator,
    DigestAuthenticator,
    build_basic_auth_header,
)
from .cookies import Cookie, CookieJar
from .handlers import PHASES, Handler, HandlerRegistry
from .user_agent import UserAgent

__all__ = [
    "UserAgent",
    "Authenticator",
    "BasicAuthenticator",
    "DigestAuthenticator",
    "Cookie",
    "CookieJar",
    "Handler",
    "HandlerRegistry",
    "PHASES",
    "build_basic_auth_header",
]
