"""src/agentry/exceptions.py

Agentry Exceptions hierarchy.

Only request construction errors (and, when ``use_eval`` is disabled,
transport failures) reach the caller. The remaining kinds are raised and
caught inside the user agent and end up as a ``Client-Warning`` header on
the returned response.
"""

# pylint: disable=redefined-builtin


class AgentryError(Exception):
    """Base exception for all Agentry errors."""


class InvalidArgument(AgentryError, ValueError):
    """A value handed to a header or configuration accessor is unusable."""


class RequestError(AgentryError):
    """General exception for Request errors."""


class InvalidRequest(RequestError, ValueError):
    """The request is missing its method or an absolute URL."""


class TransportFailure(RequestError):
    """
    Base exception for network-related errors.
    Wraps socket errors and other connection issues.
    """


class TimeoutError(TransportFailure):
    """
    Base exception for timeouts.
    """

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message)


class ConnectTimeout(TimeoutError):
    """Timeout during connection establishment."""


class ReadTimeout(TimeoutError):
    """Timeout during data reception."""


class TlsError(TransportFailure):
    """TLS/SSL handshake or verification errors."""


class ProtocolError(TransportFailure):
    """Server sent a response that could not be understood."""


class ProtocolNotPermitted(RequestError):
    """The URL scheme is disabled or has no registered transport."""


class RedirectLoopDetected(RequestError):
    """The chain of previous responses grew past ``max_redirect``."""

    def __init__(self, max_redirect: int):
        super().__init__(f"Redirect loop detected (max_redirect = {max_redirect})")
        self.max_redirect = max_redirect


class AuthenticationError(RequestError):
    """Base exception for challenge negotiation problems."""


class UnsupportedAuthScheme(AuthenticationError):
    """No authenticator is registered for the challenge scheme."""

    def __init__(self, scheme: str):
        super().__init__(f"Unsupported authentication scheme '{scheme}'")
        self.scheme = scheme


class MalformedAuthChallenge(AuthenticationError):
    """The challenge scheme name is not a valid token."""

    def __init__(self, scheme: str):
        super().__init__(f"Bad authentication scheme '{scheme}'")
        self.scheme = scheme
