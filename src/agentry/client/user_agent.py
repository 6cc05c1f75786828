"""src/agentry/client/user_agent.py

The user agent: request preparation, dispatch to transports, redirect
following and authentication.

A :class:`UserAgent` is driven by one caller at a time. Use :meth:`clone`
to get an independent instance for another thread.

Example::

    agent = UserAgent(agent="my-crawler/1.0 ", max_redirect=3)
    response = agent.get("http://example.com/")
    if response.is_success:
        print(response.text())
"""

import copy
import logging
import re
import urllib.parse
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from agentry.client.auth import Authenticator, default_authenticators
from agentry.client.handlers import Handler, HandlerCallback, HandlerRegistry
from agentry.exceptions import (
    AuthenticationError,
    InvalidArgument,
    InvalidRequest,
    MalformedAuthChallenge,
    ProtocolNotPermitted,
    RedirectLoopDetected,
    UnsupportedAuthScheme,
)
from agentry.http.dates import time2str
from agentry.http.header_words import split_header_words
from agentry.http.headers import FieldValue, Headers
from agentry.http.message import Message, Request, Response
from agentry.http.url import URL
from agentry.transport.base import ContentSink, Transport
from agentry.transport.http import HTTPTransport
from agentry.utils.timing import Timeout
from agentry.version import __version__

__all__ = ["UserAgent"]

logger = logging.getLogger(__name__)

# pylint: disable=too-many-instance-attributes,too-many-arguments,too-many-public-methods

TransportFactory = Callable[[str, "UserAgent"], Transport]
Credentials = Tuple[str, str]

REDIRECT_CODES = (301, 302, 303, 307)
METHOD_DOWNGRADE_CODES = (302, 303)
AUTH_CODES = (401, 407)

_AUTH_SCHEME = re.compile(r"[a-z]+(?:-[a-z]+)*")
_ILLEGAL_SCHEME = re.compile(r"\W")

_UNSET: Any = object()


def _choose_proxy(request: Message, agent: "UserAgent", handler: Handler) -> None:
    """``request_preprepare`` handler picking a proxy for the request."""
    if not isinstance(request, Request) or request.proxy is not None or request.url is None:
        return
    request.proxy = agent.proxy_for(request.url)


class UserAgent:
    """
    Web user agent.

    Sends :class:`~agentry.http.message.Request` objects through the
    transport registered for their scheme, follows redirects and answers
    authentication challenges.

    Attributes:
        timeout: Seconds, or a :class:`~agentry.utils.timing.Timeout`,
            passed to the transport.
        use_eval: Turn transport exceptions into 500 responses.
        max_size: Maximum body size; longer bodies are truncated.
        max_redirect: Maximum number of redirects and retries per request.
        requests_redirectable: Methods for which redirects are followed.
        authenticators: Authentication schemes by lowercase name.
    """

    __slots__ = (
        "timeout",
        "use_eval",
        "max_size",
        "max_redirect",
        "requests_redirectable",
        "authenticators",
        "_protocols_allowed",
        "_protocols_forbidden",
        "_default_headers",
        "_cookie_jar",
        "_handlers",
        "_transports",
        "_proxies",
        "_no_proxy",
        "_credentials",
    )

    def __init__(
        self,
        *,
        agent: Optional[str] = None,
        from_: Optional[str] = None,
        timeout: Union[float, Timeout, None] = 180,
        use_eval: bool = True,
        max_size: Optional[int] = None,
        max_redirect: int = 7,
        protocols_allowed: Optional[Sequence[str]] = None,
        protocols_forbidden: Optional[Sequence[str]] = None,
        requests_redirectable: Optional[Sequence[str]] = ("GET", "HEAD"),
        cookie_jar: Any = None,
        default_headers: Union[Headers, Mapping[str, FieldValue], None] = None,
        transports: Optional[Mapping[str, TransportFactory]] = None,
        authenticators: Optional[Mapping[str, Authenticator]] = None,
    ) -> None:
        """
        Initialize a new user agent.

        Args:
            agent: User-Agent product token; a value ending in whitespace
                gets the default token appended.
            from_: E-mail address for the From field.
            timeout: Transport timeout.
            use_eval: Convert transport exceptions into 500 responses.
            max_size: Body size limit in bytes.
            max_redirect: Redirect and retry limit.
            protocols_allowed: Only these schemes may be requested.
            protocols_forbidden: These schemes may not be requested.
            requests_redirectable: Methods whose redirects are followed.
            cookie_jar: Object with ``add_cookie_header`` and
                ``extract_cookies`` methods.
            default_headers: Fields added to every request that lacks them.
            transports: Transport factories by scheme, added to the
                default ``http`` and ``https`` transport.
            authenticators: Authenticators by scheme name, added to the
                bundled ``basic`` and ``digest`` ones.
        """
        self.timeout = timeout
        self.use_eval = use_eval
        self.max_size = max_size
        self.max_redirect = max_redirect
        self.requests_redirectable = list(requests_redirectable or ())

        self._protocols_allowed: Optional[List[str]] = None
        self._protocols_forbidden: Optional[List[str]] = None
        self.protocols_allowed = protocols_allowed  # type: ignore[assignment]
        self.protocols_forbidden = protocols_forbidden  # type: ignore[assignment]

        if isinstance(default_headers, Headers):
            self._default_headers = default_headers
        else:
            self._default_headers = Headers(default_headers)

        self._handlers = HandlerRegistry()
        self._transports: Dict[str, TransportFactory] = {
            "http": HTTPTransport,
            "https": HTTPTransport,
        }
        for scheme, factory in (transports or {}).items():
            self.register_transport(scheme, factory)
        self.authenticators: Dict[str, Authenticator] = default_authenticators()
        for scheme, authenticator in (authenticators or {}).items():
            self.register_authenticator(scheme, authenticator)

        self._proxies: Dict[str, str] = {}
        self._no_proxy: List[str] = []
        self._credentials: Dict[str, Dict[str, Credentials]] = {}
        self._cookie_jar: Any = None

        self.agent = agent if agent is not None else self.default_agent()
        if from_ is not None:
            self.from_ = from_
        if cookie_jar is not None:
            self.cookie_jar = cookie_jar

    def __repr__(self) -> str:
        return f"<UserAgent [{self.agent}]>"

    # -- Configuration ---------------------------------------------------

    @staticmethod
    def default_agent() -> str:
        """The default product token, ``agentry/<version>``."""
        return f"agentry/{__version__}"

    @property
    def agent(self) -> Optional[str]:
        """The User-Agent sent with every request."""
        return self._default_headers.get("User-Agent")

    @agent.setter
    def agent(self, value: Optional[str]) -> None:
        if not value:
            self._default_headers.remove("User-Agent")
            return
        if value[-1].isspace():
            value += self.default_agent()
        self._default_headers.set("User-Agent", value)

    @property
    def from_(self) -> Optional[str]:
        """The From field sent with every request."""
        return self._default_headers.get("From")

    @from_.setter
    def from_(self, value: Optional[str]) -> None:
        if value:
            self._default_headers.set("From", value)
        else:
            self._default_headers.remove("From")

    @property
    def default_headers(self) -> Headers:
        """Fields added to requests that do not have them."""
        return self._default_headers

    @default_headers.setter
    def default_headers(self, headers: Union[Headers, Mapping[str, FieldValue]]) -> None:
        self._default_headers = headers if isinstance(headers, Headers) else Headers(headers)

    def default_header(self, name: str, value: Optional[FieldValue] = None) -> Optional[str]:
        """Get, and optionally replace, one default header field."""
        return self._default_headers.header(name, value)

    @staticmethod
    def _scheme_list(schemes: Optional[Sequence[str]], name: str) -> Optional[List[str]]:
        if schemes is None:
            return None
        if isinstance(schemes, str) or not isinstance(schemes, (list, tuple, set, frozenset)):
            raise InvalidArgument(f"{name} has to be a list of schemes, not {schemes!r}")
        return [scheme.lower() for scheme in schemes]

    @property
    def protocols_allowed(self) -> Optional[List[str]]:
        """Schemes that may be requested; None allows every scheme."""
        return self._protocols_allowed

    @protocols_allowed.setter
    def protocols_allowed(self, schemes: Optional[Sequence[str]]) -> None:
        self._protocols_allowed = self._scheme_list(schemes, "protocols_allowed")

    @property
    def protocols_forbidden(self) -> Optional[List[str]]:
        """Schemes that may not be requested."""
        return self._protocols_forbidden

    @protocols_forbidden.setter
    def protocols_forbidden(self, schemes: Optional[Sequence[str]]) -> None:
        self._protocols_forbidden = self._scheme_list(schemes, "protocols_forbidden")

    def _protocol_permitted(self, scheme: str) -> bool:
        if self._protocols_allowed is not None:
            permitted = scheme in self._protocols_allowed
            logger.debug(
                "%s URLs are%s among the allowed protocols %s",
                scheme,
                "" if permitted else "n't",
                self._protocols_allowed,
            )
            return permitted
        if self._protocols_forbidden is not None:
            permitted = scheme not in self._protocols_forbidden
            logger.debug(
                "%s URLs are%s among the forbidden protocols %s",
                scheme,
                "n't" if permitted else "",
                self._protocols_forbidden,
            )
            return permitted
        return True

    def is_protocol_supported(self, scheme: Union[str, URL]) -> bool:
        """
        Whether requests for ``scheme`` can be sent.

        Args:
            scheme: A scheme name or a URL.

        Raises:
            InvalidArgument: If the scheme name contains non-word characters.
        """
        if isinstance(scheme, URL):
            name = scheme.scheme
        else:
            if _ILLEGAL_SCHEME.search(scheme):
                raise InvalidArgument(
                    f"Illegal scheme '{scheme}' passed to is_protocol_supported"
                )
            name = scheme.lower()
        return self._protocol_permitted(name) and name in self._transports

    def register_transport(self, scheme: str, factory: Optional[TransportFactory]) -> None:
        """
        Register the transport factory for ``scheme``.

        The factory is called as ``factory(scheme, agent)`` for every request.
        None removes the registration.
        """
        if factory is None:
            self._transports.pop(scheme.lower(), None)
        else:
            self._transports[scheme.lower()] = factory

    def register_authenticator(self, scheme: str, authenticator: Optional[Authenticator]) -> None:
        """Register the authenticator for ``scheme``; None removes it."""
        if authenticator is None:
            self.authenticators.pop(scheme.lower(), None)
        else:
            self.authenticators[scheme.lower()] = authenticator

    # -- Cookies ---------------------------------------------------------

    @property
    def cookie_jar(self) -> Any:
        """The cookie jar, or None."""
        return self._cookie_jar

    @cookie_jar.setter
    def cookie_jar(self, jar: Any) -> None:
        self._cookie_jar = jar
        add = extract = None
        if jar is not None:

            def add(request: Message, agent: "UserAgent", handler: Handler) -> None:
                jar.add_cookie_header(request)

            def extract(response: Message, agent: "UserAgent", handler: Handler) -> None:
                jar.extract_cookies(response)

        self.set_my_handler("request_prepare", add, owner="cookie_jar")
        self.set_my_handler("response_done", extract, owner="cookie_jar")

    # -- Proxies ---------------------------------------------------------

    def proxy(
        self, scheme: Union[str, Sequence[str]], url: Optional[str] = _UNSET
    ) -> Union[Optional[str], List[Optional[str]]]:
        """
        Get or set the proxy for one or more schemes.

        Args:
            scheme: A scheme or a list of schemes.
            url: The proxy URL; None removes the proxy. Omit to only query.

        Returns:
            The previous proxy URL, or a list of them for a list of schemes.
        """
        if not isinstance(scheme, str):
            return [self.proxy(name, url) for name in scheme]  # type: ignore[misc]

        scheme = scheme.lower()
        old = self._proxies.get(scheme)
        if url is not _UNSET:
            if url:
                self._proxies[scheme] = url
            else:
                self._proxies.pop(scheme, None)
            self._install_proxy_handler()
        return old

    def no_proxy(self, *domains: str) -> None:
        """Add domains reached without proxy; no argument clears the list."""
        if domains:
            self._no_proxy.extend(domain.lower() for domain in domains)
        else:
            self._no_proxy = []

    def proxy_for(self, url: URL) -> Optional[URL]:
        """The proxy to use for ``url``, honoring the no-proxy domains."""
        proxy = self._proxies.get(url.scheme)
        if not proxy:
            return None
        host = url.host or ""
        if any(host.endswith(domain) for domain in self._no_proxy):
            return None
        return URL(proxy)

    def _install_proxy_handler(self) -> None:
        self.set_my_handler(
            "request_preprepare", _choose_proxy if self._proxies else None, owner="proxy"
        )

    # -- Credentials -----------------------------------------------------

    def credentials(
        self,
        netloc: str,
        realm: Optional[str] = None,
        user: Optional[str] = None,
        password: str = "",
    ) -> Optional[Credentials]:
        """
        Get or set the credentials for ``realm`` at ``netloc``.

        Args:
            netloc: ``host:port`` of the server.
            realm: Authentication realm.
            user: New user name; omit to only query.
            password: New password.

        Returns:
            The previous ``(user, password)`` pair, if any.
        """
        realms = self._credentials.setdefault(netloc.lower(), {})
        old = realms.get(realm or "")
        if user is not None:
            realms[realm or ""] = (user, password)
        return old

    def get_basic_credentials(
        self, realm: str, url: URL, is_proxy: bool = False
    ) -> Optional[Credentials]:
        """
        Credentials for an authentication challenge.

        Override to prompt for credentials. By default the credentials
        stored with :meth:`credentials` are returned, and none for proxies.
        """
        if is_proxy:
            return None
        return self._credentials.get(url.host_port.lower(), {}).get(realm or "")

    # -- Handlers --------------------------------------------------------

    def add_handler(
        self,
        phase: str,
        callback: HandlerCallback,
        *,
        owner: Optional[str] = None,
        predicate: Optional[Callable[[Message], bool]] = None,
        **match: Any,
    ) -> Handler:
        """
        Register a handler; see :mod:`agentry.client.handlers`.

        Raises:
            InvalidArgument: For an unknown phase or match condition.
        """
        return self._handlers.add(phase, callback, owner=owner, predicate=predicate, **match)

    def set_my_handler(
        self,
        phase: str,
        callback: Optional[HandlerCallback],
        *,
        owner: str,
        **match: Any,
    ) -> Optional[Handler]:
        """Replace the handler of ``owner`` for ``phase``; None only removes it."""
        self._handlers.remove(phase, owner=owner, **match)
        if callback is None:
            return None
        return self._handlers.add(phase, callback, owner=owner, **match)

    def get_my_handler(
        self, phase: str, *, owner: str, create: bool = False, **match: Any
    ) -> Optional[Handler]:
        """
        The first handler of ``owner`` for ``phase``.

        With ``create``, a handler doing nothing is registered when none
        exists, so that it can be used to keep state between requests.
        """
        found = self._handlers.find(phase, owner=owner, **match)
        if found:
            return found[0]
        if not create:
            return None
        return self._handlers.add(phase, lambda message, agent, handler: None, owner=owner, **match)

    def remove_handler(self, phase: Optional[str] = None, **spec: Any) -> List[Handler]:
        """Remove handlers registered with ``spec``, from every phase by default."""
        return self._handlers.remove(phase, **spec)

    def handlers(self, phase: str, message: Message) -> List[Handler]:
        """Handlers of ``phase`` that apply to ``message``."""
        return self._handlers.matching(phase, message)

    def run_handlers(self, phase: str, message: Message) -> Any:
        """Run the handlers of ``phase``; see :meth:`HandlerRegistry.run`."""
        return self._handlers.run(phase, message, self)

    # -- Dispatch --------------------------------------------------------

    def prepare_request(self, request: Request) -> Request:
        """
        Validate ``request`` and apply the defaults of this agent.

        Raises:
            InvalidRequest: If the method or an absolute URL is missing.
        """
        if request is None:
            raise InvalidRequest("No request object passed in")
        if not isinstance(request, Request):
            raise InvalidRequest(
                f"You need a request object, not a {type(request).__name__} object"
            )
        if not request.method:
            raise InvalidRequest("Bad request: Method missing")
        url = request.url
        if url is None:
            raise InvalidRequest("Bad request: URL missing")
        if not url.is_absolute:
            raise InvalidRequest("Bad request: URL must be absolute")

        self.run_handlers("request_preprepare", request)

        if self.max_size is not None:
            last = max(self.max_size - 1, 0)
            request.headers.init("Range", f"bytes=0-{last}")

        for name in self._default_headers.field_names():
            request.headers.init(name, self._default_headers.get_all(name))

        self.run_handlers("request_prepare", request)
        return request

    def _transport_for(self, request: Request) -> Transport:
        if request.url is None:
            raise InvalidRequest("Bad request: URL missing")
        scheme = request.url.scheme
        if not self._protocol_permitted(scheme):
            raise ProtocolNotPermitted(f"Access to '{scheme}' URIs has been disabled")
        if request.proxy is not None:
            scheme = request.proxy.scheme
        factory = self._transports.get(scheme)
        if factory is None:
            raise ProtocolNotPermitted(f"Protocol scheme '{scheme}' is not supported")
        return factory(scheme, self)

    def send_request(
        self,
        request: Request,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """
        Send a prepared request without following redirects.

        ``request_send`` handlers may supply the response. Requests for a
        scheme that is not permitted or has no transport get a synthesised
        501 response. Transport exceptions become a synthesised 500
        response while :attr:`use_eval` is true and propagate otherwise.
        """
        logger.debug("%s %s", request.method, request.url)

        response = self.run_handlers("request_send", request)
        if response is None:
            try:
                transport = self._transport_for(request)
            except ProtocolNotPermitted as exc:
                response = self._new_response(request, 501, str(exc))
            else:
                response = self._execute(transport, request, content_sink, read_size_hint)

        response.request = request
        response.headers.set("Client-Date", time2str())
        self.run_handlers("response_done", response)
        return response

    def _execute(
        self,
        transport: Transport,
        request: Request,
        content_sink: ContentSink,
        read_size_hint: Optional[int],
    ) -> Response:
        if not self.use_eval:
            return transport.execute(
                request, request.proxy, content_sink, read_size_hint, self.timeout
            )
        try:
            return transport.execute(
                request, request.proxy, content_sink, read_size_hint, self.timeout
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug("Transport failed for %s %s", request.method, request.url, exc_info=True)
            return self._new_response(request, 500, str(exc) or type(exc).__name__)

    def simple_request(
        self,
        request: Request,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """Prepare and send ``request``; redirects and challenges are not handled."""
        return self.send_request(self.prepare_request(request), content_sink, read_size_hint)

    def request(
        self,
        request: Request,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
        previous: Optional[Response] = None,
    ) -> Response:
        """
        Send ``request``, following redirects and answering challenges.

        Args:
            request: The request to send.
            content_sink: None to keep the body in ``response.content``, a
                file name to write it to, or a callable receiving
                ``(chunk, response, transport)``.
            read_size_hint: Preferred size of body chunks.
            previous: The response this request is a follow-up to.

        Returns:
            The final response. Redirect loops, refused redirects and failed
            challenges are reported in its ``Client-Warning`` field.

        Raises:
            InvalidRequest: If the request lacks a method or absolute URL.
        """
        response = self.simple_request(request, content_sink, read_size_hint)

        if previous is not None:
            response.previous = previous
            if len(response.history) + 1 > self.max_redirect:
                warning = str(RedirectLoopDetected(self.max_redirect))
                logger.debug(warning)
                response.headers.set("Client-Warning", warning)
                return response

        follow = self.run_handlers("response_redirect", response)
        if follow is not None:
            return self.request(follow, content_sink, read_size_hint, response)

        logger.debug("Simple response: %s", response.status_line)
        if response.code in REDIRECT_CODES:
            return self._follow_redirect(request, response, content_sink, read_size_hint)
        if response.code in AUTH_CODES:
            return self._negotiate_auth(request, response, content_sink, read_size_hint)
        return response

    def _follow_redirect(
        self,
        request: Request,
        response: Response,
        content_sink: ContentSink,
        read_size_hint: Optional[int],
    ) -> Response:
        referral = request.clone()
        # These fields are never forwarded.
        referral.headers.remove("Host", "Cookie")

        if response.code in METHOD_DOWNGRADE_CODES:
            if (referral.method or "").upper() not in ("GET", "HEAD"):
                referral.method = "GET"
                referral.content = b""
                referral.headers.remove_content_headers()

        locations = response.headers.get_all("Location")
        referral.url = URL.join(locations[0] if locations else "", response.base)

        if (
            referral.headers.get("Referer") is not None
            and request.url is not None
            and request.url.scheme == "https"
            and referral.url is not None
            and referral.url.scheme == "http"
        ):
            logger.debug("https -> http redirect, suppressing Referer")
            referral.headers.remove("Referer")

        if not self.redirect_ok(referral, response):
            return response
        logger.debug("Redirecting to %s", referral.url)
        return self.request(referral, content_sink, read_size_hint, response)

    def redirect_ok(self, new_request: Request, response: Response) -> bool:
        """
        Whether the redirect to ``new_request`` may be followed.

        Only requests whose method is in :attr:`requests_redirectable` are
        redirected, and never to a ``file`` URL.
        """
        method = response.request.method if response.request is not None else None
        if method not in self.requests_redirectable:
            return False
        if new_request.url is not None and new_request.url.scheme == "file":
            response.headers.set("Client-Warning", "Can't redirect to a file:// URL!")
            return False
        return True

    @staticmethod
    def parse_challenge(challenge: str) -> Tuple[str, Dict[str, Optional[str]]]:
        """
        Split one authentication challenge into scheme and parameters.

        Commas separate the parameters of a challenge, not challenges.

        Returns:
            The lowercase scheme and the parameters with lowercase names.

        Raises:
            MalformedAuthChallenge: If the scheme name is not a valid token.
        """
        words = split_header_words(challenge.replace(",", ";"))
        if not words:
            raise MalformedAuthChallenge("")
        (scheme, _), *params = words[0]
        scheme = scheme.lower()
        if not _AUTH_SCHEME.fullmatch(scheme):
            raise MalformedAuthChallenge(scheme)
        return scheme, {name.lower(): value for name, value in params}

    def _negotiate_auth(
        self,
        request: Request,
        response: Response,
        content_sink: ContentSink,
        read_size_hint: Optional[int],
    ) -> Response:
        is_proxy = response.code == 407
        field = "Proxy-Authenticate" if is_proxy else "WWW-Authenticate"
        challenges = response.headers.get_all(field)
        if not challenges:
            response.headers.set("Client-Warning", "Missing Authenticate header")
            return response

        for challenge in challenges:
            try:
                scheme, params = self.parse_challenge(challenge)
                authenticator = self.authenticators.get(scheme)
                if authenticator is None:
                    raise UnsupportedAuthScheme(scheme)
            except AuthenticationError as exc:
                logger.debug("Skipping challenge %r: %s", challenge, exc)
                response.headers.push("Client-Warning", str(exc))
                continue
            return authenticator.authenticate(
                self, is_proxy, params, response, request, content_sink, read_size_hint
            )
        return response

    @staticmethod
    def _new_response(request: Request, code: int, message: str) -> Response:
        response = Response(code, message)
        response.request = request
        response.headers.set("Client-Date", time2str())
        response.headers.set("Client-Warning", "Internal response")
        response.headers.set("Content-Type", "text/plain")
        response.content = f"{code} {message}\n".encode("utf-8")
        return response

    # -- Shortcuts -------------------------------------------------------

    def _shortcut(
        self,
        method: str,
        url: Union[str, URL],
        headers: Optional[Mapping[str, FieldValue]],
        content: Union[str, bytes, Mapping[str, Any], None],
        content_sink: ContentSink,
        read_size_hint: Optional[int],
    ) -> Response:
        request = Request(method, url, headers)
        if isinstance(content, Mapping):
            request.content = urllib.parse.urlencode(content, doseq=True).encode("ascii")
            request.headers.init("Content-Type", "application/x-www-form-urlencoded")
        elif content is not None:
            request.content = content.encode("utf-8") if isinstance(content, str) else content
        return self.request(request, content_sink, read_size_hint)

    def get(
        self,
        url: Union[str, URL],
        *,
        headers: Optional[Mapping[str, FieldValue]] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """Send a GET request."""
        return self._shortcut("GET", url, headers, None, content_sink, read_size_hint)

    def head(
        self,
        url: Union[str, URL],
        *,
        headers: Optional[Mapping[str, FieldValue]] = None,
    ) -> Response:
        """Send a HEAD request."""
        return self._shortcut("HEAD", url, headers, None, None, None)

    def post(
        self,
        url: Union[str, URL],
        content: Union[str, bytes, Mapping[str, Any], None] = None,
        *,
        headers: Optional[Mapping[str, FieldValue]] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """
        Send a POST request.

        A mapping as ``content`` is sent as an urlencoded form.
        """
        return self._shortcut("POST", url, headers, content, content_sink, read_size_hint)

    def put(
        self,
        url: Union[str, URL],
        content: Union[str, bytes, Mapping[str, Any], None] = None,
        *,
        headers: Optional[Mapping[str, FieldValue]] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """Send a PUT request."""
        return self._shortcut("PUT", url, headers, content, content_sink, read_size_hint)

    def delete(
        self,
        url: Union[str, URL],
        *,
        headers: Optional[Mapping[str, FieldValue]] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
    ) -> Response:
        """Send a DELETE request."""
        return self._shortcut("DELETE", url, headers, None, content_sink, read_size_hint)

    # -- Copies ----------------------------------------------------------

    def clone(self) -> "UserAgent":
        """
        Independent copy of this agent.

        Configuration, credentials and authenticator state are copied. The
        cookie jar is dropped and only the proxy handler is registered on
        the copy.
        """
        other = copy.copy(self)
        other.requests_redirectable = list(self.requests_redirectable)
        other.authenticators = copy.deepcopy(self.authenticators)
        other._protocols_allowed = copy.copy(self._protocols_allowed)
        other._protocols_forbidden = copy.copy(self._protocols_forbidden)
        other._default_headers = self._default_headers.clone()
        other._transports = dict(self._transports)
        other._proxies = dict(self._proxies)
        other._no_proxy = list(self._no_proxy)
        other._credentials = copy.deepcopy(self._credentials)
        other._cookie_jar = None
        other._handlers = HandlerRegistry()
        if other._proxies:
            other._install_proxy_handler()
        return other
