"""src/agentry/client/handlers.py

Phase based extension points of the user agent.

Handlers are registered per phase, in order, optionally restricted with
``m_*`` match conditions or a ``predicate``. Phases that produce a value
(``request_send`` and ``response_redirect``) stop at the first handler
returning something other than None; the others run every matching handler.

Phases:
    request_preprepare: Request validated, defaults not yet applied.
    request_prepare: Request ready to be sent (cookies are added here).
    request_send: May return a Response to skip the transport.
    response_done: Response received (cookies are extracted here).
    response_redirect: May return a Request to follow instead.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from agentry.exceptions import InvalidArgument
from agentry.http.message import Message, Request, Response

if TYPE_CHECKING:  # pragma: no cover
    from agentry.client.user_agent import UserAgent

__all__ = ["PHASES", "Handler", "HandlerRegistry"]

PHASES = (
    "request_preprepare",
    "request_prepare",
    "request_send",
    "response_done",
    "response_redirect",
)
FIRST_RESULT_PHASES = frozenset({"request_send", "response_redirect"})

MATCH_KEYS = frozenset(
    {
        "m_method",
        "m_scheme",
        "m_secure",
        "m_host",
        "m_port",
        "m_host_port",
        "m_domain",
        "m_path",
        "m_path_prefix",
        "m_path_match",
        "m_proxy",
        "m_code",
        "m_media_type",
    }
)
HEADER_MATCH_PREFIX = "m_header__"

HandlerCallback = Callable[[Message, "UserAgent", "Handler"], Any]

_MISSING = object()


def _split(message: Message) -> "tuple[Optional[Request], Optional[Response]]":
    if isinstance(message, Response):
        return message.request, message
    if isinstance(message, Request):
        return message, None
    return None, None


def _media_type_matches(expected: str, content_type: str) -> bool:
    if expected == "html":
        return content_type in ("text/html", "application/xhtml+xml")
    if expected == "xhtml":
        return content_type in ("application/xhtml+xml", "application/vnd.wap.xhtml+xml")
    if expected == "*/*":
        return True
    if expected.endswith("/*"):
        return content_type.startswith(expected[:-1])
    return content_type == expected


def _code_matches(expected: Any, code: int) -> bool:
    text = str(expected).lower()
    if text.endswith("xx"):
        return str(code).startswith(text.rstrip("x"))
    return str(code) == text


def _match_one(key: str, expected: Any, message: Message) -> bool:
    request, response = _split(message)
    url = request.url if request is not None else None

    if key.startswith(HEADER_MATCH_PREFIX):
        return message.headers.get(key[len(HEADER_MATCH_PREFIX):]) == expected
    if key in ("m_code", "m_media_type"):
        if response is None:
            return False
        if key == "m_code":
            return _code_matches(expected, response.code)
        return _media_type_matches(expected, response.headers.content_type)
    if key == "m_method":
        return request is not None and request.method == expected
    if key == "m_proxy":
        proxy = request.proxy if request is not None else None
        return proxy is not None and str(proxy) == str(expected)
    if url is None:
        return False
    if key == "m_scheme":
        return url.scheme == str(expected).lower()
    if key == "m_secure":
        return (url.scheme == "https") == bool(expected)
    if key == "m_host":
        return (url.host or "") == str(expected).lower()
    if key == "m_port":
        return url.effective_port == int(expected)
    if key == "m_host_port":
        return url.host_port == str(expected).lower()
    if key == "m_domain":
        domain = str(expected).lower().lstrip(".")
        host = url.host or ""
        return host == domain or host.endswith("." + domain)
    if key == "m_path":
        return url.path == expected
    if key == "m_path_prefix":
        return url.path.startswith(expected)
    if key == "m_path_match":
        return re.search(expected, url.path) is not None
    return False


@dataclass
class Handler:
    """
    A registered callback.

    Attributes:
        phase: Phase the handler runs in.
        callback: Called as ``callback(message, agent, handler)``.
        owner: Tag used to find or replace the handler later.
        match: ``m_*`` conditions; a list value matches any of its items.
        predicate: Extra condition called with the message.
    """

    phase: str
    callback: HandlerCallback
    owner: Optional[str] = None
    match: Dict[str, Any] = field(default_factory=dict)
    predicate: Optional[Callable[[Message], bool]] = None

    def matches(self, message: Message) -> bool:
        """Whether this handler applies to ``message``."""
        for key, expected in self.match.items():
            if not key.startswith("m_"):
                continue
            options: Sequence[Any] = (
                expected if isinstance(expected, (list, tuple, set)) else (expected,)
            )
            if not any(_match_one(key, option, message) for option in options):
                return False
        return self.predicate is None or bool(self.predicate(message))

    def has_spec(self, spec: Dict[str, Any]) -> bool:
        """Whether the handler was registered with every item of ``spec``."""
        for key, value in spec.items():
            if key == "owner":
                if self.owner != value:
                    return False
            elif self.match.get(key, _MISSING) != value:
                return False
        return True


class HandlerRegistry:
    """Ordered handler lists, one per phase."""

    __slots__ = ("_phases",)

    def __init__(self) -> None:
        self._phases: Dict[str, List[Handler]] = {}

    @staticmethod
    def _check_phase(phase: str) -> None:
        if phase not in PHASES:
            raise InvalidArgument(f"Unknown handler phase '{phase}'")

    def add(
        self,
        phase: str,
        callback: HandlerCallback,
        *,
        owner: Optional[str] = None,
        predicate: Optional[Callable[[Message], bool]] = None,
        **match: Any,
    ) -> Handler:
        """
        Append a handler to ``phase``.

        Keyword arguments starting with ``m_`` are match conditions; other
        keyword arguments are kept as metadata and can be used with
        :meth:`find` and :meth:`remove`.

        Raises:
            InvalidArgument: For an unknown phase or ``m_*`` condition.
        """
        self._check_phase(phase)
        for key in match:
            if (
                key.startswith("m_")
                and key not in MATCH_KEYS
                and not key.startswith(HEADER_MATCH_PREFIX)
            ):
                raise InvalidArgument(f"Unknown match condition '{key}'")
        handler = Handler(phase, callback, owner, dict(match), predicate)
        self._phases.setdefault(phase, []).append(handler)
        return handler

    def find(self, phase: str, **spec: Any) -> List[Handler]:
        """Handlers of ``phase`` registered with all of ``spec``."""
        self._check_phase(phase)
        return [h for h in self._phases.get(phase, []) if h.has_spec(spec)]

    def remove(self, phase: Optional[str] = None, **spec: Any) -> List[Handler]:
        """
        Remove handlers matching ``spec`` from ``phase``, or from every
        phase when ``phase`` is None.
        """
        phases = [phase] if phase is not None else sorted(self._phases)
        removed: List[Handler] = []
        for name in phases:
            self._check_phase(name)
            handlers = self._phases.get(name, [])
            kept = [h for h in handlers if not h.has_spec(spec)]
            removed.extend(h for h in handlers if h.has_spec(spec))
            if kept:
                self._phases[name] = kept
            else:
                self._phases.pop(name, None)
        return removed

    def matching(self, phase: str, message: Message) -> List[Handler]:
        """Handlers of ``phase`` that apply to ``message``, in order."""
        self._check_phase(phase)
        return [h for h in self._phases.get(phase, []) if h.matches(message)]

    def run(self, phase: str, message: Message, agent: "UserAgent") -> Any:
        """
        Run the handlers of ``phase`` for ``message``.

        Returns:
            For ``request_send`` and ``response_redirect``, the first result
            that is not None; None otherwise.
        """
        first_result = phase in FIRST_RESULT_PHASES
        for handler in self.matching(phase, message):
            result = handler.callback(message, agent, handler)
            if first_result and result is not None:
                return result
        return None

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._phases.values())
