"""src/agentry/transport/base.py

Transport interface used by the user agent.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Union

from agentry.http.message import Request, Response
from agentry.http.url import URL
from agentry.utils.timing import Timeout

if TYPE_CHECKING:  # pragma: no cover
    from agentry.client.user_agent import UserAgent

__all__ = ["Transport", "ContentSink"]

logger = logging.getLogger(__name__)

ContentSink = Union[None, str, Callable[[bytes, Response, "Transport"], Any]]


class Transport:
    """
    Executes requests for one URL scheme on behalf of a user agent.

    Subclasses implement :meth:`execute` and feed the body they receive
    through :meth:`collect`, which takes care of the content sink and the
    agent's ``max_size``.

    Attributes:
        scheme: The URL scheme this instance was created for.
        agent: The user agent that created it, if any.
    """

    __slots__ = ("scheme", "agent")

    def __init__(self, scheme: str, agent: Optional["UserAgent"] = None) -> None:
        self.scheme = scheme
        self.agent = agent

    def execute(
        self,
        request: Request,
        proxy: Optional[URL] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
        timeout: Union[float, Timeout, None] = None,
    ) -> Response:
        """
        Perform ``request`` and return the response.

        Args:
            request: The prepared request.
            proxy: Proxy to send the request through.
            content_sink: Where the body goes; see :meth:`collect`.
            read_size_hint: Preferred size of body chunks.
            timeout: Seconds, or a :class:`Timeout`.
        """
        raise NotImplementedError

    def collect(
        self,
        content_sink: ContentSink,
        response: Response,
        chunks: Iterable[bytes],
    ) -> Response:
        """
        Deliver body chunks to ``content_sink``.

        ``None`` appends to ``response.content``, a string names a file that
        is written in binary mode, and a callable is invoked as
        ``sink(chunk, response, transport)``. An exception raised by the
        callable stops the transfer and is recorded in the ``X-Died`` and
        ``Client-Aborted`` fields. Bodies larger than the agent's
        ``max_size`` are truncated and flagged with ``Client-Aborted:
        max_size``.
        """
        if isinstance(content_sink, str):
            with open(content_sink, "wb") as fp:
                return self._collect(fp.write, response, chunks)

        if callable(content_sink):
            sink = content_sink
            return self._collect(lambda chunk: sink(chunk, response, self), response, chunks)

        parts = []
        self._collect(parts.append, response, chunks)
        response.content += b"".join(parts)
        return response

    def _collect(
        self,
        write: Callable[[bytes], Any],
        response: Response,
        chunks: Iterable[bytes],
    ) -> Response:
        max_size = self.agent.max_size if self.agent is not None else None
        received = 0
        for chunk in chunks:
            if not chunk:
                continue
            received += len(chunk)
            truncated = max_size is not None and received > max_size
            if truncated:
                chunk = chunk[: len(chunk) - (received - max_size)]  # type: ignore[operator]
            try:
                write(chunk)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.debug("Content sink failed", exc_info=True)
                response.headers.set("X-Died", str(exc))
                response.headers.set("Client-Aborted", "die")
                break
            if truncated:
                response.headers.set("Client-Aborted", "max_size")
                break
        return response
