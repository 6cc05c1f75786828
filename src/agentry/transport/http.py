"""src/agentry/transport/http.py

Default HTTP/1.1 transport over plain and TLS sockets.
"""

import logging
import socket
from typing import Iterable, Optional, Union

from agentry.exceptions import InvalidRequest, ReadTimeout, TransportFailure
from agentry.http.body import iter_body
from agentry.http.http11 import HttpParser
from agentry.http.message import Request, Response
from agentry.http.url import URL
from agentry.transport.base import ContentSink, Transport
from agentry.transport.connection import Connection
from agentry.utils.timing import Timeout

__all__ = ["HTTPTransport"]

logger = logging.getLogger(__name__)

_BODYLESS_CODES = (204, 304)
_BODY_METHODS = ("POST", "PUT", "PATCH")


class HTTPTransport(Transport):
    """
    One request per connection HTTP/1.1 transport.

    Requests through a proxy use the absolute URL as request target.
    """

    __slots__ = ()

    def build_head(self, request: Request, proxy: Optional[URL] = None) -> bytes:
        """
        Build the request line and header block.

        Raises:
            InvalidRequest: If a header contains CR or NUL characters.
        """
        url = request.url
        if url is None:
            raise InvalidRequest("Bad request: URL missing")
        target = str(url) if proxy is not None else url.path_query

        headers = request.headers.clone()
        headers.init("Host", url.authority)
        headers.init("Connection", "close")
        if request.content or (request.method or "").upper() in _BODY_METHODS:
            headers.init("Content-Length", str(len(request.content)))

        def _check(name: str, value: str) -> None:
            # Validate against HTTP header injection attacks
            if "\r" in value or "\x00" in value or any(c in name for c in "\r\n\x00:"):
                raise InvalidRequest(f"Invalid character in header {name!r}: {value!r}")

        headers.scan(_check)
        head = f"{request.method} {target} HTTP/1.1\r\n" + headers.as_string("\r\n")
        return (head + "\r\n").encode("iso-8859-1")

    def execute(
        self,
        request: Request,
        proxy: Optional[URL] = None,
        content_sink: ContentSink = None,
        read_size_hint: Optional[int] = None,
        timeout: Union[float, Timeout, None] = None,
    ) -> Response:
        url = request.url
        endpoint = proxy if proxy is not None else url
        if endpoint is None or not endpoint.host:
            raise TransportFailure(f"Invalid URL: could not determine host: {url}")

        head = self.build_head(request, proxy)
        conn = Connection(
            endpoint.host,
            endpoint.effective_port or 80,
            use_ssl=(endpoint.scheme == "https"),
            timeout=timeout,
        )
        with conn:
            conn.sendall(head + request.content)
            fp = conn.makefile()
            try:
                protocol, code, reason, headers = HttpParser().parse_head(fp)
                response = Response(code, reason or None, headers)
                response.protocol = protocol
                logger.debug("%s %s -> %s", request.method, url, response.status_line)

                chunks: Iterable[bytes] = ()
                if not (
                    (request.method or "").upper() == "HEAD"
                    or code in _BODYLESS_CODES
                    or 100 <= code < 200
                ):
                    chunks = iter_body(fp, headers, read_size_hint)
                return self.collect(content_sink, response, chunks)

            except socket.timeout as exc:
                raise ReadTimeout(f"Read timed out: {exc}") from exc
            except OSError as exc:
                raise TransportFailure(f"Network error during read: {exc}") from exc
            finally:
                fp.close()
