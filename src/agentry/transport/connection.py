"""src/agentry/transport/connection.py

Single use TCP and TLS connections for the HTTP transport.
"""

import logging
import socket
import ssl
from typing import Any, BinaryIO, Optional, Union

from agentry.exceptions import ConnectTimeout, TlsError, TransportFailure
from agentry.transport.tls import create_ssl_context
from agentry.utils.timing import Timeout

__all__ = ["Connection"]

logger = logging.getLogger(__name__)


class Connection:
    """
    A socket to one ``host:port``, optionally wrapped in TLS.

    The connect timeout applies while the socket is set up and the TLS
    handshake runs; the read timeout applies afterwards.

    Attributes:
        host: The target hostname or IP address.
        port: The target port number.
        use_ssl: Whether to use TLS encryption.
        verify: Whether the peer certificate is checked.
        timeout: Connect and read timeouts.
        sock: The open socket, or None.
    """

    __slots__ = ("host", "port", "use_ssl", "verify", "timeout", "sock")

    def __init__(
        self,
        host: str,
        port: int,
        use_ssl: bool = False,
        timeout: Union[float, Timeout, None] = None,
        verify: bool = True,
    ) -> None:
        self.host = host
        self.port = port
        self.use_ssl = use_ssl
        self.verify = verify
        self.timeout = Timeout.coerce(timeout)
        self.sock: Optional[socket.socket] = None

    @property
    def peer(self) -> str:
        return f"{self.host}:{self.port}"

    def _connect(self) -> socket.socket:
        try:
            return socket.create_connection(
                (self.host, self.port), timeout=self.timeout.connect_timeout
            )
        except socket.timeout as exc:
            raise ConnectTimeout(f"Timeout connecting to {self.peer}") from exc
        except OSError as exc:
            raise TransportFailure(f"Connection error to {self.peer} - {exc}") from exc

    def _handshake(self, raw_sock: socket.socket) -> socket.socket:
        context = create_ssl_context(self.verify)
        try:
            return context.wrap_socket(raw_sock, server_hostname=self.host)
        except socket.timeout as exc:
            raw_sock.close()
            raise ConnectTimeout(f"Timeout during TLS handshake: {exc}") from exc
        except ssl.SSLError as exc:
            raw_sock.close()
            raise TlsError(f"TLS Verification Error: {exc}") from exc

    def open(self) -> socket.socket:
        """
        Connect, run the TLS handshake when ``use_ssl`` is set, and switch
        the socket to the read timeout.

        Raises:
            ConnectTimeout: If connecting or the handshake timed out.
            TlsError: If the handshake failed.
            TransportFailure: For other socket errors.
        """
        logger.debug("Connecting to %s (tls=%s)", self.peer, self.use_ssl)
        sock = self._connect()
        if self.use_ssl:
            sock = self._handshake(sock)
        sock.settimeout(self.timeout.read_timeout)
        self.sock = sock
        return sock

    def sendall(self, data: bytes) -> None:
        """Write all of ``data`` to the socket."""
        if self.sock is None:
            raise TransportFailure("Connection is not open")
        try:
            self.sock.sendall(data)
        except OSError as exc:
            raise TransportFailure(f"Network error during write: {exc}") from exc

    def makefile(self) -> BinaryIO:
        """Buffered binary reader over the socket."""
        if self.sock is None:
            raise TransportFailure("Connection is not open")
        return self.sock.makefile("rb")  # type: ignore[return-value]

    def close(self) -> None:
        """Close the socket; closing twice is harmless."""
        sock, self.sock = self.sock, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError:
            logger.debug("Error closing socket to %s", self.peer)

    def __enter__(self) -> "Connection":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()
