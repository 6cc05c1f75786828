"""src/agentry/http/body.py

HTTP body framing (chunked, fixed-length, read-to-close) for Agentry.

All readers work on a buffered binary file object, such as the one returned
by ``socket.makefile("rb")``, and yield the body in chunks.
"""

from typing import BinaryIO, Generator, Optional

from agentry.exceptions import ProtocolError
from agentry.http.headers import Headers

__all__ = [
    "read_exact",
    "iter_read_chunked",
    "iter_read_length",
    "iter_read_until_close",
    "iter_body",
]

DEFAULT_CHUNK_SIZE = 4096
_MAX_LINE = 65536


def read_exact(fp: BinaryIO, n: int) -> bytes:
    """Read exactly n bytes from the stream."""
    data = b""
    while len(data) < n:
        chunk = fp.read(n - len(data))
        if not chunk:
            raise ProtocolError("Connection closed prematurely")
        data += chunk
    return data


def _read_line(fp: BinaryIO) -> bytes:
    line = fp.readline(_MAX_LINE + 1)
    if len(line) > _MAX_LINE:
        raise ProtocolError("Chunk header line too long")
    if not line:
        raise ProtocolError("Connection closed during chunk header")
    return line


def iter_read_chunked(fp: BinaryIO) -> Generator[bytes, None, None]:
    """Iterate over chunked transfer-encoded body."""
    while True:
        line = _read_line(fp)
        try:
            size = int(line.split(b";")[0].strip(), 16)
        except ValueError as exc:
            raise ProtocolError(f"Invalid chunk size: {line!r}") from exc

        if size == 0:
            # Skip trailer fields up to the terminating empty line
            while _read_line(fp).strip():
                pass
            return

        yield read_exact(fp, size)
        # Consume chunk trailer CRLF
        read_exact(fp, 2)


def iter_read_length(
    fp: BinaryIO, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Generator[bytes, None, None]:
    """Iterate over a body of known length."""
    remaining = length
    while remaining > 0:
        chunk = fp.read(min(chunk_size, remaining))
        if not chunk:
            raise ProtocolError(
                f"Connection closed with {remaining} of {length} bytes outstanding"
            )
        remaining -= len(chunk)
        yield chunk


def iter_read_until_close(
    fp: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Generator[bytes, None, None]:
    """Iterate over a body delimited by the connection closing."""
    while True:
        chunk = fp.read(chunk_size)
        if not chunk:
            return
        yield chunk


def iter_body(
    fp: BinaryIO, headers: Headers, chunk_size: Optional[int] = None
) -> Generator[bytes, None, None]:
    """Pick the framing announced by ``headers`` and iterate over the body."""
    chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
    transfer_encoding = (headers.get("Transfer-Encoding") or "").lower()
    if "chunked" in transfer_encoding:
        return iter_read_chunked(fp)

    content_length = headers.get_all("Content-Length")
    if content_length:
        try:
            length = int(content_length[0])
        except ValueError as exc:
            raise ProtocolError(f"Invalid Content-Length: {content_length[0]!r}") from exc
        return iter_read_length(fp, length, chunk_size)

    return iter_read_until_close(fp, chunk_size)
