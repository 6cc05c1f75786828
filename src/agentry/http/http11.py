"""src/agentry/http/http11.py

HTTP/1.1 response head parser.
"""

from typing import BinaryIO, Tuple

from agentry.exceptions import ProtocolError
from agentry.http.headers import Headers

__all__ = ["HttpParser"]


class HttpParser:
    """
    HTTP/1.1 response head parser.

    Handles:
    - Status Line parsing.
    - Header parsing with repeated fields and obsolete line folding.
    - Limits on head size and field count.
    """

    def __init__(self, max_header_size: int = 65536, max_field_count: int = 100):
        self.max_header_size = max_header_size
        self.max_field_count = max_field_count

    def parse_head(self, fp: BinaryIO) -> Tuple[str, int, str, Headers]:
        """
        Read and parse a status line and header block.

        Returns:
            Tuple of (protocol, status_code, reason, headers)

        Raises:
            ProtocolError: If the head is too large or malformed.
        """
        consumed = 0

        def read_line() -> str:
            nonlocal consumed
            raw = fp.readline(self.max_header_size + 1)
            consumed += len(raw)
            if consumed > self.max_header_size:
                raise ProtocolError(
                    f"Headers exceed maximum size of {self.max_header_size} bytes"
                )
            return raw.decode("iso-8859-1").rstrip("\r\n")

        status_line = read_line()
        if not status_line:
            raise ProtocolError("Server closed connection without response")

        protocol, _, rest = status_line.partition(" ")
        code, _, reason = rest.strip().partition(" ")
        if not protocol.startswith("HTTP/") or not (code.isascii() and code.isdigit()):
            raise ProtocolError(f"Invalid status line: {status_line}")

        headers = Headers()
        last_name = None
        fields = 0
        while True:
            line = read_line()
            if not line:
                break

            if line[0] in " \t" and last_name is not None:
                values = headers.get_all(last_name)
                values[-1] = f"{values[-1]} {line.strip()}"
                headers.set(last_name, values)
                continue

            name, sep, value = line.partition(":")
            if not sep or not name.strip():
                # Garbage lines are skipped rather than rejected
                continue

            fields += 1
            if fields > self.max_field_count:
                raise ProtocolError(
                    f"More than {self.max_field_count} header fields"
                )
            last_name = name.strip()
            headers.push(last_name, value.strip())

        return protocol, int(code), reason.strip(), headers
