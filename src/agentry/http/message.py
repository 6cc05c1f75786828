"""src/agentry/http/message.py

HTTP request and response messages.

A message owns a :class:`~agentry.http.headers.Headers` instance and a
``bytes`` body. The most common header operations are also available on the
message itself.
"""

from http import HTTPStatus
from typing import List, Mapping, Optional, Union

from agentry.http.headers import FieldValue, Headers
from agentry.http.url import URL

__all__ = ["Message", "Request", "Response"]

HeadersInit = Union[Headers, Mapping[str, FieldValue], None]


class Message:
    """
    Base class of :class:`Request` and :class:`Response`.

    Attributes:
        headers: The message header fields.
        content: The message body.
    """

    __slots__ = ("headers", "content")

    def __init__(self, headers: HeadersInit = None, content: Union[str, bytes] = b""):
        if isinstance(headers, Headers):
            self.headers = headers.clone()
        else:
            self.headers = Headers(headers)
        self.content = content.encode("utf-8") if isinstance(content, str) else content

    def header(self, name: str, value: Optional[FieldValue] = None) -> Optional[str]:
        """Get, and optionally replace, a header field."""
        return self.headers.header(name, value)

    def push_header(self, name: str, value: FieldValue) -> List[str]:
        """Append a value to a header field."""
        return self.headers.push(name, value)

    def init_header(self, name: str, value: FieldValue) -> List[str]:
        """Set a header field unless it already has a value."""
        return self.headers.init(name, value)

    def remove_header(self, *names: str) -> List[str]:
        """Remove header fields, returning their values."""
        return self.headers.remove(*names)

    def headers_as_string(self, endl: str = "\n") -> str:
        """Header block of the message."""
        return self.headers.as_string(endl)

    def add_content(self, data: Union[str, bytes]) -> None:
        """Append data to the body."""
        self.content += data.encode("utf-8") if isinstance(data, str) else data

    def text(self, encoding: Optional[str] = None) -> str:
        """
        Return decoded text.
        The charset of the Content-Type field is used unless ``encoding`` is given.
        """
        if encoding is None:
            encoding = self.headers.content_type_params.get("charset") or "utf-8"
        try:
            return self.content.decode(encoding, errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")

    def as_string(self, endl: str = "\n") -> str:
        """Header block, an empty line and the body."""
        body = self.content.decode("iso-8859-1")
        if body and not body.endswith("\n"):
            body += endl
        return self.headers_as_string(endl) + endl + body


class Request(Message):
    """
    An HTTP request.

    Attributes:
        method: Request method, e.g. ``"GET"``.
        url: Absolute request URL.
        proxy: Proxy URL chosen for this request, if any.
    """

    __slots__ = ("method", "_url", "proxy")

    def __init__(
        self,
        method: Optional[str] = None,
        url: Union[str, URL, None] = None,
        headers: HeadersInit = None,
        content: Union[str, bytes] = b"",
    ) -> None:
        super().__init__(headers, content)
        self.method = method
        self._url: Optional[URL] = None
        self.url = url  # type: ignore[assignment]
        self.proxy: Optional[URL] = None

    @property
    def url(self) -> Optional[URL]:
        """The request URL."""
        return self._url

    @url.setter
    def url(self, value: Union[str, URL, None]) -> None:
        if value is None or value == "":
            self._url = None
        elif isinstance(value, URL):
            self._url = value
        else:
            self._url = URL(value)

    def clone(self) -> "Request":
        """Copy of the request with independent headers. The proxy is not copied."""
        return Request(self.method, self._url, self.headers, self.content)

    def as_string(self, endl: str = "\n") -> str:
        request_line = f"{self.method or '-'} {self._url if self._url else '-'}"
        return request_line + endl + super().as_string(endl)

    def __repr__(self) -> str:
        return f"<Request [{self.method} {self._url}]>"


class Response(Message):
    """
    An HTTP response.

    Attributes:
        code: Status code.
        message: Reason phrase.
        protocol: Protocol version string reported by the server, if any.
        request: The request that produced this response.
        previous: The response this one was retried from (redirect or
            authentication), forming a chain back to the first response.
    """

    __slots__ = ("code", "message", "protocol", "request", "previous")

    def __init__(
        self,
        code: int,
        message: Optional[str] = None,
        headers: HeadersInit = None,
        content: Union[str, bytes] = b"",
    ) -> None:
        super().__init__(headers, content)
        self.code = code
        self.message = message if message is not None else _reason(code)
        self.protocol: Optional[str] = None
        self.request: Optional[Request] = None
        self.previous: Optional["Response"] = None

    @property
    def status_code(self) -> int:
        """Alias for code."""
        return self.code

    @property
    def status_line(self) -> str:
        """Code and reason phrase, e.g. ``"404 Not Found"``."""
        return f"{self.code} {self.message}".rstrip()

    @property
    def is_info(self) -> bool:
        return 100 <= self.code < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self.code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.code < 400

    @property
    def is_error(self) -> bool:
        return self.code >= 400

    @property
    def base(self) -> Optional[URL]:
        """
        Base URL for resolving relative references in this response.

        Taken from the Content-Base, Content-Location or Base field,
        resolved against the request URL, or the request URL itself.
        """
        request_url = self.request.url if self.request is not None else None
        for name in ("Content-Base", "Content-Location", "Base"):
            values = self.headers.get_all(name)
            if values:
                return URL.join(values[0], request_url)
        return request_url

    @property
    def history(self) -> List["Response"]:
        """Previous responses, oldest first."""
        chain: List[Response] = []
        previous = self.previous
        while previous is not None:
            chain.append(previous)
            previous = previous.previous
        chain.reverse()
        return chain

    def clone(self) -> "Response":
        """Copy of the response; the request is cloned, the previous chain is not kept."""
        clone = Response(self.code, self.message, self.headers, self.content)
        clone.protocol = self.protocol
        if self.request is not None:
            clone.request = self.request.clone()
        return clone

    def as_string(self, endl: str = "\n") -> str:
        return self.status_line + endl + super().as_string(endl)

    def __repr__(self) -> str:
        return f"<Response [{self.code}]>"


def _reason(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""
