"""src/agentry/__init__.py

Agentry - Web user agent library for Python.

Agentry sends HTTP requests through pluggable transports and takes care of
everything between the caller and the wire: default headers, cookies,
proxies, redirects and authentication challenges. It is built entirely on
Python's standard library.

Key Features:
    - Zero external dependencies
    - Case-insensitive header store with canonical field order
    - Parser and serializer for structured header values and entity tags
    - Redirect following with loop detection
    - Basic and Digest authentication
    - Extension points for every phase of a request
    - Memory optimized with __slots__

Example:
    Sync usage::

        from agentry import UserAgent

        agent = UserAgent(agent="my-crawler/1.0 ")
        response = agent.get("https://api.example.com/data")
        print(response.status_line)
        print(response.text())

    Header values::

        from agentry import join_header_words, split_header_words

        words = split_header_words('text/html; charset="utf-8"')
        join_header_words(words)
"""

from agentry.client.cookies import CookieJar
from agentry.client.user_agent import UserAgent
from agentry.exceptions import (
    AgentryError,
    InvalidArgument,
    InvalidRequest,
    RequestError,
    TransportFailure,
)
from agentry.http.etag import join_etag_list, split_etag_list
from agentry.http.header_words import join_header_words, split_header_words
from agentry.http.headers import Headers
from agentry.http.message import Request, Response
from agentry.http.url import URL
from agentry.version import __version__

__all__ = [
    "UserAgent",
    "CookieJar",
    "Request",
    "Response",
    "Headers",
    "URL",
    "split_header_words",
    "join_header_words",
    "split_etag_list",
    "join_etag_list",
    "AgentryError",
    "InvalidArgument",
    "InvalidRequest",
    "RequestError",
    "TransportFailure",
    "__version__",
]
