"""tests/conftest.py"""

from typing import Callable, List, Sequence, Union

import pytest

from agentry.client.user_agent import UserAgent
from agentry.http.message import Request, Response
from agentry.transport.base import Transport

Responder = Union[Callable[[Request], Response], Sequence[Response]]


class StubServer:
    """Answers requests from a callable or a list of responses, recording them."""

    def __init__(self, responder: Responder):
        self.responder = responder
        self.requests: List[Request] = []
        self.proxies: list = []
        self._queue = None if callable(responder) else list(responder)

    def respond(self, request: Request) -> Response:
        self.requests.append(request)
        if self._queue is None:
            result = self.responder(request)  # type: ignore[operator]
        else:
            result = self._queue.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    def factory(self, scheme: str, agent: UserAgent) -> Transport:
        return StubTransport(scheme, agent, self)


class StubTransport(Transport):
    """Transport serving responses from a StubServer."""

    __slots__ = ("server",)

    def __init__(self, scheme, agent, server):
        super().__init__(scheme, agent)
        self.server = server

    def execute(self, request, proxy=None, content_sink=None, read_size_hint=None, timeout=None):
        self.server.proxies.append(proxy)
        response = self.server.respond(request)
        body, response.content = response.content, b""
        return self.collect(content_sink, response, [body] if body else [])


@pytest.fixture
def stub_agent():
    """Fixture building a UserAgent whose http and https transports are stubbed."""

    def _stub_agent(responder: Responder, **options):
        server = StubServer(responder)
        transports = {"http": server.factory, "https": server.factory}
        transports.update(options.pop("transports", {}))
        agent = UserAgent(transports=transports, **options)
        return agent, server

    return _stub_agent
