"""tests/unit/test_user_agent.py

Unit tests for UserAgent preparation, dispatch and configuration.
"""

import pytest

from agentry.client.cookies import CookieJar
from agentry.client.user_agent import UserAgent
from agentry.exceptions import InvalidArgument, InvalidRequest, TransportFailure
from agentry.http.message import Request, Response
from agentry.http.url import URL
from agentry.version import __version__


class TestPrepareRequest:
    """Tests for UserAgent.prepare_request()."""

    def test_missing_method(self):
        """Test that a request without method is rejected."""
        with pytest.raises(InvalidRequest, match="Method missing"):
            UserAgent().prepare_request(Request(None, "http://example.com/"))

    def test_missing_url(self):
        """Test that a request without URL is rejected."""
        with pytest.raises(InvalidRequest, match="URL missing"):
            UserAgent().prepare_request(Request("GET"))

    def test_relative_url(self):
        """Test that a relative URL is rejected."""
        with pytest.raises(InvalidRequest, match="must be absolute"):
            UserAgent().prepare_request(Request("GET", "/relative"))

    def test_not_a_request(self):
        """Test that other objects are rejected."""
        with pytest.raises(InvalidRequest):
            UserAgent().prepare_request(None)
        with pytest.raises(InvalidRequest, match="dict"):
            UserAgent().prepare_request({"method": "GET"})

    def test_invalid_request_propagates_from_request(self, stub_agent):
        """Test that validation errors are raised, not turned into responses."""
        agent, server = stub_agent([])
        with pytest.raises(InvalidRequest):
            agent.request(Request("GET", "relative/path"))
        assert server.requests == []

    def test_default_headers_added(self):
        """Test that User-Agent and From are added."""
        agent = UserAgent(from_="me@example.com")
        request = agent.prepare_request(Request("GET", "http://example.com/"))
        assert request.headers.get("User-Agent") == f"agentry/{__version__}"
        assert request.headers.get("From") == "me@example.com"

    def test_request_headers_win(self):
        """Test that defaults never replace fields of the request."""
        agent = UserAgent(default_headers={"Accept": "text/html"})
        request = Request("GET", "http://example.com/", {"User-Agent": "mine", "Accept": "*/*"})
        agent.prepare_request(request)
        assert request.headers.get("User-Agent") == "mine"
        assert request.headers.get("Accept") == "*/*"

    def test_range_from_max_size(self):
        """Test that max_size asks for a byte range."""
        request = UserAgent(max_size=10).prepare_request(Request("GET", "http://a/"))
        assert request.headers.get("Range") == "bytes=0-9"
        request = UserAgent(max_size=0).prepare_request(Request("GET", "http://a/"))
        assert request.headers.get("Range") == "bytes=0-0"

    def test_handler_order(self):
        """Test that preprepare runs before defaults and prepare after them."""
        agent = UserAgent()
        seen = []
        agent.add_handler(
            "request_preprepare", lambda r, a, h: seen.append(("pre", r.headers.get("User-Agent")))
        )
        agent.add_handler(
            "request_prepare", lambda r, a, h: seen.append(("prep", r.headers.get("User-Agent")))
        )
        agent.prepare_request(Request("GET", "http://a/"))
        assert seen == [("pre", None), ("prep", f"agentry/{__version__}")]


class TestAgentConfiguration:
    """Tests for the configuration accessors."""

    def test_default_agent(self):
        """Test the default product token."""
        assert UserAgent().agent == f"agentry/{__version__}"

    def test_agent_trailing_space_appends_default(self):
        """Test that an agent ending in whitespace gets the default appended."""
        assert UserAgent(agent="bot/1.0 ").agent == f"bot/1.0 agentry/{__version__}"

    def test_agent_cleared(self):
        """Test that an empty agent removes the field."""
        agent = UserAgent(agent="")
        assert agent.agent is None
        request = agent.prepare_request(Request("GET", "http://a/"))
        assert "User-Agent" not in request.headers

    def test_default_header(self):
        """Test reading and replacing default header fields."""
        agent = UserAgent()
        assert agent.default_header("Accept-Language", "en") is None
        assert agent.default_header("Accept-Language") == "en"
        assert agent.default_headers.get("Accept-Language") == "en"

    def test_from(self):
        """Test setting and clearing the From field."""
        agent = UserAgent()
        agent.from_ = "me@example.com"
        assert agent.default_headers.get("From") == "me@example.com"
        agent.from_ = None
        assert agent.from_ is None

    def test_protocol_lists_validated(self):
        """Test that protocol lists must be lists."""
        with pytest.raises(InvalidArgument):
            UserAgent(protocols_allowed="http")
        agent = UserAgent(protocols_forbidden=("FTP",))
        assert agent.protocols_forbidden == ["ftp"]

    def test_is_protocol_supported(self):
        """Test protocol support with allow and forbid lists."""
        agent = UserAgent()
        assert agent.is_protocol_supported("http")
        assert agent.is_protocol_supported("HTTPS")
        assert agent.is_protocol_supported(URL("http://a/"))
        assert not agent.is_protocol_supported("gopher")
        agent.protocols_allowed = ["https"]
        assert not agent.is_protocol_supported("http")
        agent.protocols_allowed = None
        agent.protocols_forbidden = ["http"]
        assert not agent.is_protocol_supported("http")
        assert agent.is_protocol_supported("https")

    def test_is_protocol_supported_illegal_scheme(self):
        """Test that scheme names with non-word characters are rejected."""
        with pytest.raises(InvalidArgument, match="Illegal scheme"):
            UserAgent().is_protocol_supported("ht tp")

    def test_repr(self):
        """Test repr shows the agent string."""
        assert repr(UserAgent(agent="x/1")) == "<UserAgent [x/1]>"


class TestSendRequest:
    """Tests for dispatching through transports."""

    def test_response_bookkeeping(self, stub_agent):
        """Test that the response records its request and a client date."""
        agent, server = stub_agent([Response(200, content=b"ok")])
        request = Request("GET", "http://example.com/")
        response = agent.request(request)
        assert response.code == 200
        assert response.content == b"ok"
        assert response.request is request
        assert response.headers.client_date is not None
        assert server.requests == [request]

    def test_scheme_not_allowed(self, stub_agent):
        """Test that a disallowed scheme gives a 501 without calling the transport."""
        agent, server = stub_agent([], protocols_allowed=["https"])
        response = agent.get("http://example.com/")
        assert response.code == 501
        assert response.headers.get("Client-Warning") == "Internal response"
        assert response.headers.content_type == "text/plain"
        assert response.content == b"501 Access to 'http' URIs has been disabled\n"
        assert server.requests == []

    def test_scheme_forbidden(self, stub_agent):
        """Test that a forbidden scheme gives a 501."""
        agent, server = stub_agent([], protocols_forbidden=["http"])
        assert agent.get("http://example.com/").code == 501
        assert server.requests == []

    def test_send_without_url_rejected(self):
        """Test that sending a request without URL raises InvalidRequest."""
        with pytest.raises(InvalidRequest, match="URL missing"):
            UserAgent().send_request(Request("GET"))

    def test_no_transport(self):
        """Test that a scheme without transport gives a 501."""
        response = UserAgent().get("gopher://example.com/")
        assert response.code == 501
        assert response.message == "Protocol scheme 'gopher' is not supported"

    def test_transport_failure_becomes_response(self, stub_agent):
        """Test that transport errors turn into 500 responses."""
        agent, _ = stub_agent([TransportFailure("boom")])
        response = agent.get("http://example.com/")
        assert response.code == 500
        assert response.message == "boom"
        assert response.content == b"500 boom\n"
        assert response.headers.get("Client-Warning") == "Internal response"

    def test_transport_failure_propagates_without_eval(self, stub_agent):
        """Test that use_eval=False lets transport errors through."""
        agent, _ = stub_agent([TransportFailure("boom")], use_eval=False)
        with pytest.raises(TransportFailure, match="boom"):
            agent.get("http://example.com/")

    def test_request_send_handler_short_circuits(self, stub_agent):
        """Test that a request_send handler can supply the response."""
        agent, server = stub_agent([])
        agent.add_handler("request_send", lambda r, a, h: Response(203), m_host="cached.example")
        response = agent.get("http://cached.example/")
        assert response.code == 203
        assert response.headers.client_date is not None
        assert server.requests == []

    def test_response_done_handler(self, stub_agent):
        """Test that response_done handlers see every response."""
        agent, _ = stub_agent([Response(200)])
        seen = []
        agent.add_handler("response_done", lambda r, a, h: seen.append(r.code))
        agent.get("http://example.com/")
        assert seen == [200]

    def test_max_size_truncates(self, stub_agent):
        """Test that bodies over max_size are cut and flagged."""
        agent, _ = stub_agent([Response(200, content=b"0123456789")], max_size=4)
        response = agent.get("http://example.com/")
        assert response.content == b"0123"
        assert response.headers.get("Client-Aborted") == "max_size"

    def test_callable_content_sink(self, stub_agent):
        """Test that a callable sink receives the body."""
        agent, _ = stub_agent([Response(200, content=b"data")])
        chunks = []
        response = agent.get(
            "http://example.com/", content_sink=lambda chunk, resp, transport: chunks.append(chunk)
        )
        assert chunks == [b"data"]
        assert response.content == b""

    def test_simple_request_does_not_follow(self, stub_agent):
        """Test that simple_request returns redirects as they are."""
        agent, server = stub_agent([Response(302, headers={"Location": "/x"})])
        response = agent.simple_request(Request("GET", "http://example.com/"))
        assert response.code == 302
        assert len(server.requests) == 1


class TestShortcuts:
    """Tests for the request shortcuts."""

    def test_methods(self, stub_agent):
        """Test that each shortcut uses its method."""
        agent, server = stub_agent(lambda request: Response(200))
        agent.get("http://a/")
        agent.head("http://a/")
        agent.delete("http://a/")
        agent.put("http://a/", "text")
        assert [r.method for r in server.requests] == ["GET", "HEAD", "DELETE", "PUT"]
        assert server.requests[-1].content == b"text"

    def test_post_form(self, stub_agent):
        """Test that a mapping is posted as an urlencoded form."""
        agent, server = stub_agent([Response(200)])
        agent.post("http://a/form", {"a": "1", "b": ["2", "3"]}, headers={"X-Test": "1"})
        sent = server.requests[0]
        assert sent.method == "POST"
        assert sent.content == b"a=1&b=2&b=3"
        assert sent.headers.get("Content-Type") == "application/x-www-form-urlencoded"
        assert sent.headers.get("X-Test") == "1"


class TestProxies:
    """Tests for proxy selection."""

    def test_proxy_get_and_set(self):
        """Test that proxy returns the previous value."""
        agent = UserAgent()
        assert agent.proxy("http", "http://proxy:3128/") is None
        assert agent.proxy("http") == "http://proxy:3128/"
        assert agent.proxy(["http", "https"], "http://other:8080/") == ["http://proxy:3128/", None]
        assert agent.proxy("https") == "http://other:8080/"

    def test_proxy_used_for_request(self, stub_agent):
        """Test that the proxy is chosen before sending."""
        agent, server = stub_agent(lambda request: Response(200))
        agent.proxy("http", "http://proxy:3128/")
        response = agent.get("http://example.com/")
        assert server.proxies == [URL("http://proxy:3128/")]
        assert response.request.proxy == "http://proxy:3128/"

    def test_no_proxy_domains(self, stub_agent):
        """Test that no_proxy domains bypass the proxy."""
        agent, server = stub_agent(lambda request: Response(200))
        agent.proxy("http", "http://proxy:3128/")
        agent.no_proxy("example.com")
        agent.get("http://www.example.com/")
        agent.get("http://example.org/")
        assert server.proxies == [None, URL("http://proxy:3128/")]
        agent.no_proxy()
        assert agent.proxy_for(URL("http://www.example.com/")) == "http://proxy:3128/"

    def test_proxy_removed(self):
        """Test that removing the last proxy drops the handler."""
        agent = UserAgent()
        agent.proxy("http", "http://proxy:3128/")
        assert agent.get_my_handler("request_preprepare", owner="proxy") is not None
        agent.proxy("http", None)
        assert agent.get_my_handler("request_preprepare", owner="proxy") is None

    def test_proxy_handler_ignores_other_messages(self):
        """Test that proxy selection leaves messages other than requests alone."""
        agent = UserAgent()
        agent.proxy("http", "http://proxy:3128/")
        response = Response(200)
        agent.run_handlers("request_preprepare", response)
        assert not hasattr(response, "proxy")

    def test_proxy_handler_skips_request_without_url(self):
        """Test that no proxy is chosen for a request without URL."""
        agent = UserAgent()
        agent.proxy("http", "http://proxy:3128/")
        request = Request("GET")
        agent.run_handlers("request_preprepare", request)
        assert request.proxy is None


class TestCredentials:
    """Tests for the credential store."""

    def test_credentials(self):
        """Test storing and looking up credentials."""
        agent = UserAgent()
        assert agent.credentials("Example.com:80", "realm", "user", "pass") is None
        assert agent.credentials("example.com:80", "realm") == ("user", "pass")
        assert agent.get_basic_credentials("realm", URL("http://EXAMPLE.com/")) == ("user", "pass")
        assert agent.get_basic_credentials("other", URL("http://example.com/")) is None
        assert agent.get_basic_credentials("realm", URL("http://example.com/"), True) is None


class TestHandlers:
    """Tests for the handler accessors of the agent."""

    def test_set_my_handler_replaces(self):
        """Test that set_my_handler keeps one handler per owner."""
        agent = UserAgent()
        agent.set_my_handler("response_done", lambda *a: None, owner="mine")
        agent.set_my_handler("response_done", lambda *a: None, owner="mine")
        assert len(agent.handlers("response_done", Response(200))) == 1
        agent.set_my_handler("response_done", None, owner="mine")
        assert agent.handlers("response_done", Response(200)) == []

    def test_get_my_handler_create(self):
        """Test that get_my_handler can create a state holder."""
        agent = UserAgent()
        assert agent.get_my_handler("request_prepare", owner="state") is None
        handler = agent.get_my_handler("request_prepare", owner="state", create=True)
        assert agent.get_my_handler("request_prepare", owner="state") is handler
        assert agent.run_handlers("request_prepare", Request("GET", "http://a/")) is None

    def test_remove_handler(self):
        """Test removing handlers from all phases."""
        agent = UserAgent()
        agent.add_handler("request_prepare", lambda *a: None, owner="x")
        agent.add_handler("response_done", lambda *a: None, owner="x")
        assert len(agent.remove_handler(owner="x")) == 2


class TestCookieJarIntegration:
    """Tests for the cookie jar handlers."""

    def test_cookies_round_trip(self, stub_agent):
        """Test that cookies set by one response are sent with the next request."""
        jar = CookieJar()
        agent, server = stub_agent(
            [Response(200, headers={"Set-Cookie": "sid=abc; Path=/"}), Response(200)],
            cookie_jar=jar,
        )
        agent.get("http://example.com/login")
        agent.get("http://example.com/home")
        assert len(jar) == 1
        assert "Cookie" not in server.requests[0].headers
        assert server.requests[1].headers.get("Cookie") == "sid=abc"

    def test_cookie_jar_removed(self):
        """Test that clearing the jar removes its handlers."""
        agent = UserAgent(cookie_jar=CookieJar())
        request = Request("GET", "http://a/")
        assert len(agent.handlers("request_prepare", request)) == 1
        agent.cookie_jar = None
        assert agent.handlers("request_prepare", request) == []
        assert agent.handlers("response_done", Response(200)) == []


class TestClone:
    """Tests for UserAgent.clone()."""

    def test_clone_is_independent(self):
        """Test that the clone copies configuration but shares no state."""
        agent = UserAgent(agent="bot/1", cookie_jar=CookieJar(), max_redirect=3)
        agent.proxy("http", "http://proxy:3128/")
        agent.credentials("a:80", "r", "u", "p")
        agent.add_handler("response_done", lambda *a: None)

        clone = agent.clone()
        assert clone.agent == "bot/1"
        assert clone.max_redirect == 3
        assert clone.cookie_jar is None
        assert clone.proxy("http") == "http://proxy:3128/"
        assert clone.get_my_handler("request_preprepare", owner="proxy") is not None
        assert clone.handlers("response_done", Response(200)) == []
        assert clone.credentials("a:80", "r") == ("u", "p")
        assert clone.authenticators["digest"] is not agent.authenticators["digest"]

        clone.agent = "other/2"
        clone.credentials("a:80", "r", "x", "y")
        clone.requests_redirectable.append("POST")
        assert agent.agent == "bot/1"
        assert agent.credentials("a:80", "r") == ("u", "p")
        assert agent.requests_redirectable == ["GET", "HEAD"]
