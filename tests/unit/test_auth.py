"""tests/unit/test_auth.py

Unit tests for authentication challenges and the bundled schemes.
"""

import hashlib
from unittest import mock

import pytest

from agentry.client.auth import (
    BasicAuthenticator,
    DigestAuthenticator,
    build_basic_auth_header,
    default_authenticators,
)
from agentry.client.user_agent import UserAgent
from agentry.exceptions import InvalidArgument, MalformedAuthChallenge
from agentry.http.message import Request, Response
from agentry.http.url import URL


def challenge(value, code=401):
    """Build a challenge response."""
    field = "Proxy-Authenticate" if code == 407 else "WWW-Authenticate"
    return Response(code, headers={field: value})


def md5(*parts):
    return hashlib.md5(":".join(parts).encode("utf-8")).hexdigest()


class TestParseChallenge:
    """Tests for UserAgent.parse_challenge()."""

    def test_basic(self):
        """Test parsing a Basic challenge."""
        assert UserAgent.parse_challenge('Basic realm="WallyWorld"') == (
            "basic",
            {"realm": "WallyWorld"},
        )

    def test_comma_separated_params(self):
        """Test that commas separate parameters of one challenge."""
        scheme, params = UserAgent.parse_challenge('Digest Realm="r", nonce="n", stale=FALSE')
        assert scheme == "digest"
        assert params == {"realm": "r", "nonce": "n", "stale": "FALSE"}

    def test_bad_scheme(self):
        """Test that invalid scheme names are rejected."""
        with pytest.raises(MalformedAuthChallenge, match="Bad authentication scheme 'b@d'"):
            UserAgent.parse_challenge("B@d realm=x")


class TestBasicAuthHeader:
    """Tests for build_basic_auth_header()."""

    def test_build_header(self):
        """Test the encoded header value."""
        assert build_basic_auth_header("user", "pass") == "Basic dXNlcjpwYXNz"

    def test_colon_in_username_rejected(self):
        """Test that a user name containing a colon cannot be encoded."""
        with pytest.raises(InvalidArgument, match="can't contain"):
            build_basic_auth_header("us:er", "pass")

    def test_colon_in_password_allowed(self):
        """Test that only the user name is restricted."""
        assert build_basic_auth_header("user", "pa:ss") == "Basic dXNlcjpwYTpzcw=="

    def test_default_authenticators(self):
        """Test that every call returns fresh instances."""
        first, second = default_authenticators(), default_authenticators()
        assert isinstance(first["basic"], BasicAuthenticator)
        assert isinstance(first["digest"], DigestAuthenticator)
        assert first["digest"] is not second["digest"]


class TestChallengeNegotiation:
    """Tests for answering 401 and 407 responses."""

    def test_missing_challenge(self, stub_agent):
        """Test a 401 without WWW-Authenticate."""
        agent, server = stub_agent([Response(401)])
        response = agent.get("http://example.com/")
        assert response.code == 401
        assert response.headers.get("Client-Warning") == "Missing Authenticate header"
        assert len(server.requests) == 1

    def test_unsupported_scheme(self, stub_agent):
        """Test that an unknown scheme is reported, not raised."""
        agent, _ = stub_agent([challenge("Negotiate")])
        response = agent.get("http://example.com/")
        assert response.code == 401
        assert response.headers.get("Client-Warning") == (
            "Unsupported authentication scheme 'negotiate'"
        )

    def test_malformed_scheme(self, stub_agent):
        """Test that a malformed scheme is reported."""
        agent, _ = stub_agent([challenge("B@d realm=x")])
        response = agent.get("http://example.com/")
        assert response.headers.get("Client-Warning") == "Bad authentication scheme 'b@d'"

    def test_next_challenge_tried(self, stub_agent):
        """Test that an unsupported challenge falls through to the next one."""
        agent, server = stub_agent(
            [challenge(["Negotiate", 'Basic realm="secret"']), Response(200)]
        )
        agent.credentials("example.com:80", "secret", "user", "pass")
        response = agent.get("http://example.com/")
        assert response.code == 200
        assert response.previous.headers.get_all("Client-Warning") == [
            "Unsupported authentication scheme 'negotiate'"
        ]
        assert server.requests[1].headers.authorization_basic == ("user", "pass")

    def test_custom_authenticator(self, stub_agent):
        """Test that registered authenticators get the parsed challenge."""
        authenticator = mock.Mock()
        authenticator.authenticate.return_value = Response(200)
        agent, server = stub_agent(
            [challenge('Token realm="x"')], authenticators={"Token": authenticator}
        )
        response = agent.get("http://example.com/")
        assert response.code == 200
        authenticator.authenticate.assert_called_once_with(
            agent, False, {"realm": "x"}, mock.ANY, server.requests[0], None, None
        )


class TestBasicAuthenticator:
    """Tests for the Basic scheme."""

    def test_retry_with_credentials(self, stub_agent):
        """Test that the request is repeated with credentials."""
        agent, server = stub_agent([challenge('Basic realm="secret"'), Response(200)])
        agent.credentials("example.com:80", "secret", "user", "pass")

        response = agent.get("http://example.com/private")

        assert response.code == 200
        assert len(response.history) == 1
        assert "Authorization" not in server.requests[0].headers
        assert server.requests[1].headers.get("Authorization") == "Basic dXNlcjpwYXNz"

    def test_no_credentials(self, stub_agent):
        """Test that the challenge is returned without credentials."""
        agent, server = stub_agent([challenge('Basic realm="secret"')])
        response = agent.get("http://example.com/")
        assert response.code == 401
        assert len(server.requests) == 1

    def test_credentials_failed_before(self, stub_agent):
        """Test that rejected credentials are not sent again."""
        agent, server = stub_agent(lambda request: challenge('Basic realm="secret"'))
        agent.credentials("example.com:80", "secret", "user", "wrong")

        response = agent.get("http://example.com/")

        assert response.code == 401
        assert len(server.requests) == 2
        assert response.headers.get("Client-Warning") == "Credentials for 'user' failed before"

    def test_colon_in_username_rejected(self, stub_agent):
        """Test that stored credentials with a colon in the user name are refused."""
        agent, server = stub_agent([challenge('Basic realm="secret"')])
        agent.credentials("example.com:80", "secret", "us:er", "pass")
        with pytest.raises(InvalidArgument):
            agent.get("http://example.com/")
        assert len(server.requests) == 1

    def test_proxy_challenge(self, stub_agent):
        """Test that a 407 is answered with Proxy-Authorization."""
        agent, server = stub_agent(
            [challenge('Basic realm="proxy"', 407), Response(200)]
        )
        agent.proxy("http", "http://proxy:3128/")
        with mock.patch.object(
            UserAgent, "get_basic_credentials", return_value=("pu", "pp")
        ) as lookup:
            response = agent.get("http://example.com/")

        assert response.code == 200
        lookup.assert_called_once_with("proxy", URL("http://proxy:3128/"), True)
        assert server.requests[1].headers.proxy_authorization_basic == ("pu", "pp")
        assert "Authorization" not in server.requests[1].headers
        assert server.proxies == [URL("http://proxy:3128/")] * 2

    def test_proxy_challenge_without_proxy(self, stub_agent):
        """Test that a 407 for a direct request is returned."""
        agent, server = stub_agent([challenge('Basic realm="proxy"', 407)])
        assert agent.get("http://example.com/").code == 407
        assert len(server.requests) == 1


class TestDigestAuthenticator:
    """Tests for the Digest scheme."""

    def test_digest_with_qop(self, stub_agent):
        """Test the Authorization value for qop=auth."""
        agent, server = stub_agent(
            [
                challenge('Digest realm="r", nonce="abc", qop="auth,auth-int", opaque="xyz"'),
                Response(200),
            ]
        )
        agent.credentials("example.com:80", "r", "user", "pass")

        agent.get("http://example.com/p?q=1")

        value = server.requests[1].headers.get("Authorization")
        assert value.startswith('Digest username="user", realm="r", qop="auth", algorithm="MD5"')
        scheme, params = UserAgent.parse_challenge(value)
        assert scheme == "digest"
        assert params["uri"] == "/p?q=1"
        assert params["nc"] == "00000001"
        assert params["opaque"] == "xyz"
        expected = md5(
            md5("user", "r", "pass"),
            "abc",
            "00000001",
            params["cnonce"],
            "auth",
            md5("GET", "/p?q=1"),
        )
        assert params["response"] == expected

    def test_digest_without_qop(self):
        """Test the RFC 2069 form when the server sends no qop."""
        request = Request("GET", "http://example.com/dir/")
        value = DigestAuthenticator().auth_header(
            "user", "pass", {"realm": "r", "nonce": "n"}, request
        )
        expected = md5(md5("user", "r", "pass"), "n", md5("GET", "/dir/"))
        assert value == (
            'Digest username="user", realm="r", algorithm="MD5", uri="/dir/", '
            f'nonce="n", response="{expected}"'
        )

    def test_nonce_count_increments(self, stub_agent):
        """Test that repeated challenges count nonce use until max_redirect."""
        agent, server = stub_agent(
            lambda request: challenge('Digest realm="r", nonce="abc", qop="auth"'),
            max_redirect=3,
        )
        agent.credentials("example.com:80", "r", "user", "pass")

        response = agent.get("http://example.com/")

        assert len(server.requests) == 4
        counts = [
            UserAgent.parse_challenge(r.headers.get("Authorization"))[1]["nc"]
            for r in server.requests[1:]
        ]
        assert counts == ["00000001", "00000002", "00000003"]
        assert "Redirect loop detected" in response.headers.get("Client-Warning")
