import pytest

from workspace_mcp.discovery import (
    authorization_server_metadata,
    is_valid_redirect_uri,
    issuer_from_headers,
    protected_resource_metadata,
)


def _headers(host, proto=None):
    headers = {"Host": host}
    if proto is not None:
        headers["X-Forwarded-Proto"] = proto
    return headers


def test_issuer_localhost_defaults_to_http():
    assert issuer_from_headers(_headers("localhost:8433"), "http://fallback") == (
        "http://localhost:8433"
    )


def test_issuer_loopback_ip_defaults_to_http():
    assert issuer_from_headers(_headers("127.0.0.1:9000"), "http://fallback") == (
        "http://127.0.0.1:9000"
    )


def test_issuer_remote_defaults_to_https():
    assert issuer_from_headers(
        _headers("google-mcp.example.com"), "http://fallback"
    ) == "https://google-mcp.example.com"


def test_issuer_honors_forwarded_proto():
    assert issuer_from_headers(
        _headers("google-mcp.example.com", "http"), "http://fb"
    ) == "http://google-mcp.example.com"


def test_issuer_prefers_forwarded_host():
    headers = {"host": "localhost:8433", "x-forwarded-host": "public.example.com"}
    assert issuer_from_headers(headers, "http://fb") == "https://public.example.com"


def test_issuer_falls_back_without_host():
    assert issuer_from_headers({"X-Forwarded-Proto": "http"}, "http://fb") == "http://fb"
    assert issuer_from_headers({}, "https://base.example.com") == (
        "https://base.example.com"
    )


@pytest.mark.parametrize(
    "uri",
    [
        "https://claude.ai/api/cb",
        "http://localhost:3000/cb",
        "http://127.0.0.1:5173/auth",
        "http://[::1]/x",
        "http://localhost",
        "http://[::1]:8080/cb",
    ],
)
def test_valid_redirect_uris(uri):
    assert is_valid_redirect_uri(uri) is True


@pytest.mark.parametrize(
    "uri",
    [
        "http://example.com/cb",
        "ftp://x",
        "javascript:alert(1)",
        "http://[::1/x",
        "http://localhost.example.com/cb",
        "",
    ],
)
def test_invalid_redirect_uris(uri):
    assert is_valid_redirect_uri(uri) is False


def test_protected_resource_metadata():
    doc = protected_resource_metadata("https://mcp.example.com", ["openid", "email"])
    assert doc == {
        "resource": "https://mcp.example.com/mcp",
        "authorization_servers": ["https://mcp.example.com"],
        "bearer_methods_supported": ["header"],
        "scopes_supported": ["openid", "email"],
    }


def test_authorization_server_metadata():
    doc = authorization_server_metadata("https://mcp.example.com", ["openid"])
    assert doc == {
        "issuer": "https://mcp.example.com",
        "authorization_endpoint": "https://mcp.example.com/authorize",
        "token_endpoint": "https://mcp.example.com/oauth/token",
        "registration_endpoint": "https://mcp.example.com/oauth/register",
        "response_types_supported": ["code"],
        "grant_types_supported": ["authorization_code"],
        "token_endpoint_auth_methods_supported": ["client_secret_post", "none"],
        "code_challenge_methods_supported": ["S256"],
        "scopes_supported": ["openid"],
    }
    assert next(iter(doc)) == "issuer"