"""Issuer derivation, redirect URI checks and the OAuth discovery documents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup; values that are not visible ASCII are ignored."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if all(ch == "\t" or " " <= ch <= "~" for ch in value):
            return value
        return None
    return None


def issuer_from_headers(headers: Mapping[str, str], fallback_base: str) -> str:
    """Derive the external issuer URL from request headers.

    ``X-Forwarded-Host`` and ``X-Forwarded-Proto`` take precedence so that
    deployments behind proxies advertise their public origin. Without a
    forwarded scheme, loopback hosts get ``http`` and everything else ``https``.
    """
    host = _header(headers, "x-forwarded-host")
    if host is None:
        host = _header(headers, "host")
    if host is None:
        return fallback_base
    scheme = _header(headers, "x-forwarded-proto")
    if scheme is None:
        scheme = "http" if host.startswith(("localhost", "127.0.0.1")) else "https"
    return f"{scheme}://{host}"


def is_valid_redirect_uri(uri: str) -> bool:
    """Accept any ``https`` URI, and plain ``http`` only for loopback hosts."""
    if uri.startswith("https://"):
        return True
    if not uri.startswith("http://"):
        return False
    authority = uri.removeprefix("http://").split("/", 1)[0]
    if authority.startswith("["):
        host, closed, _ = authority[1:].partition("]")
        if not closed:
            return False
    else:
        host = authority.split(":", 1)[0]
    return host in _LOOPBACK_HOSTS


def protected_resource_metadata(issuer: str, scopes: list[str]) -> dict[str, Any]:
    """The RFC 9728 protected-resource document for ``{issuer}/mcp``."""
    return {
        "resource": f"{issuer}/mcp",
        "authorization_servers": [issuer],
        "bearer_methods_supported": ["header"],
        "scopes_supported": list(scopes),
    }


def authorization_server_metadata(issuer: str, scopes: list[str]) -> dict[str, Any]:
    """The RFC 8414 authorization-server document."""
    return {
        "issuer": issuer,
        "authorization_endpoint": f"{issuer}/authorize",
        "token_endpoint": f"{issuer}/oauth/token",
        "registration_endpoint": f"{issuer}/oauth/register",
        "response_types_supported": ["code"],
        "grant_types_supported": ["authorization_code"],
        "token_endpoint_auth_methods_supported": ["client_secret_post", "none"],
        "code_challenge_methods_supported": ["S256"],
        "scopes_supported": list(scopes),
    }