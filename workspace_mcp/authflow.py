"""Request checks and responses for the authorization and token endpoints.

The server proxies end-user consent to Google. It redirects back to the MCP
client with its own single-use code, and the client redeems that code for
an MCP-bound bearer token.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from .discovery import is_valid_redirect_uri
from .oauth_errors import JwtError, oauth_err
from .tokens import TOKEN_LIFETIME_SECS, Claims, now_secs, sign

_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


class OAuthRequestError(Exception):
    """An OAuth request was rejected; carries the HTTP status and error body."""

    def __init__(
        self, status: HTTPStatus, error: str, description: str | None = None
    ) -> None:
        self.status = HTTPStatus(status)
        self.error = error
        self.description = description
        super().__init__(f"{error}: {description}" if description else error)

    def to_dict(self) -> dict[str, str]:
        """The RFC 6749 error body for this rejection."""
        return oauth_err(self.error, self.description).to_dict()


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = TOKEN_LIFETIME_SECS
    scope: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready response; ``scope`` is left out when unset."""
        body: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }
        if self.scope is not None:
            body["scope"] = self.scope
        return body


def validate_redirect_uris(redirect_uris: Iterable[str]) -> list[str]:
    """Check the redirect URIs of a client registration and return them."""
    uris = list(redirect_uris)
    if not uris:
        raise OAuthRequestError(
            HTTPStatus.BAD_REQUEST,
            "invalid_redirect_uri",
            "redirect_uris must not be empty",
        )
    for uri in uris:
        if not is_valid_redirect_uri(uri):
            raise OAuthRequestError(
                HTTPStatus.BAD_REQUEST,
                "invalid_redirect_uri",
                f"invalid redirect_uri: {uri}",
            )
    return uris


def validate_authorize_request(response_type: str, code_challenge_method: str) -> None:
    """Require ``response_type=code`` and the ``S256`` PKCE method."""
    if response_type != "code":
        raise OAuthRequestError(
            HTTPStatus.BAD_REQUEST,
            "unsupported_response_type",
            "only response_type=code is supported",
        )
    if code_challenge_method != "S256":
        raise OAuthRequestError(
            HTTPStatus.BAD_REQUEST,
            "invalid_request",
            "code_challenge_method must be S256",
        )


def build_callback_redirect(redirect_uri: str, code: str, state: str | None = None) -> str:
    """Append ``code`` (and ``state`` when given) to the client's redirect URI."""
    try:
        parts = urlsplit(redirect_uri)
    except ValueError as exc:
        raise OAuthRequestError(
            HTTPStatus.BAD_REQUEST,
            "invalid_request",
            f"invalid registered redirect_uri: {exc}",
        ) from exc
    if not parts.scheme:
        raise OAuthRequestError(
            HTTPStatus.BAD_REQUEST,
            "invalid_request",
            "invalid registered redirect_uri: relative URL without a base",
        )
    pairs = [("code", code)]
    if state is not None:
        pairs.append(("state", state))
    added = urlencode(pairs)
    query = f"{parts.query}&{added}" if parts.query else added
    path = parts.path
    if not path and parts.scheme.lower() in _SPECIAL_SCHEMES:
        path = "/"
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


def mint_access_token(
    secret: bytes, issuer: str, google_sub: str, resource: str | None = None
) -> TokenResponse:
    """Sign a bearer token for ``google_sub``, bound to ``resource`` or ``{issuer}/mcp``."""
    audience = resource if resource is not None else f"{issuer}/mcp"
    now = now_secs()
    claims = Claims(
        iss=issuer,
        sub=google_sub,
        iat=now,
        exp=now + TOKEN_LIFETIME_SECS,
        aud=audience,
    )
    try:
        token = sign(secret, claims)
    except JwtError as exc:
        raise OAuthRequestError(HTTPStatus.INTERNAL_SERVER_ERROR, "server_error") from exc
    return TokenResponse(access_token=token)