"""Error types for token handling and the OAuth error response body."""

from __future__ import annotations

from dataclasses import dataclass


class JwtError(Exception):
    """Base class for bearer-token failures."""


class JwtSignError(JwtError):
    """A token could not be signed."""

    def __init__(self, detail: object) -> None:
        self.detail = detail
        super().__init__(f"sign: {detail}")


class JwtVerifyError(JwtError):
    """A token failed signature or claim validation."""

    def __init__(self, detail: object) -> None:
        self.detail = detail
        super().__init__(f"verify: {detail}")


class AudienceMismatchError(JwtError):
    """A token's audience differs from the one expected."""

    def __init__(self) -> None:
        super().__init__("audience mismatch")


@dataclass(frozen=True)
class OAuthErrorBody:
    """An RFC 6749 error response."""

    error: str
    error_description: str | None = None

    def to_dict(self) -> dict[str, str]:
        """JSON-ready mapping; ``error_description`` is left out when unset."""
        body = {"error": self.error}
        if self.error_description is not None:
            body["error_description"] = self.error_description
        return body


def oauth_err(error: str, description: str | None = None) -> OAuthErrorBody:
    """Build an OAuth error body."""
    return OAuthErrorBody(error=error, error_description=description)