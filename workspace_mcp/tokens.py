"""HS256 bearer tokens issued to MCP clients.

Tokens carry the issuer (derived per request), the user's stable Google
``sub`` and, when bound, the audience (``{iss}/mcp``, per RFC 8707).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import jwt

from .oauth_errors import AudienceMismatchError, JwtSignError, JwtVerifyError

TOKEN_LIFETIME_SECS = 30 * 24 * 3600
ALGORITHM = "HS256"
LEEWAY_SECS = 60


def now_secs() -> int:
    """Current Unix time in whole seconds."""
    return max(int(time.time()), 0)


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"claim {key!r} must be a string")
    return value


def _require_uint(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"claim {key!r} must be a non-negative integer")
    return value


@dataclass(frozen=True)
class Claims:
    iss: str
    sub: str
    iat: int
    exp: int
    aud: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready claim set; ``aud`` is left out when unset."""
        data: dict[str, Any] = {
            "iss": self.iss,
            "sub": self.sub,
            "iat": self.iat,
            "exp": self.exp,
        }
        if self.aud is not None:
            data["aud"] = self.aud
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Claims:
        """Build claims from a decoded payload, checking field types."""
        aud = data.get("aud")
        if aud is not None and not isinstance(aud, str):
            raise TypeError("claim 'aud' must be a string")
        return cls(
            iss=_require_str(data, "iss"),
            sub=_require_str(data, "sub"),
            iat=_require_uint(data, "iat"),
            exp=_require_uint(data, "exp"),
            aud=aud,
        )


def sign(secret: bytes, claims: Claims) -> str:
    """Sign the claims with HS256."""
    try:
        return jwt.encode(claims.to_dict(), secret, algorithm=ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise JwtSignError(exc) from exc


def verify(token: str, secret: bytes, expected_audience: str | None = None) -> Claims:
    """Check the signature and expiry, and the audience when both sides have one.

    Tokens without an ``aud`` claim are accepted for backwards compatibility.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            leeway=LEEWAY_SECS,
            options={"verify_aud": False, "verify_iat": False, "require": ["exp"]},
        )
        claims = Claims.from_dict(payload)
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
        raise JwtVerifyError(exc) from exc
    if (
        expected_audience is not None
        and claims.aud is not None
        and claims.aud != expected_audience
    ):
        raise AudienceMismatchError()
    return claims