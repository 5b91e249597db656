"""PKCE (RFC 7636) S256 challenge computation and verification."""

from __future__ import annotations

import base64
import hashlib
import hmac


def s256_challenge(verifier: str) -> str:
    """Return ``BASE64URL(SHA256(verifier))`` without padding."""
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify_s256(code_verifier: str, code_challenge: str) -> bool:
    """Check a verifier against a stored S256 challenge in constant time."""
    if not code_verifier or not code_challenge:
        return False
    return hmac.compare_digest(
        s256_challenge(code_verifier).encode("ascii"),
        code_challenge.encode("utf-8"),
    )