"""AES-256-GCM sealing with associated data.

Refresh tokens at rest are sealed with the operator's storage key, with
the user's Google ``sub`` bound as associated data so that ciphertext
moved to another row fails to decrypt.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_BYTES = 32
NONCE_BYTES = 12


class CryptoError(Exception):
    """Base class for sealing failures."""


class EncryptError(CryptoError):
    def __init__(self) -> None:
        super().__init__("encryption failed")


class DecryptError(CryptoError):
    def __init__(self) -> None:
        super().__init__(
            "decryption failed (wrong key, tampered ciphertext, or AAD mismatch)"
        )


class InvalidNonceError(CryptoError):
    def __init__(self) -> None:
        super().__init__("invalid nonce length")


@dataclass(frozen=True)
class Sealed:
    """A 12-byte random nonce and the ciphertext with its 16-byte tag appended."""

    nonce: bytes
    ciphertext: bytes


def _cipher(key: bytes) -> AESGCM:
    if len(key) != KEY_BYTES:
        raise ValueError(f"key must be {KEY_BYTES} bytes, got {len(key)}")
    return AESGCM(bytes(key))


def seal(key: bytes, aad: bytes, plaintext: bytes) -> Sealed:
    """Encrypt ``plaintext`` under a fresh random nonce, binding ``aad``."""
    cipher = _cipher(key)
    nonce = os.urandom(NONCE_BYTES)
    try:
        ciphertext = cipher.encrypt(nonce, bytes(plaintext), bytes(aad))
    except (OverflowError, ValueError) as exc:
        raise EncryptError() from exc
    return Sealed(nonce=nonce, ciphertext=ciphertext)


def unseal(key: bytes, aad: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """Decrypt and authenticate a sealed value."""
    if len(nonce) != NONCE_BYTES:
        raise InvalidNonceError()
    cipher = _cipher(key)
    try:
        return cipher.decrypt(bytes(nonce), bytes(ciphertext), bytes(aad))
    except (InvalidTag, ValueError) as exc:
        raise DecryptError() from exc