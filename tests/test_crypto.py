import pytest

from workspace_mcp.crypto import (
    DecryptError,
    InvalidNonceError,
    seal,
    unseal,
)


def make_key():
    return bytes(range(32))


def test_round_trip():
    aad = b"user-sub-123"
    plaintext = b"a-very-secret-google-refresh-token"
    sealed = seal(make_key(), aad, plaintext)
    assert unseal(make_key(), aad, sealed.nonce, sealed.ciphertext) == plaintext


def test_nonces_are_unique_across_calls():
    a = seal(make_key(), b"sub", b"hi")
    b = seal(make_key(), b"sub", b"hi")
    assert a.nonce != b.nonce
    assert a.ciphertext != b.ciphertext


def test_sealed_sizes():
    sealed = seal(make_key(), b"sub", b"data")
    assert len(sealed.nonce) == 12
    assert len(sealed.ciphertext) == len(b"data") + 16


def test_aad_mismatch_fails():
    sealed = seal(make_key(), b"sub-A", b"data")
    with pytest.raises(DecryptError):
        unseal(make_key(), b"sub-B", sealed.nonce, sealed.ciphertext)


def test_wrong_key_fails():
    sealed = seal(make_key(), b"sub", b"data")
    wrong = bytes([make_key()[0] ^ 0xFF]) + make_key()[1:]
    with pytest.raises(DecryptError):
        unseal(wrong, b"sub", sealed.nonce, sealed.ciphertext)


def test_tamper_detection():
    sealed = seal(make_key(), b"sub", b"data")
    tampered = bytes([sealed.ciphertext[0] ^ 0x01]) + sealed.ciphertext[1:]
    with pytest.raises(DecryptError):
        unseal(make_key(), b"sub", sealed.nonce, tampered)


def test_invalid_nonce_length():
    sealed = seal(make_key(), b"sub", b"data")
    with pytest.raises(InvalidNonceError):
        unseal(make_key(), b"sub", bytes(8), sealed.ciphertext)


def test_key_must_be_32_bytes():
    with pytest.raises(ValueError):
        seal(bytes(16), b"sub", b"data")