"""Tests for encrypted credential handling."""

import base64

import pytest

from batch_uploader.utils.crypto_utils import (
    IV_LENGTH,
    PasswordDecryptionError,
    decrypt_password,
    encrypt_password,
)

SECRET = "unit-test-secret"


def test_encrypted_password_decrypts():
    encrypted = encrypt_password("p@ssw0rd", SECRET)
    assert encrypted != "p@ssw0rd"
    assert decrypt_password(encrypted, SECRET) == "p@ssw0rd"


def test_payload_starts_with_random_iv():
    first = base64.b64decode(encrypt_password("same", SECRET))
    second = base64.b64decode(encrypt_password("same", SECRET))
    assert first[:IV_LENGTH] != second[:IV_LENGTH]
    assert len(first) == IV_LENGTH + 16


def test_wrong_secret_key_does_not_reveal_password():
    encrypted = encrypt_password("p@ssw0rd", SECRET)
    try:
        result = decrypt_password(encrypted, "another-secret")
    except PasswordDecryptionError:
        return
    # Padding can occasionally check out by chance
    assert result != "p@ssw0rd"


@pytest.mark.parametrize("payload", ["not base64!!", base64.b64encode(b"short").decode()])
def test_malformed_payload(payload):
    with pytest.raises(PasswordDecryptionError):
        decrypt_password(payload, SECRET)


def test_missing_secret_key():
    with pytest.raises(PasswordDecryptionError, match="Secret key"):
        decrypt_password(encrypt_password("x", SECRET), "")
