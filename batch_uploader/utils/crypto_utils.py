"""
Password decryption for credentials stored encrypted in configuration.

Encrypted values are base64 of a 16-byte IV followed by AES-256-CBC
ciphertext. The key is derived from the secret key with PBKDF2-HMAC-SHA256,
using the secret key bytes as salt.
"""

import base64
import binascii
import os

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

IV_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 65536


class PasswordDecryptionError(Exception):
    """Encrypted password could not be decrypted"""

    pass


def _derive_key(secret_key: str) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=secret_key.encode("utf-8"),
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(secret_key.encode("utf-8"))


def decrypt_password(encrypted_password: str, secret_key: str) -> str:
    """Decrypt a base64 IV+ciphertext password with the given secret key."""
    if not secret_key:
        raise PasswordDecryptionError("Secret key is not configured")

    try:
        combined = base64.b64decode(encrypted_password, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PasswordDecryptionError(f"Invalid base64 payload: {e}")

    if len(combined) <= IV_LENGTH:
        raise PasswordDecryptionError("Encrypted payload is too short")

    iv, ciphertext = combined[:IV_LENGTH], combined[IV_LENGTH:]
    decryptor = Cipher(algorithms.AES(_derive_key(secret_key)), modes.CBC(iv)).decryptor()

    try:
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise PasswordDecryptionError(f"Decryption failed: {e}")


def encrypt_password(password: str, secret_key: str) -> str:
    """Encrypt a password into the format accepted by decrypt_password."""
    iv = os.urandom(IV_LENGTH)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(password.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_derive_key(secret_key)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(iv + ciphertext).decode("ascii")
