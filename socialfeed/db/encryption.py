"""Fernet encryption helpers for stored credential secrets."""

from cryptography.fernet import Fernet


def _get_fernet(key: str) -> Fernet:
    return Fernet(key.encode())


def encrypt(plaintext: str, key: str) -> str:
    """Encrypt a string and return the ciphertext as a UTF-8 string."""
    return _get_fernet(key).encrypt(plaintext.encode()).decode()


def decrypt(ciphertext: str, key: str) -> str:
    """Decrypt a Fernet ciphertext string back to plaintext.

    Raises cryptography.fernet.InvalidToken when the key does not match.
    """
    return _get_fernet(key).decrypt(ciphertext.encode()).decode()
