"""
Password hashing helpers.

Passwords are stored as Argon2 hashes.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

password_hasher = PasswordHasher(encoding="utf-8")


def get_password_hash(password: str) -> str:
    """
    Hash a plain-text password using Argon2.

    Args:
        password: The plain-text password to be hashed.

    Returns:
        The Argon2 hash of the given password.
    """
    return password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a plain-text password against a stored Argon2 hash.

    Args:
        password: The plain-text password to check.
        hashed_password: The stored Argon2 hash of the password.

    Returns:
        True if the password matches the hash, False otherwise.
    """
    if not hashed_password:
        return False
    try:
        return password_hasher.verify(hashed_password, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# Checked against when the login email is unknown.
DUMMY_PASSWORD_HASH = password_hasher.hash("not-a-real-password")
