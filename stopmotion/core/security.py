# File: stopmotion/core/security.py

"""
Password hashing helpers.

Passwords are only ever handled as salted hashes produced by passlib.
Verification goes through passlib, which compares digests in constant time.
"""

from functools import lru_cache

from passlib.context import CryptContext

from stopmotion.core.config import settings


@lru_cache
def get_pwd_context() -> CryptContext:
    return CryptContext(schemes=settings.password_schemes, deprecated="auto")


def hash_password(raw_password: str) -> str:
    """
    Hash a plaintext password with the configured scheme.
    """
    return get_pwd_context().hash(raw_password)


def verify_password(raw_password: str, hashed_password: str) -> bool:
    """
    Verify that a raw password matches its stored hash.

    A malformed or unknown stored hash counts as a mismatch.
    """
    try:
        return get_pwd_context().verify(raw_password, hashed_password)
    except (ValueError, TypeError):
        return False
