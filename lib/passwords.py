# =============================================================================
# lib/passwords.py - Password Policy and Hashing
# =============================================================================
# - is_strong_password(): minimal strength policy for seeded credentials
# - hash_password() / verify_password(): Argon2id via passlib
# =============================================================================

import re

from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 10
MIN_CHARACTER_CLASSES = 3

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto", argon2__type="id")

_CHARACTER_CLASSES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[^\w\s]"),
)


def is_strong_password(password: str) -> bool:
    """
    Check the seed password policy.

    A password is strong when it has at least 10 characters and includes
    at least 3 of: lowercase, uppercase, digit, symbol.

    Example:
        is_strong_password("Tr0ub4dor&3")  # True
        is_strong_password("lowercase12")  # False (2 classes)
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return False
    score = sum(1 for pattern in _CHARACTER_CLASSES if pattern.search(password))
    return score >= MIN_CHARACTER_CLASSES


def hash_password(password: str) -> str:
    result: str = pwd_context.hash(password)
    return result


def verify_password(plain_password: str, hashed_password: str) -> bool:
    result: bool = pwd_context.verify(plain_password, hashed_password)
    return result
