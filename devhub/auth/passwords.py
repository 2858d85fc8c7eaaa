"""Credential hashing and verification."""

from __future__ import annotations

import re

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# At least one lowercase, one uppercase, one digit and one special character.
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # Unrecognised hash format
        return False


def password_problems(password: str) -> list[str]:
    """Return human-readable reasons ``password`` is too weak (empty if fine)."""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not STRONG_PASSWORD_RE.match(password):
        problems.append(
            "New password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )
    return problems
