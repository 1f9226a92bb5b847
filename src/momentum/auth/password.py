"""
Password hashing and strength rules.

Hashes are argon2id encoded strings (salt and parameters embedded), so the rest
of the application only ever stores and compares opaque strings.
"""

from __future__ import annotations

import argon2

from momentum.config import get_settings

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet strength requirements."""


def hash_password(password: str) -> str:
    """One-way salted hash of a plaintext password."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored hash.

    Comparison is constant-time inside argon2. Returns False on mismatch or on
    a hash that cannot be parsed; never raises for bad input.
    """
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
        return False


def password_problems(password: str) -> list[str]:
    """Return every strength rule the password breaks, in a stable order."""
    settings = get_settings()
    if not password or not password.strip():
        return ["Password cannot be empty"]

    problems: list[str] = []
    if len(password) < settings.password_min_length:
        problems.append(f"Password must be at least {settings.password_min_length} characters long")
    if len(password) > settings.password_max_length:
        problems.append(f"Password must not exceed {settings.password_max_length} characters")
    if not any(c.isupper() for c in password):
        problems.append("Password must contain at least one uppercase letter")
    if not any(c.islower() for c in password):
        problems.append("Password must contain at least one lowercase letter")
    if not any(c.isdigit() for c in password):
        problems.append("Password must contain at least one number")
    return problems


def validate_password_strength(password: str) -> None:
    """Raise PasswordStrengthError naming the first broken rule."""
    problems = password_problems(password)
    if problems:
        raise PasswordStrengthError(problems[0])
