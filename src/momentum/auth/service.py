"""
Authentication business logic.

Handles user registration and email + password login. Token issuing is
delegated to the `TokenSigner` passed in by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from momentum.auth.password import hash_password, validate_password_strength, verify_password
from momentum.db.models import User
from momentum.errors import DuplicateUserError, InvalidCredentialsError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from momentum.auth.tokens import TokenSigner
    from momentum.clock import Clock

logger = structlog.get_logger()

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful registration or login."""

    user_id: int
    token: str
    email: str
    first_name: str
    last_name: str
    expires_at: datetime


def _auth_result(user: User, signer: TokenSigner) -> AuthResult:
    issued = signer.issue(user)
    return AuthResult(
        user_id=user.id,
        token=issued.token,
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        expires_at=issued.expires_at,
    )


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


async def user_exists(db: AsyncSession, email: str) -> bool:
    """Whether an account is registered under this email (case-insensitive)."""
    result = await db.execute(
        select(func.count()).select_from(User).where(func.lower(User.email) == email.lower().strip())
    )
    return result.scalar_one() > 0


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    signer: TokenSigner,
    clock: Clock,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
) -> AuthResult:
    """
    Register a new user with email + password and issue a token.

    Raises:
        PasswordStrengthError: If the password breaks a strength rule.
        DuplicateUserError: If the email is already registered.
    """
    validate_password_strength(password)

    email = email.lower().strip()
    if await user_exists(db, email):
        logger.info("registration_duplicate_email")
        msg = "User with this email already exists"
        raise DuplicateUserError(msg)

    now = clock.now()
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        subscription_tier="free",
        onboarding_complete=False,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email.
        await db.rollback()
        msg = "User with this email already exists"
        raise DuplicateUserError(msg) from e

    logger.info("user_registered", user_id=user.id)
    return _auth_result(user, signer)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(
    db: AsyncSession,
    signer: TokenSigner,
    *,
    email: str,
    password: str,
) -> AuthResult:
    """
    Authenticate a user with email + password. Writes nothing.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password (same message).
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="unknown_email" if user is None else "bad_password")
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    logger.info("user_logged_in", user_id=user.id)
    return _auth_result(user, signer)
