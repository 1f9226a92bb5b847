"""
HS256 JWT issuing and validation.

A `TokenSigner` is built per request from settings and the injected clock, so
tests can swap either without touching module state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt
from fastapi import Depends

from momentum.clock import Clock, get_clock
from momentum.config import get_settings
from momentum.errors import InvalidTokenError

if TYPE_CHECKING:
    from momentum.db.models import User

INVALID_TOKEN_MESSAGE = "Invalid authentication token"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenSigner:
    """Issues and validates signed, time-limited bearer tokens."""

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str,
        issuer: str,
        audience: str,
        expiration_minutes: int,
        clock: Clock,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience
        self._expiration = timedelta(minutes=expiration_minutes)
        self._clock = clock

    def issue(self, user: User) -> IssuedToken:
        """
        Create a token for a persisted user.

        Raises:
            RuntimeError: If no signing secret is configured.
        """
        if not self._secret:
            msg = "JWT signing secret is not configured"
            raise RuntimeError(msg)

        now = self._clock.now().replace(microsecond=0)
        expires_at = now + self._expiration
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "given_name": user.first_name or "",
            "family_name": user.last_name or "",
            "subscription_tier": user.subscription_tier,
            "iat": now,
            "exp": expires_at,
            "iss": self._issuer,
            "aud": self._audience,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> int:
        """
        Verify a token and return the user id it was issued for.

        Raises:
            InvalidTokenError: For any failure (expired, tampered, wrong issuer
                or audience, malformed subject). The cause is not disclosed.
        """
        if not self._secret or not token:
            raise InvalidTokenError(INVALID_TOKEN_MESSAGE)

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                audience=self._audience,
                leeway=0,
                options={
                    "require": ["exp", "iss", "aud", "sub"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(INVALID_TOKEN_MESSAGE) from e

        # Expiry is judged by the injected clock, not the wall clock.
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock.now().timestamp():
            raise InvalidTokenError(INVALID_TOKEN_MESSAGE)

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError(INVALID_TOKEN_MESSAGE) from e


def get_token_signer(clock: Clock = Depends(get_clock)) -> TokenSigner:
    """Build a signer from settings (FastAPI dependency)."""
    settings = get_settings()
    return TokenSigner(
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        expiration_minutes=settings.jwt_expiration_minutes,
        clock=clock,
    )
