"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from momentum.schemas import CamelModel


class RegisterRequest(CamelModel):
    """Email registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=128)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "must not be blank"
            raise ValueError(msg)
        return v


class LoginRequest(CamelModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthResponse(CamelModel):
    """Returned after a successful registration or login."""

    token: str
    email: str
    first_name: str
    last_name: str
    expires_at: datetime


class AuthHealthResponse(CamelModel):
    status: str
    service: str
    timestamp: datetime
    version: str
