"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from momentum.auth.password import PasswordStrengthError
from momentum.auth.schemas import AuthHealthResponse, AuthResponse, LoginRequest, RegisterRequest
from momentum.auth.service import AuthResult, authenticate_user, register_user
from momentum.auth.tokens import TokenSigner, get_token_signer
from momentum.clock import Clock, get_clock
from momentum.config import get_settings
from momentum.database import get_session
from momentum.errors import DuplicateUserError, InvalidCredentialsError

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        email=result.email,
        first_name=result.first_name,
        last_name=result.last_name,
        expires_at=result.expires_at,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    signer: TokenSigner = Depends(get_token_signer),
    clock: Clock = Depends(get_clock),
) -> AuthResponse:
    """Register with email + password + names."""
    try:
        result = await register_user(
            db,
            signer,
            clock,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
        )
    except (PasswordStrengthError, DuplicateUserError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await db.commit()
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthResponse:
    """Login with email + password."""
    try:
        result = await authenticate_user(db, signer, email=body.email, password=body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return _auth_response(result)


@router.get("/health", response_model=AuthHealthResponse)
async def auth_health(clock: Clock = Depends(get_clock)) -> AuthHealthResponse:
    """Liveness of the authentication service."""
    settings = get_settings()
    return AuthHealthResponse(
        status="healthy",
        service=settings.auth_service_name,
        timestamp=clock.now(),
        version=settings.app_version,
    )
