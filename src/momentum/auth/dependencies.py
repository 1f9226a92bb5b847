"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from momentum.auth.tokens import INVALID_TOKEN_MESSAGE, TokenSigner, get_token_signer
from momentum.errors import InvalidTokenError

_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    signer: TokenSigner = Depends(get_token_signer),
) -> int:
    """
    Validate the bearer token and return the caller's user id.

    A missing header and a bad token both produce the same 401.
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail=INVALID_TOKEN_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return signer.validate(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=401,
            detail=INVALID_TOKEN_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
