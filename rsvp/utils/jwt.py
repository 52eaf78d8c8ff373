"""
JWT helpers for the admin token that guards destructive endpoints.
"""

import os
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import HTTPException, status
from jwt import PyJWTError

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60
ADMIN_SUBJECT = "admin"


def get_secret_key() -> str:
    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        msg = "JWT_SECRET_KEY not set in environment"
        raise RuntimeError(msg)
    return secret


def create_admin_token(expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": ADMIN_SUBJECT, "exp": expire}
    return jwt.encode(claims, get_secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode a JWT token and return the claims dict. Raises 401 if invalid
    or expired.
    """
    try:
        return jwt.decode(token, get_secret_key(), algorithms=[ALGORITHM])
    except PyJWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from exc


def require_admin_claims(token: str) -> dict[str, Any]:
    claims = decode_access_token(token)
    if claims.get("sub") != ADMIN_SUBJECT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return claims
