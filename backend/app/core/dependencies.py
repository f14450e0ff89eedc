"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.core.jwt import decode_access_token
from backend.app.core.token_revocation import is_token_revoked
from backend.app.core.exceptions import AuthenticationError, TokenRevokedError
from backend.app.db.session import get_db
from backend.app.models.enums import AccountType
from backend.app.services.accounts import get_account

# HTTP Bearer security scheme; missing headers are reported by get_access_token
security = HTTPBearer(auto_error=False)


async def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_auth_token: Optional[str] = Header(default=None, alias="x-auth-token"),
) -> str:
    """
    Extract the raw token from ``Authorization: Bearer`` or the legacy
    ``x-auth-token`` header.
    """
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    if x_auth_token:
        if x_auth_token.startswith("Bearer "):
            return x_auth_token[len("Bearer "):]
        return x_auth_token

    raise AuthenticationError("No token, authorization denied")


async def get_current_user(
    token: str = Depends(get_access_token),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Security checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked (logout)
    3. Verifies the account still exists in the database

    Args:
        token: Raw JWT from the request headers
        db: Database session for the account existence check

    Returns:
        Decoded token payload: {"sub", "user_id", "type", "exp"}

    Raises:
        AuthenticationError: 401 if authentication fails for any reason
    """
    # 1. Decode and validate JWT
    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Token is not valid")

    user_id = payload.get("user_id")
    account_type = payload.get("type")
    if not user_id or account_type not in {t.value for t in AccountType}:
        raise AuthenticationError("Invalid token payload")

    # 2. Check if this specific token has been revoked
    if await is_token_revoked(token):
        raise TokenRevokedError()

    # 3. Real-time database check: the account must still exist
    account = await get_account(db, AccountType(account_type), user_id)
    if account is None:
        raise AuthenticationError("Account not found")

    return payload
