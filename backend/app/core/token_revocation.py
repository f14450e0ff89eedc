"""
Token Revocation System using Redis.

Implements token blacklisting so that a logged-out JWT stops working
before its natural expiry.
"""

import logging
from typing import Optional
from datetime import datetime, timezone
import backend.app.core.redis_client as redis_store
from backend.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


def _remaining_ttl_seconds(expires_at: Optional[int]) -> int:
    """Seconds until the token's own expiry, or the full token lifetime if unknown."""
    if expires_at is None:
        return settings.access_token_expire_minutes * 60
    remaining = int(expires_at - datetime.now(timezone.utc).timestamp())
    return max(remaining, 1)


async def revoke_token(token: str, account_id: int, expires_at: Optional[int] = None) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        account_id: Account that owns the token
        expires_at: The token's ``exp`` claim (unix seconds), used as the key TTL

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_store.redis_client.setex(
            key,
            _remaining_ttl_seconds(expires_at),
            str(account_id)  # Store account id for audit purposes
        )
        return True
    except Exception as e:
        logger.warning("Error revoking token for account %s: %s", account_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Args:
        token: JWT token string to check

    Returns:
        True if token is revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_store.redis_client.exists(key)
        return exists > 0
    except Exception as e:
        # Fail open: if Redis is down, a revoked token stays usable until expiry
        logger.warning("Error checking token revocation: %s", e)
        return False
