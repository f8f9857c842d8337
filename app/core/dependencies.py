# app/core/dependencies.py
import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.rate_limiter import RateLimiter, get_rate_limiter
from app.core.security import ClerkAuthenticator
from app.core.storage import get_blob_store
from app.database import get_db
from app.domains.ai.provider import ProviderFactory, create_provider
from app.exceptions.base import AuthenticationError, RateLimitedError
from app.schemas.user import UserIdentity

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
auth = ClerkAuthenticator()

__all__ = [
    "validate_token",
    "get_current_identity",
    "get_optional_identity",
    "enforce_rate_limit",
    "get_db",
    "get_blob_store",
    "get_rate_limiter",
    "get_provider_factory",
]


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict | None:
    """Validate and decode the bearer JWT from Clerk.

    Returns:
        dict | None: Decoded token payload, or None when no token was sent

    Raises:
        HTTPException: If a token was sent but is invalid or expired
    """
    if not token or not token.credentials:
        return None

    try:
        payload = await auth.verify_token(token.credentials)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", str(e))
        raise AuthenticationError("Authentication failed") from e

    if not payload:
        raise AuthenticationError("Invalid authentication token")
    return payload


async def get_optional_identity(payload: dict | None = Depends(validate_token)) -> UserIdentity | None:
    """Get the caller's identity if a valid token was supplied, otherwise None."""
    if not payload or not payload.get("sub"):
        return None
    return UserIdentity.from_token_payload(payload)


async def get_current_identity(
    request: Request,
    identity: UserIdentity | None = Depends(get_optional_identity),
) -> UserIdentity:
    """Get the authenticated caller.

    Raises:
        AuthenticationError: If no identity is present
    """
    if identity is None:
        raise AuthenticationError("Authentication required")

    # Add user info to request state for logging
    request.state.user_id = identity.subject
    return identity


async def enforce_rate_limit(
    identity: UserIdentity = Depends(get_current_identity),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> UserIdentity:
    """Count a request against the caller's budget.

    Raises:
        RateLimitedError: If the caller is over the limit for the current window
    """
    decision = await limiter.check(identity.subject)
    if not decision.allowed:
        logger.warning("Rate limit exceeded for user %s", identity.subject)
        raise RateLimitedError(retry_after=decision.retry_after)
    return identity


def get_provider_factory() -> ProviderFactory:
    """Return the callable that builds provider clients."""
    return create_provider
