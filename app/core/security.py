"""Security related functions."""

import logging
import time

import httpx
import jwt
from fastapi import HTTPException, status
from jwt import InvalidTokenError
from jwt.algorithms import RSAAlgorithm

from app.core.config import settings

logger = logging.getLogger(__name__)


class ClerkAuthenticator:
    """
    Handles Clerk token verification.

    Session tokens issued by Clerk are RS256 JWTs. The signing keys are
    published as a JWKS document which is fetched with httpx and cached for
    ``jwks_cache_ttl`` seconds. When ``clerk_verify_signature`` is disabled
    (local development and tests) tokens are decoded without verification.

    :ivar jwks_url: URL of the Clerk JWKS document.
    :type jwks_url: str
    :ivar issuer: Expected ``iss`` claim, if configured.
    :type issuer: str
    """

    jwks_cache_ttl = 3600

    def __init__(self):
        self.clerk_api_url = str(settings.clerk_api_url).rstrip("/")
        self.jwks_url = settings.clerk_jwks_url or f"{self.clerk_api_url}/v1/jwks"
        self.secret_key = settings.clerk_secret_key
        self.issuer = settings.clerk_issuer
        self._jwks: dict | None = None
        self._jwks_fetched_at = 0.0

    async def get_jwks(self, force_refresh: bool = False) -> dict:
        """Get JWKS from Clerk for token verification."""
        fresh = time.monotonic() - self._jwks_fetched_at < self.jwks_cache_ttl
        if self._jwks is not None and fresh and not force_refresh:
            return self._jwks

        headers = {"Authorization": f"Bearer {self.secret_key}"} if self.secret_key else None
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(self.jwks_url, headers=headers)
            response.raise_for_status()
            self._jwks = response.json()
            self._jwks_fetched_at = time.monotonic()
        return self._jwks

    async def _signing_key(self, token: str):
        kid = jwt.get_unverified_header(token).get("kid")
        for refresh in (False, True):
            jwks = await self.get_jwks(force_refresh=refresh)
            for jwk in jwks.get("keys", []):
                if jwk.get("kid") == kid:
                    return RSAAlgorithm.from_jwk(jwk)
        raise InvalidTokenError(f"No signing key found for kid {kid!r}")

    async def verify_token(self, token: str) -> dict:
        """
        Verify a Clerk session token and return its claims.

        :param token: The JWT token to be verified.
        :return: A dictionary containing the decoded payload of the token if validation succeeds.
        """
        try:
            if not settings.clerk_verify_signature:
                return jwt.decode(
                    token,
                    options={"verify_signature": False, "verify_aud": False, "verify_exp": False},
                )

            key = await self._signing_key(token)
            return jwt.decode(
                token,
                key=key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={"verify_aud": False, "verify_iss": bool(self.issuer)},
            )
        except (InvalidTokenError, httpx.HTTPError) as e:
            logger.warning("Token verification failed: %s", str(e))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid authentication token: {str(e)}",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
