"""
Token verifier — validates JWTs issued by the Cognito user pool.

The pool's signing keys are published at {issuer}/.well-known/jwks.json.
They are fetched with httpx on first use and kept in a TTLCache so only the
first request after expiry pays for the round trip. A token whose key id is
not in the cached set forces a refetch (key rotation), but at most once per
min_refetch_seconds; within that window unknown key ids are rejected from
the cached set.

Checks: RS256 signature, exp, iss == pool issuer, token_use in {id, access},
and, when COGNITO_CLIENT_ID is set, aud (id tokens) or client_id (access
tokens). Any failure raises TokenVerificationError.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

import httpx
import jwt
from cachetools import TTLCache

from movie_reviews.config import settings

logger = logging.getLogger(__name__)

_ALGORITHMS = ["RS256"]
_TOKEN_USES = ("id", "access")


class TokenVerificationError(Exception):
    """Raised when a token is malformed, expired, or not issued by the pool."""


class TokenVerifier:
    """Verifies user-pool tokens against the pool's JWKS."""

    def __init__(
        self,
        issuer: str,
        client_id: Optional[str] = None,
        jwks_ttl_seconds: int = 3600,
        http_timeout: float = 5.0,
        min_refetch_seconds: int = 60,
    ) -> None:
        self.issuer = issuer.rstrip("/")
        self.client_id = client_id
        self.http_timeout = http_timeout
        # Key: issuer   Value: {kid: jwk dict}
        self._jwks_cache: TTLCache = TTLCache(maxsize=4, ttl=jwks_ttl_seconds)
        # Key: issuer   Value: True while a refetch is not yet allowed
        self._refetch_guard: TTLCache = TTLCache(maxsize=4, ttl=max(min_refetch_seconds, 0))

    @property
    def jwks_url(self) -> str:
        return f"{self.issuer}/.well-known/jwks.json"

    async def _fetch_jwks(self) -> dict[str, dict[str, Any]]:
        """Download the key set and index it by key id."""
        try:
            async with httpx.AsyncClient(timeout=self.http_timeout) as client:
                response = await client.get(self.jwks_url)
                response.raise_for_status()
                keys = response.json().get("keys", [])
        except (httpx.HTTPError, ValueError) as exc:
            raise TokenVerificationError(
                f"Unable to fetch signing keys from {self.jwks_url}: {exc}"
            ) from exc
        return {k["kid"]: k for k in keys if "kid" in k}

    async def _signing_key(self, kid: str) -> jwt.PyJWK:
        keys = self._jwks_cache.get(self.issuer)
        if keys is None or (kid not in keys and self.issuer not in self._refetch_guard):
            keys = await self._fetch_jwks()
            self._jwks_cache[self.issuer] = keys
            if self._refetch_guard.ttl > 0:
                self._refetch_guard[self.issuer] = True
            logger.debug("Fetched %d signing keys from %s", len(keys), self.jwks_url)

        jwk = keys.get(kid)
        if jwk is None:
            raise TokenVerificationError(f"Unknown signing key id '{kid}'")
        try:
            return jwt.PyJWK(jwk)
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(f"Unusable signing key '{kid}': {exc}") from exc

    async def verify(self, token: str) -> dict[str, Any]:
        """Return the verified claims of token, or raise TokenVerificationError."""
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(f"Malformed token: {exc}") from exc

        kid = header.get("kid")
        if not kid:
            raise TokenVerificationError("Token header has no key id")

        signing_key = await self._signing_key(kid)
        try:
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=_ALGORITHMS,
                issuer=self.issuer,
                options={"verify_aud": False, "require": ["exp", "iss"]},
            )
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(str(exc)) from exc

        token_use = claims.get("token_use")
        if token_use not in _TOKEN_USES:
            raise TokenVerificationError(f"Unexpected token_use '{token_use}'")

        if self.client_id:
            audience = claims.get("aud") if token_use == "id" else claims.get("client_id")
            if audience != self.client_id:
                raise TokenVerificationError("Token was issued for a different client")

        return claims


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier:
    """FastAPI dependency: process-wide verifier, created on first use."""
    return TokenVerifier(
        issuer=settings.token_issuer,
        client_id=settings.cognito_client_id,
        jwks_ttl_seconds=settings.jwks_cache_ttl_seconds,
    )
