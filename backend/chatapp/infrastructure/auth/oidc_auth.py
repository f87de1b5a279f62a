"""
OIDC/JWT authentication provider.

The identity provider's `sub` claim is used as the user id, so rows are
owned by the provider's stable subject identifier.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from jose import JWTError, jwt

from chatapp.core.config import Settings
from chatapp.core.exceptions import AuthenticationError
from chatapp.interfaces.auth_provider import IAuthProvider, User


class OidcAuthProvider(IAuthProvider):
    """OIDC authentication provider with JWKS validation."""

    def __init__(self, settings: Settings, jwks_ttl_seconds: int = 3600):
        self._settings = settings
        self._jwks_ttl_seconds = jwks_ttl_seconds
        self._jwks_cache: dict[str, Any] | None = None
        self._jwks_cache_expiry: float = 0.0
        if not self._settings.OIDC_ISSUER and not self._settings.OIDC_JWKS_URL:
            raise ValueError("OIDC_ISSUER or OIDC_JWKS_URL must be set for OIDC auth")

    def _resolve_jwks_url(self) -> str:
        if self._settings.OIDC_JWKS_URL:
            return self._settings.OIDC_JWKS_URL
        issuer = self._settings.OIDC_ISSUER.rstrip("/")
        return f"{issuer}/.well-known/jwks.json"

    async def _get_jwks(self) -> dict[str, Any]:
        now = time.time()
        if self._jwks_cache and now < self._jwks_cache_expiry:
            return self._jwks_cache

        jwks_url = self._resolve_jwks_url()
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(jwks_url)
            response.raise_for_status()
            jwks = response.json()

        self._jwks_cache = jwks
        self._jwks_cache_expiry = now + self._jwks_ttl_seconds
        return jwks

    async def _decode_token(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        jwks = await self._get_jwks()
        key = None
        for candidate in jwks.get("keys", []):
            if candidate.get("kid") == header.get("kid"):
                key = candidate
                break
        if not key:
            raise JWTError("Signing key not found")

        options = {
            "verify_aud": bool(self._settings.OIDC_AUDIENCE),
            "verify_iss": bool(self._settings.OIDC_ISSUER),
        }
        issuer = self._settings.OIDC_ISSUER or None
        if issuer and not issuer.endswith("/"):
            # Auth0 issues "iss" with a trailing slash
            issuer = [issuer, f"{issuer}/"]
        return jwt.decode(
            token,
            key,
            algorithms=[header.get("alg", "RS256")],
            audience=self._settings.OIDC_AUDIENCE or None,
            issuer=issuer,
            options=options,
        )

    async def verify_token(self, token: str) -> User:
        try:
            claims = await self._decode_token(token)
        except (JWTError, httpx.HTTPError) as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")

        return User(
            id=str(subject),
            email=claims.get("email"),
            display_name=claims.get("name") or claims.get("nickname"),
        )

    def is_enabled(self) -> bool:
        return True
