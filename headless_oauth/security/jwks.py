"""JSON Web Key Set loading and Apple id_token verification."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
import jwt

from headless_oauth.core.cache import CachePool, NullCachePool
from headless_oauth.core.exceptions import OAuthException

logger = logging.getLogger(__name__)


async def fetch_jwks(http_client: httpx.AsyncClient, url: str, label: str) -> dict[str, Any]:
    """Download a key set document; any failure is a 500 since it is not the client's fault."""
    try:
        response = await http_client.get(url, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise OAuthException(f"Failed to fetch {label} JWKS: {e}", 500, e) from e
    try:
        jwks = response.json()
    except ValueError as e:
        raise OAuthException(f"Failed to parse {label} JWKS response: {e}", 500, e) from e
    if not isinstance(jwks, dict) or not isinstance(jwks.get("keys"), list) or not jwks["keys"]:
        raise OAuthException(f"{label} JWKS response missing keys", 500)
    return jwks


def parse_key_set(jwks: dict[str, Any], label: str) -> jwt.PyJWKSet:
    try:
        return jwt.PyJWKSet.from_dict(jwks)
    except jwt.PyJWTError as e:
        raise OAuthException(f"Failed to parse {label} JWKS: {e}", 500, e) from e


def select_signing_key(key_set: jwt.PyJWKSet, token: str) -> jwt.PyJWK:
    """Pick the key named by the token's ``kid`` header.

    Raises ``jwt.PyJWTError`` or ``KeyError`` when no key matches.
    """
    kid = jwt.get_unverified_header(token).get("kid")
    if kid:
        return key_set[kid]
    if len(key_set.keys) == 1:
        return key_set.keys[0]
    raise jwt.InvalidTokenError("Token has no kid header and the key set holds several keys")


def decode_unverified(token: str) -> dict[str, Any]:
    payload = jwt.decode(token, options={"verify_signature": False})
    if not isinstance(payload, dict):
        raise jwt.DecodeError("Token payload is not a JSON object")
    return payload


class AppleJwksVerifier:
    JWKS_URL = "https://appleid.apple.com/auth/keys"
    ISSUER = "https://appleid.apple.com"
    CACHE_KEY = "apple_jwks_keys"
    CACHE_TTL = 86400  # Apple rotates its keys rarely

    def __init__(self, http_client: httpx.AsyncClient, client_id: str, cache: Optional[CachePool] = None):
        self.http_client = http_client
        self.client_id = client_id
        self.cache = cache or NullCachePool()

    async def verify(self, id_token: str) -> dict[str, Any]:
        """Verify signature and claims of an Apple id_token and return its payload.

        Raises:
            OAuthException: 401 for a token that does not verify, 500 when
                the key set cannot be fetched or parsed
        """
        key_set = parse_key_set(await self._get_jwks(), "Apple")
        try:
            signing_key = select_signing_key(key_set, id_token)
            payload = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=self.ISSUER,
            )
        except jwt.InvalidIssuerError as e:
            raise OAuthException("Apple id_token has invalid issuer", 401, e) from e
        except jwt.InvalidAudienceError as e:
            raise OAuthException("Apple id_token has invalid audience", 401, e) from e
        except jwt.MissingRequiredClaimError as e:
            if e.claim == "iss":
                raise OAuthException("Apple id_token has invalid issuer", 401, e) from e
            if e.claim == "aud":
                raise OAuthException("Apple id_token has invalid audience", 401, e) from e
            raise OAuthException(f"Apple id_token verification failed: {e}", 401, e) from e
        except (jwt.PyJWTError, KeyError) as e:
            raise OAuthException(f"Apple id_token verification failed: {e}", 401, e) from e

        for claim in ("sub", "email"):
            if not isinstance(payload.get(claim), str):
                raise OAuthException(f"Apple id_token missing required claim: {claim}", 401)
        return payload

    def clear_cache(self) -> None:
        self.cache.delete(self.CACHE_KEY)

    async def _get_jwks(self) -> dict[str, Any]:
        cached = self.cache.get(self.CACHE_KEY)
        if cached is not None:
            return cached
        jwks = await fetch_jwks(self.http_client, self.JWKS_URL, "Apple")
        self.cache.set(self.CACHE_KEY, jwks, self.CACHE_TTL)
        logger.debug("Fetched Apple JWKS (%d keys)", len(jwks["keys"]))
        return jwks


class NullAppleJwksVerifier:
    """Reads the id_token payload without checking its signature."""

    async def verify(self, id_token: str) -> dict[str, Any]:
        try:
            payload = decode_unverified(id_token)
        except jwt.PyJWTError as e:
            raise OAuthException("Invalid Apple id_token format", 400, e) from e
        if not payload.get("sub") or not payload.get("email"):
            raise OAuthException("Apple id_token missing required claims (sub, email)")
        return payload

    def clear_cache(self) -> None:
        return None
