"""OpenID Connect discovery (``/.well-known/openid-configuration``)."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Optional

import httpx

from headless_oauth.core.cache import CachePool, NullCachePool
from headless_oauth.core.exceptions import OAuthException

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("issuer", "authorization_endpoint", "token_endpoint", "jwks_uri")


class OidcDiscoveryService:
    CACHE_TTL = 3600

    def __init__(self, http_client: httpx.AsyncClient, cache: Optional[CachePool] = None):
        self.http_client = http_client
        self.cache = cache or NullCachePool()

    @staticmethod
    def cache_key(issuer_url: str) -> str:
        return "oidc_discovery_" + hashlib.md5(issuer_url.encode()).hexdigest()

    async def discover(self, issuer_url: str) -> dict[str, Any]:
        key = self.cache_key(issuer_url)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        config = await self._fetch_configuration(issuer_url)
        self.cache.set(key, config, self.CACHE_TTL)
        return config

    async def token_endpoint(self, issuer_url: str) -> str:
        return (await self.discover(issuer_url))["token_endpoint"]

    async def userinfo_endpoint(self, issuer_url: str) -> Optional[str]:
        return (await self.discover(issuer_url)).get("userinfo_endpoint")

    async def jwks_uri(self, issuer_url: str) -> str:
        return (await self.discover(issuer_url))["jwks_uri"]

    async def supports_scope(self, issuer_url: str, scope: str) -> bool:
        config = await self.discover(issuer_url)
        return scope in config.get("scopes_supported", ["openid"])

    def clear_cache(self, issuer_url: str) -> None:
        self.cache.delete(self.cache_key(issuer_url))

    async def _fetch_configuration(self, issuer_url: str) -> dict[str, Any]:
        discovery_url = issuer_url.rstrip("/") + "/.well-known/openid-configuration"
        try:
            response = await self.http_client.get(
                discovery_url, headers={"Accept": "application/json"}, timeout=10.0
            )
        except httpx.RequestError as e:
            raise OAuthException(
                f'Failed to fetch OIDC configuration from "{discovery_url}": {e}', 500, e
            ) from e
        if response.status_code != 200:
            raise OAuthException(
                f'OIDC discovery endpoint returned status {response.status_code} for "{discovery_url}"', 500
            )
        try:
            config = response.json()
        except ValueError as e:
            raise OAuthException(f'Invalid JSON response from OIDC discovery endpoint "{discovery_url}"', 500, e) from e
        if not isinstance(config, dict):
            raise OAuthException(f'Invalid JSON response from OIDC discovery endpoint "{discovery_url}"', 500)
        for field in REQUIRED_FIELDS:
            if not isinstance(config.get(field), str):
                raise OAuthException(
                    f'OIDC configuration from "{discovery_url}" is missing required field "{field}"', 500
                )
        logger.info("Discovered OIDC configuration issuer=%s", config["issuer"])
        return config
