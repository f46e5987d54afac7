"""Bundle bootstrap.

``HeadlessOAuthBundle`` registers the bundle's services, lays the host's own
services over them and runs the wiring passes once. The host then mounts it
on its FastAPI application with ``install``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from headless_oauth.core.cache import NullCachePool
from headless_oauth.core.config import BaseAppSettings, get_settings
from headless_oauth.core.logger import null_logger
from headless_oauth.core.registry import Reference, ServiceRegistry
from headless_oauth.core.security import AccessTokenIssuer
from headless_oauth.core.wiring import (
    BUNDLE_CACHE,
    DEFAULT_PASSES,
    HOST_LOGGER,
    NULL_LOGGER,
    SECURITY_LOGGER,
)
from headless_oauth.providers.factory import create_providers
from headless_oauth.security.redirect_uri import RedirectUriValidator
from headless_oauth.security.security_logger import OAuthSecurityLogger
from headless_oauth.services.health import ProviderHealthChecker
from headless_oauth.services.hooks import OAuthHooks
from headless_oauth.services.oidc_discovery import OidcDiscoveryService
from headless_oauth.services.processor import OAuthProcessor, OAuthRefreshProcessor
from headless_oauth.templating import OAuthTemplateExtension

logger = logging.getLogger(__name__)

HTTP_CLIENT = "headless_oauth.http_client"
OIDC_DISCOVERY = "headless_oauth.oidc_discovery"
PROVIDERS = "headless_oauth.providers"
REDIRECT_URI_VALIDATOR = "headless_oauth.redirect_uri_validator"
TOKEN_ISSUER = "headless_oauth.token_issuer"
PROCESSOR = "headless_oauth.processor"
REFRESH_PROCESSOR = "headless_oauth.refresh_processor"
HEALTH_CHECKER = "headless_oauth.health_checker"
TEMPLATE_EXTENSION = "headless_oauth.template_extension"
HOOKS = "headless_oauth.hooks"


def _http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=10.0)


class HeadlessOAuthBundle:
    def __init__(
        self,
        settings: Optional[BaseAppSettings] = None,
        host_services: Optional[Mapping[str, Any]] = None,
        passes=DEFAULT_PASSES,
        hooks: Optional[OAuthHooks] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = ServiceRegistry()
        self.passes = passes
        self._host_services = dict(host_services or {})
        self._booted = False
        self._register_defaults()
        if hooks is not None:
            self.registry.set(HOOKS, hooks)
        for name, service in self._host_services.items():
            self.registry.set(name, service)
        self.boot()

    def _register_defaults(self) -> None:
        cfg = self.settings
        r = self.registry
        r.register(BUNDLE_CACHE, NullCachePool)
        r.register(NULL_LOGGER, null_logger)
        r.register(HOOKS, OAuthHooks)
        r.register(HTTP_CLIENT, _http_client)
        r.register(SECURITY_LOGGER, OAuthSecurityLogger, logger=Reference(HOST_LOGGER))
        r.register(OIDC_DISCOVERY, OidcDiscoveryService, http_client=Reference(HTTP_CLIENT), cache=Reference(BUNDLE_CACHE))
        r.register(
            PROVIDERS,
            create_providers,
            settings=cfg,
            http_client=Reference(HTTP_CLIENT),
            cache=Reference(BUNDLE_CACHE),
            security_logger=Reference(SECURITY_LOGGER),
            discovery=Reference(OIDC_DISCOVERY),
        )
        r.register(REDIRECT_URI_VALIDATOR, RedirectUriValidator, allowed_uris=list(cfg.OAUTH_ALLOWED_REDIRECT_URIS))
        r.register(
            TOKEN_ISSUER,
            AccessTokenIssuer,
            secret=cfg.JWT_SECRET,
            expires_minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES,
        )
        r.register(
            PROCESSOR,
            OAuthProcessor,
            providers=Reference(PROVIDERS),
            token_issuer=Reference(TOKEN_ISSUER),
            redirect_uri_validator=Reference(REDIRECT_URI_VALIDATOR),
            security_logger=Reference(SECURITY_LOGGER),
            hooks=Reference(HOOKS),
        )
        r.register(
            REFRESH_PROCESSOR,
            OAuthRefreshProcessor,
            providers=Reference(PROVIDERS),
            token_issuer=Reference(TOKEN_ISSUER),
            security_logger=Reference(SECURITY_LOGGER),
        )
        r.register(HEALTH_CHECKER, ProviderHealthChecker, providers=Reference(PROVIDERS))
        r.register(TEMPLATE_EXTENSION, OAuthTemplateExtension)

    def boot(self) -> None:
        """Run the wiring passes; later calls are no-ops."""
        if self._booted:
            return
        for wiring_pass in self.passes:
            wiring_pass.process(self.registry)
        self._booted = True
        logger.debug("OAuth bundle booted")

    def get(self, name: str) -> Any:
        return self.registry.get(name)

    @property
    def cache(self):
        return self.registry.get(BUNDLE_CACHE)

    @property
    def security_logger(self) -> OAuthSecurityLogger:
        return self.registry.get(SECURITY_LOGGER)

    @property
    def providers(self) -> list:
        return self.registry.get(PROVIDERS)

    @property
    def hooks(self) -> OAuthHooks:
        return self.registry.get(HOOKS)

    @property
    def processor(self) -> OAuthProcessor:
        return self.registry.get(PROCESSOR)

    @property
    def refresh_processor(self) -> OAuthRefreshProcessor:
        return self.registry.get(REFRESH_PROCESSOR)

    @property
    def token_issuer(self) -> AccessTokenIssuer:
        return self.registry.get(TOKEN_ISSUER)

    @property
    def health_checker(self) -> ProviderHealthChecker:
        return self.registry.get(HEALTH_CHECKER)

    @property
    def template_extension(self) -> OAuthTemplateExtension:
        return self.registry.get(TEMPLATE_EXTENSION)

    def install(self, app):
        """Mount the OAuth routes and error handlers on a FastAPI app."""
        from headless_oauth.api.routes_oauth import router
        from headless_oauth.core.errors import register_error_handlers

        app.state.oauth_bundle = self
        app.include_router(router)
        register_error_handlers(app)
        return app

    async def aclose(self) -> None:
        """Close the HTTP client, unless the host supplied it."""
        if HTTP_CLIENT in self._host_services:
            return
        client = self.registry.built().get(HTTP_CLIENT)
        if client is not None:
            await client.aclose()
