"""Factory function for building the configured OAuth providers."""
import logging
from typing import Optional

import httpx

from headless_oauth.core.cache import CachePool
from headless_oauth.core.config import BaseAppSettings
from headless_oauth.security.jwks import AppleJwksVerifier, NullAppleJwksVerifier
from headless_oauth.security.security_logger import OAuthSecurityLogger
from headless_oauth.services.credentials import CredentialValidator
from headless_oauth.services.oidc_discovery import OidcDiscoveryService

from .apple import AppleProvider
from .apple_secret import AppleClientSecretGenerator
from .base import OAuthProvider
from .facebook import FacebookProvider
from .google import GoogleProvider
from .oidc import OpenIdConnectProvider

logger = logging.getLogger(__name__)


def create_providers(
    settings: BaseAppSettings,
    http_client: httpx.AsyncClient,
    cache: Optional[CachePool] = None,
    security_logger: Optional[OAuthSecurityLogger] = None,
    discovery: Optional[OidcDiscoveryService] = None,
) -> list[OAuthProvider]:
    """
    Build every configured provider, enabled or not.

    Disabled providers are kept so health checks can report on them; they
    never match ``supports``.

    Args:
        settings: Application settings
        http_client: Shared async HTTP client
        cache: Cache for Apple JWKS and OIDC discovery documents
        security_logger: Receives JWT verification failures
        discovery: OIDC discovery service, built from ``cache`` when omitted

    Returns:
        Providers in display order, named OIDC providers last
    """
    validator = CredentialValidator()
    discovery = discovery or OidcDiscoveryService(http_client, cache)

    providers: list[OAuthProvider] = [
        GoogleProvider(
            http_client,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            enabled=settings.GOOGLE_ENABLED,
            credential_validator=validator,
        ),
    ]

    if settings.OAUTH_VERIFY_APPLE_JWT:
        jwks_verifier = AppleJwksVerifier(http_client, settings.APPLE_CLIENT_ID, cache)
    else:
        jwks_verifier = NullAppleJwksVerifier()
    providers.append(
        AppleProvider(
            http_client,
            AppleClientSecretGenerator(
                client_id=settings.APPLE_CLIENT_ID,
                team_id=settings.APPLE_TEAM_ID,
                key_id=settings.APPLE_KEY_ID,
                private_key_path=settings.APPLE_PRIVATE_KEY_PATH,
                credential_validator=validator,
            ),
            client_id=settings.APPLE_CLIENT_ID,
            enabled=settings.APPLE_ENABLED,
            jwks_verifier=jwks_verifier,
            security_logger=security_logger,
            credential_validator=validator,
        )
    )

    providers.append(
        FacebookProvider(
            http_client,
            client_id=settings.FACEBOOK_CLIENT_ID,
            client_secret=settings.FACEBOOK_CLIENT_SECRET,
            enabled=settings.FACEBOOK_ENABLED,
            credential_validator=validator,
        )
    )

    for name, oidc in settings.OIDC_PROVIDERS.items():
        providers.append(
            OpenIdConnectProvider(
                http_client,
                discovery,
                client_id=oidc.client_id,
                client_secret=oidc.client_secret,
                issuer_url=oidc.issuer_url,
                enabled=oidc.enabled,
                verify_jwt=oidc.verify_jwt,
                provider_name=name,
                scopes=oidc.scopes,
                credential_validator=validator,
            )
        )

    for provider in providers:
        if provider.is_enabled():
            logger.info("%s OAuth provider enabled", provider.display_name)
    return providers
