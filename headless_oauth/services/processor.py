"""Login and token refresh flows.

Both processors pick the provider, talk to it, map the result onto a
customer and return a freshly issued access token. Errors are logged as
security events and re-raised unchanged.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from headless_oauth.core.exceptions import OAuthException, ProviderNotSupportedException
from headless_oauth.core.security import AccessTokenIssuer
from headless_oauth.models.schemas import OAuthRefreshRequest, OAuthRequest
from headless_oauth.providers.base import OAuthProvider
from headless_oauth.providers.models import OAuthResponse
from headless_oauth.security.redirect_uri import NullRedirectUriValidator, RedirectUriValidator
from headless_oauth.security.security_logger import NullOAuthSecurityLogger, OAuthSecurityLogger
from headless_oauth.services.hooks import OAuthHooks
from headless_oauth.services.user_resolver import UserResolver

logger = logging.getLogger(__name__)


def find_provider(providers: Iterable[OAuthProvider], provider_name: str) -> OAuthProvider:
    for provider in providers:
        if provider.supports(provider_name):
            return provider
    raise ProviderNotSupportedException(provider_name)


class OAuthProcessor:
    def __init__(
        self,
        providers: Iterable[OAuthProvider],
        token_issuer: AccessTokenIssuer,
        redirect_uri_validator: Optional[RedirectUriValidator] = None,
        security_logger: Optional[OAuthSecurityLogger] = None,
        hooks: Optional[OAuthHooks] = None,
    ):
        self.providers = list(providers)
        self.token_issuer = token_issuer
        self.redirect_uri_validator = redirect_uri_validator or NullRedirectUriValidator()
        self.security_logger = security_logger or NullOAuthSecurityLogger()
        self.hooks = hooks or OAuthHooks()

    async def process(self, provider_name: str, request: OAuthRequest, resolver: UserResolver) -> OAuthResponse:
        try:
            self.redirect_uri_validator.validate(request.redirect_uri)
        except OAuthException:
            self.security_logger.log_redirect_uri_rejected(request.redirect_uri, provider_name)
            raise

        try:
            provider = find_provider(self.providers, provider_name)
            user_data = await provider.get_user_data(request.code, request.redirect_uri)
            result = resolver.resolve(user_data)
            customer_id = result.customer.id
            token = self.token_issuer.issue(customer_id)
            self.hooks.post_authentication(result.customer, user_data, result.is_new_user)
        except ProviderNotSupportedException:
            self.security_logger.log_auth_failure(provider_name, "Provider not supported")
            raise
        except OAuthException as e:
            self.security_logger.log_auth_failure(provider_name, e.message)
            raise
        except Exception as e:
            self.security_logger.log_auth_failure(provider_name, f"Unexpected error: {e}")
            raise

        self.security_logger.log_auth_success(provider_name, user_data.email, customer_id, result.is_new_user)
        return OAuthResponse(
            token=token,
            refresh_token=user_data.refresh_token,
            customer_id=customer_id,
            state=request.state,
        )


class OAuthRefreshProcessor:
    def __init__(
        self,
        providers: Iterable[OAuthProvider],
        token_issuer: AccessTokenIssuer,
        security_logger: Optional[OAuthSecurityLogger] = None,
    ):
        self.providers = list(providers)
        self.token_issuer = token_issuer
        self.security_logger = security_logger or NullOAuthSecurityLogger()

    def find_refreshable_provider(self, provider_name: str) -> OAuthProvider:
        provider = find_provider(self.providers, provider_name)
        if not provider.supports_refresh():
            raise OAuthException(f'OAuth provider "{provider_name}" has refresh support disabled')
        return provider

    async def process(
        self, provider_name: str, request: OAuthRefreshRequest, resolver: UserResolver
    ) -> OAuthResponse:
        try:
            provider = self.find_refreshable_provider(provider_name)
            token_data = await provider.refresh_tokens(request.refresh_token)
            user_data = await provider.get_user_data_from_token_data(token_data)
            result = resolver.resolve(user_data)
            customer_id = result.customer.id
            token = self.token_issuer.issue(customer_id)
        except OAuthException as e:
            self.security_logger.log_refresh_failure(provider_name, e.message)
            raise
        except Exception as e:
            self.security_logger.log_refresh_failure(provider_name, f"Unexpected error: {e}")
            raise

        self.security_logger.log_refresh_success(provider_name, customer_id)
        return OAuthResponse(token=token, refresh_token=token_data.refresh_token, customer_id=customer_id)
