"""Abstract base class for OAuth 2.0 providers.

Providers exchange an authorization code for tokens, turn the provider's
user info into ``OAuthUserData`` and, where supported, refresh tokens.
Every HTTP call goes through the shared ``httpx.AsyncClient`` handed in at
construction; transport failures surface as ``OAuthException``.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.providers.models import OAuthTokenData, OAuthUserData
from headless_oauth.services.credentials import Credential, CredentialValidator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class OAuthProvider(ABC):
    """
    Abstract base class for OAuth 2.0 providers.

    Subclasses set ``name`` and ``display_name`` and implement the
    provider-specific exchange and parsing.
    """

    name: str = ""
    display_name: str = ""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credential_validator: Optional[CredentialValidator] = None,
        enabled: bool = True,
    ):
        """
        Args:
            http_client: Shared async HTTP client
            credential_validator: Checks credentials before each use
            enabled: Disabled providers never match ``supports``
        """
        self.http_client = http_client
        self.credential_validator = credential_validator or CredentialValidator()
        self.enabled = enabled

    def is_enabled(self) -> bool:
        return self.enabled

    def supports(self, provider: str) -> bool:
        return self.enabled and provider.lower() == self.name

    @abstractmethod
    def credential_status(self) -> dict[str, bool]:
        """Map of credential name to whether it is configured."""

    @abstractmethod
    def required_credentials(self) -> list[Credential]:
        ...

    def validate_credentials(self) -> None:
        self.credential_validator.validate_many(self.required_credentials(), self.display_name)

    @abstractmethod
    async def get_user_data(self, code: str, redirect_uri: str) -> OAuthUserData:
        """Exchange an authorization code and return the authenticated user."""

    def supports_refresh(self) -> bool:
        return False

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokenData:
        raise OAuthException(f'OAuth provider "{self.name}" does not support token refresh')

    async def get_user_data_from_token_data(self, token_data: OAuthTokenData) -> OAuthUserData:
        raise OAuthException(f'OAuth provider "{self.name}" does not support token refresh')

    async def _request_json(
        self,
        method: str,
        url: str,
        action: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Perform a request and decode the JSON body.

        Args:
            method: HTTP method
            url: Endpoint URL
            action: Short description used in error messages, e.g.
                "exchange Google authorization code"

        Raises:
            OAuthException: With the upstream status for HTTP errors, 400 otherwise
        """
        kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
        try:
            response = await self.http_client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "OAuth request failed | provider=%s action=%s status=%s",
                self.name, action, e.response.status_code,
            )
            raise OAuthException(f"Failed to {action}: {e}", e.response.status_code, e) from e
        except httpx.RequestError as e:
            logger.error("OAuth request error | provider=%s action=%s error=%s", self.name, action, e)
            raise OAuthException(f"Failed to {action}: {e}", 400, e) from e
        try:
            data = response.json()
        except ValueError as e:
            raise OAuthException(f"Failed to parse response ({action}): {e}", 400, e) from e
        if not isinstance(data, dict):
            raise OAuthException(f"Failed to parse response ({action}): expected a JSON object", 400)
        return data

    @staticmethod
    def _optional_int(value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
