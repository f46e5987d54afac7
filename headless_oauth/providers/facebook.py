"""Facebook Login via the Graph API."""
from typing import Any

import httpx

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.providers.base import OAuthProvider
from headless_oauth.providers.models import OAuthTokenData, OAuthUserData
from headless_oauth.services.credentials import Credential, CredentialValidator


class FacebookProvider(OAuthProvider):
    TOKEN_URL = "https://graph.facebook.com/v19.0/oauth/access_token"
    USERINFO_URL = "https://graph.facebook.com/me"
    USER_FIELDS = "id,email,first_name,last_name"

    name = "facebook"
    display_name = "Facebook"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        enabled: bool = True,
        credential_validator: CredentialValidator | None = None,
    ):
        super().__init__(http_client, credential_validator, enabled)
        self.client_id = client_id
        self.client_secret = client_secret

    def credential_status(self) -> dict[str, bool]:
        return {
            "client_id": bool(self.client_id),
            "client_secret": bool(self.client_secret),
        }

    def required_credentials(self) -> list[Credential]:
        return [
            Credential(self.client_id, "FACEBOOK_CLIENT_ID", "client ID"),
            Credential(self.client_secret, "FACEBOOK_CLIENT_SECRET", "client secret"),
        ]

    async def get_user_data(self, code: str, redirect_uri: str) -> OAuthUserData:
        self.validate_credentials()
        tokens = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "exchange Facebook authorization code",
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not tokens.get("access_token"):
            raise OAuthException("Facebook token response missing access_token")
        user_info = await self._fetch_user_info(tokens["access_token"])
        return self._to_user_data(user_info, tokens.get("refresh_token"))

    def supports_refresh(self) -> bool:
        return True

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokenData:
        self.validate_credentials()
        data = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "refresh Facebook tokens",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not data.get("access_token"):
            raise OAuthException("Facebook refresh token response missing access_token")
        return OAuthTokenData(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or refresh_token,
            expires_in=self._optional_int(data.get("expires_in")),
            token_type=data.get("token_type"),
        )

    async def get_user_data_from_token_data(self, token_data: OAuthTokenData) -> OAuthUserData:
        user_info = await self._fetch_user_info(token_data.access_token)
        return self._to_user_data(user_info)

    async def _fetch_user_info(self, access_token: str) -> dict[str, Any]:
        data = await self._request_json(
            "GET",
            self.USERINFO_URL,
            "fetch Facebook user info",
            params={"fields": self.USER_FIELDS, "access_token": access_token},
        )
        if not data.get("id") or not data.get("email"):
            raise OAuthException("Facebook user info response missing required fields (id, email)")
        return data

    def _to_user_data(self, user_info: dict[str, Any], refresh_token: str | None = None) -> OAuthUserData:
        return OAuthUserData(
            provider=self.name,
            provider_id=str(user_info["id"]),
            email=user_info["email"],
            first_name=user_info.get("first_name"),
            last_name=user_info.get("last_name"),
            refresh_token=refresh_token,
        )
