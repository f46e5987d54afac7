"""Google OAuth 2.0 implementation."""
from typing import Any

import httpx

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.providers.base import OAuthProvider
from headless_oauth.providers.models import OAuthTokenData, OAuthUserData
from headless_oauth.services.credentials import Credential, CredentialValidator


class GoogleProvider(OAuthProvider):
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    name = "google"
    display_name = "Google"

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
            Credential(self.client_id, "GOOGLE_CLIENT_ID", "client ID"),
            Credential(self.client_secret, "GOOGLE_CLIENT_SECRET", "client secret"),
        ]

    async def get_user_data(self, code: str, redirect_uri: str) -> OAuthUserData:
        self.validate_credentials()
        tokens = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "exchange Google authorization code",
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not tokens.get("access_token"):
            raise OAuthException("Google token response missing access_token")
        user_info = await self._fetch_user_info(tokens["access_token"])
        return self._to_user_data(user_info, tokens.get("refresh_token"))

    def supports_refresh(self) -> bool:
        return True

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokenData:
        self.validate_credentials()
        data = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "refresh Google tokens",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not data.get("access_token"):
            raise OAuthException("Google refresh token response missing access_token")
        # Google does not rotate refresh tokens
        return OAuthTokenData(
            access_token=data["access_token"],
            refresh_token=refresh_token,
            expires_in=self._optional_int(data.get("expires_in")),
            token_type=data.get("token_type"),
            id_token=data.get("id_token"),
        )

    async def get_user_data_from_token_data(self, token_data: OAuthTokenData) -> OAuthUserData:
        user_info = await self._fetch_user_info(token_data.access_token)
        return self._to_user_data(user_info)

    async def _fetch_user_info(self, access_token: str) -> dict[str, Any]:
        data = await self._request_json(
            "GET",
            self.USERINFO_URL,
            "fetch Google user info",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not data.get("id") or not data.get("email"):
            raise OAuthException("Google user info response missing required fields (id, email)")
        return data

    def _to_user_data(self, user_info: dict[str, Any], refresh_token: str | None = None) -> OAuthUserData:
        return OAuthUserData(
            provider=self.name,
            provider_id=str(user_info["id"]),
            email=user_info["email"],
            first_name=user_info.get("given_name"),
            last_name=user_info.get("family_name"),
            refresh_token=refresh_token,
        )
