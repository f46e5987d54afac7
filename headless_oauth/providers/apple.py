"""Sign in with Apple.

Apple has no userinfo endpoint: the user is identified by the id_token that
comes back from the token endpoint. Names are only sent on the very first
authorization, so they are usually absent here.
"""
from typing import Any, Optional, Union

import httpx

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.providers.apple_secret import AppleClientSecretGenerator
from headless_oauth.providers.base import OAuthProvider
from headless_oauth.providers.models import OAuthTokenData, OAuthUserData
from headless_oauth.security.jwks import AppleJwksVerifier, NullAppleJwksVerifier
from headless_oauth.security.security_logger import NullOAuthSecurityLogger, OAuthSecurityLogger
from headless_oauth.services.credentials import Credential, CredentialValidator


class AppleProvider(OAuthProvider):
    TOKEN_URL = "https://appleid.apple.com/auth/token"

    name = "apple"
    display_name = "Apple"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_secret_generator: AppleClientSecretGenerator,
        client_id: str,
        enabled: bool = True,
        jwks_verifier: Optional[Union[AppleJwksVerifier, NullAppleJwksVerifier]] = None,
        security_logger: Optional[OAuthSecurityLogger] = None,
        credential_validator: Optional[CredentialValidator] = None,
    ):
        super().__init__(http_client, credential_validator, enabled)
        self.client_secret_generator = client_secret_generator
        self.client_id = client_id
        self.jwks_verifier = jwks_verifier or NullAppleJwksVerifier()
        self.security_logger = security_logger or NullOAuthSecurityLogger()

    def credential_status(self) -> dict[str, bool]:
        generator = self.client_secret_generator
        return {
            "client_id": bool(self.client_id),
            "team_id": bool(generator.team_id),
            "key_id": bool(generator.key_id),
            "private_key_path": bool(generator.private_key_path),
        }

    def required_credentials(self) -> list[Credential]:
        return [Credential(self.client_id, "APPLE_CLIENT_ID", "client ID")]

    async def get_user_data(self, code: str, redirect_uri: str) -> OAuthUserData:
        self.validate_credentials()
        tokens = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "exchange Apple authorization code",
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret_generator.generate(),
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not tokens.get("access_token") or not tokens.get("id_token"):
            raise OAuthException("Apple token response missing required fields")
        claims = await self._decode_id_token(tokens["id_token"])
        return self._to_user_data(claims, tokens.get("refresh_token"))

    def supports_refresh(self) -> bool:
        return True

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokenData:
        self.validate_credentials()
        data = await self._request_json(
            "POST",
            self.TOKEN_URL,
            "refresh Apple tokens",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret_generator.generate(),
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not data.get("access_token"):
            raise OAuthException("Apple refresh token response missing access_token")
        # Apple rotates refresh tokens on every use
        return OAuthTokenData(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=self._optional_int(data.get("expires_in")),
            token_type=data.get("token_type"),
            id_token=data.get("id_token"),
        )

    async def get_user_data_from_token_data(self, token_data: OAuthTokenData) -> OAuthUserData:
        if not token_data.id_token:
            raise OAuthException("Apple refresh response did not include id_token. Cannot identify user.")
        claims = await self._decode_id_token(token_data.id_token)
        return self._to_user_data(claims)

    async def _decode_id_token(self, id_token: str) -> dict[str, Any]:
        try:
            return await self.jwks_verifier.verify(id_token)
        except OAuthException as e:
            self.security_logger.log_jwt_verification_failure(self.name, e.message)
            raise

    def _to_user_data(self, claims: dict[str, Any], refresh_token: Optional[str] = None) -> OAuthUserData:
        return OAuthUserData(
            provider=self.name,
            provider_id=str(claims["sub"]),
            email=claims["email"],
            first_name=claims.get("firstName"),
            last_name=claims.get("lastName"),
            refresh_token=refresh_token,
        )
