"""Generic OpenID Connect provider (Keycloak, Auth0, Okta, ...).

Endpoints come from the issuer's discovery document. User data is read from
the id_token when one is returned and verifies; otherwise the userinfo
endpoint is queried with the access token.
"""
import logging
from typing import Any, Optional

import httpx
import jwt

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.providers.base import OAuthProvider
from headless_oauth.providers.models import OAuthTokenData, OAuthUserData
from headless_oauth.security.jwks import decode_unverified, fetch_jwks, parse_key_set, select_signing_key
from headless_oauth.services.credentials import Credential, CredentialValidator
from headless_oauth.services.oidc_discovery import OidcDiscoveryService

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ["RS256", "RS384", "RS512", "ES256", "ES384", "ES512", "PS256"]


class OpenIdConnectProvider(OAuthProvider):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        discovery: OidcDiscoveryService,
        client_id: str,
        client_secret: str,
        issuer_url: str,
        enabled: bool = True,
        verify_jwt: bool = True,
        provider_name: str = "oidc",
        scopes: str = "openid email profile",
        credential_validator: Optional[CredentialValidator] = None,
    ):
        super().__init__(http_client, credential_validator, enabled)
        self.discovery = discovery
        self.client_id = client_id
        self.client_secret = client_secret
        self.issuer_url = issuer_url
        self.verify_jwt = verify_jwt
        self.name = provider_name.lower()
        self.display_name = provider_name[:1].upper() + provider_name[1:]
        self.scopes = scopes

    def credential_status(self) -> dict[str, bool]:
        return {
            "client_id": bool(self.client_id),
            "client_secret": bool(self.client_secret),
            "issuer_url": bool(self.issuer_url),
        }

    def required_credentials(self) -> list[Credential]:
        return [
            Credential(self.client_id, "OIDC_PROVIDERS.client_id", "client ID"),
            Credential(self.client_secret, "OIDC_PROVIDERS.client_secret", "client secret"),
        ]

    def validate_credentials(self) -> None:
        if not self.issuer_url:
            raise OAuthException(
                f'OIDC provider "{self.name}" issuer URL is not configured. Set the issuer_url parameter.'
            )
        self.credential_validator.validate_many(self.required_credentials(), f"OIDC ({self.name})")

    async def get_user_data(self, code: str, redirect_uri: str) -> OAuthUserData:
        self.validate_credentials()
        token_endpoint = await self.discovery.token_endpoint(self.issuer_url)
        tokens = await self._request_json(
            "POST",
            token_endpoint,
            "exchange OIDC authorization code",
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not tokens.get("access_token"):
            raise OAuthException("OIDC token response missing access_token")
        return await self._user_data_from_tokens(
            tokens["access_token"], tokens.get("id_token"), tokens.get("refresh_token")
        )

    def supports_refresh(self) -> bool:
        return True

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokenData:
        self.validate_credentials()
        token_endpoint = await self.discovery.token_endpoint(self.issuer_url)
        data = await self._request_json(
            "POST",
            token_endpoint,
            "refresh OIDC tokens",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not data.get("access_token"):
            raise OAuthException("OIDC refresh token response missing access_token")
        return OAuthTokenData(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or refresh_token,
            expires_in=self._optional_int(data.get("expires_in")),
            token_type=data.get("token_type"),
            id_token=data.get("id_token"),
        )

    async def get_user_data_from_token_data(self, token_data: OAuthTokenData) -> OAuthUserData:
        return await self._user_data_from_tokens(
            token_data.access_token, token_data.id_token, token_data.refresh_token
        )

    async def _user_data_from_tokens(
        self, access_token: str, id_token: Optional[str], refresh_token: Optional[str]
    ) -> OAuthUserData:
        if id_token:
            try:
                claims = await self._decode_id_token(id_token)
                return self._to_user_data(claims, "id_token", refresh_token)
            except OAuthException as e:
                logger.info("OIDC id_token unusable, falling back to userinfo | provider=%s reason=%s", self.name, e)
        user_info = await self._fetch_user_info(access_token)
        return self._to_user_data(user_info, "userinfo", refresh_token)

    async def _decode_id_token(self, id_token: str) -> dict[str, Any]:
        if not self.verify_jwt:
            try:
                return decode_unverified(id_token)
            except jwt.PyJWTError as e:
                raise OAuthException("Invalid id_token format", 400, e) from e

        jwks_uri = await self.discovery.jwks_uri(self.issuer_url)
        key_set = parse_key_set(await fetch_jwks(self.http_client, jwks_uri, "OIDC"), "OIDC")
        try:
            signing_key = select_signing_key(key_set, id_token)
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=SUPPORTED_ALGORITHMS,
                audience=self.client_id,
            )
        except (jwt.PyJWTError, KeyError) as e:
            raise OAuthException(f"Failed to verify id_token: {e}", 401, e) from e

        expected_issuer = self.issuer_url.rstrip("/")
        token_issuer = str(claims.get("iss", "")).rstrip("/")
        if token_issuer != expected_issuer:
            raise OAuthException(
                f'id_token issuer mismatch: expected "{expected_issuer}", got "{token_issuer}"', 401
            )
        return claims

    async def _fetch_user_info(self, access_token: str) -> dict[str, Any]:
        endpoint = await self.discovery.userinfo_endpoint(self.issuer_url)
        if endpoint is None:
            raise OAuthException("OIDC provider does not expose a userinfo endpoint")
        data = await self._request_json(
            "GET",
            endpoint,
            "fetch OIDC user info",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not data.get("sub"):
            raise OAuthException("OIDC userinfo response missing required field: sub")
        return data

    def _to_user_data(
        self, claims: dict[str, Any], source: str, refresh_token: Optional[str] = None
    ) -> OAuthUserData:
        subject = claims.get("sub")
        email = claims.get("email")
        if not subject:
            raise OAuthException(f"OIDC {source} missing required claim: sub")
        if not email:
            raise OAuthException(f"OIDC {source} missing required claim: email")

        first_name = claims.get("given_name") or claims.get("first_name")
        last_name = claims.get("family_name") or claims.get("last_name")
        if first_name is None and last_name is None and claims.get("name"):
            parts = str(claims["name"]).split(" ", 1)
            first_name = parts[0]
            last_name = parts[1] if len(parts) > 1 else None

        return OAuthUserData(
            provider=self.name,
            provider_id=str(subject),
            email=email,
            first_name=first_name,
            last_name=last_name,
            refresh_token=refresh_token,
        )
