from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OidcProviderSettings(BaseModel):
    """One named OpenID Connect identity provider (Keycloak, Auth0, Okta...)."""

    enabled: bool = True
    issuer_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    verify_jwt: bool = True
    scopes: str = "openid email profile"


_ENV_ALIASES = {"development": "dev", "testing": "test", "production": "prod"}


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Headless OAuth"
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./storage/headless_oauth.db"
    REDIS_URL: str | None = None
    JWT_SECRET: str = "change_me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Google
    GOOGLE_ENABLED: bool = False
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""

    # Apple Sign-In (client secret is a JWT signed with the .p8 key)
    APPLE_ENABLED: bool = False
    APPLE_CLIENT_ID: str = ""
    APPLE_TEAM_ID: str = ""
    APPLE_KEY_ID: str = ""
    APPLE_PRIVATE_KEY_PATH: str = ""

    # Facebook
    FACEBOOK_ENABLED: bool = False
    FACEBOOK_CLIENT_ID: str = ""
    FACEBOOK_CLIENT_SECRET: str = ""

    # Generic OIDC providers, keyed by provider name. JSON in the environment:
    # OIDC_PROVIDERS='{"keycloak": {"issuer_url": "...", "client_id": "...", "client_secret": "..."}}'
    OIDC_PROVIDERS: dict[str, OidcProviderSettings] = {}

    # Empty list disables redirect URI validation
    OAUTH_ALLOWED_REDIRECT_URIS: list[str] = []
    OAUTH_VERIFY_APPLE_JWT: bool = True

    @field_validator("ENV", mode="before")
    @classmethod
    def _normalize_env(cls, v):
        """`production`, `development` and `testing` are stored as `prod`, `dev` and `test`."""
        if isinstance(v, str):
            env = v.strip().lower()
            return _ENV_ALIASES.get(env, env)
        return v

    @field_validator("OIDC_PROVIDERS", mode="before")
    @classmethod
    def _lowercase_oidc_names(cls, v):
        """Provider names are matched case-insensitively."""
        if isinstance(v, dict):
            return {str(name).lower(): cfg for name, cfg in v.items()}
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        if self.is_production:
            if self.JWT_SECRET == "change_me":
                raise ValueError("Insecure default secrets in production: JWT_SECRET uses default placeholder")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENV == "prod"


class DevSettings(BaseAppSettings):
    ENV: str = "dev"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite://"
    JWT_SECRET: str = "test-secret-key-for-headless-oauth-tests"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
