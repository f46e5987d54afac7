from __future__ import annotations

from dataclasses import dataclass

from headless_oauth.core.exceptions import OAuthException


@dataclass(frozen=True)
class Credential:
    value: str
    env: str
    name: str


class CredentialValidator:
    """Fails loudly when an enabled provider is missing a credential."""

    def validate(self, value: str, env_var: str, provider_name: str, credential_name: str) -> None:
        if value and value.strip():
            return
        raise OAuthException(
            f"{provider_name} OAuth is enabled but {env_var} is not configured. "
            "Set the environment variable or disable the provider."
        )

    def validate_many(self, credentials: list[Credential], provider_name: str) -> None:
        for credential in credentials:
            self.validate(credential.value, credential.env, provider_name, credential.name)
