from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from headless_oauth.providers.base import OAuthProvider


@dataclass(frozen=True)
class ProviderHealthStatus:
    name: str
    enabled: bool
    credentials: dict[str, bool]
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        # Disabled providers are never used, so their configuration does not matter
        if not self.enabled:
            return True
        return not self.issues and all(self.credentials.values())

    def missing_credentials(self) -> list[str]:
        return [name for name, configured in self.credentials.items() if not configured]


class ProviderHealthChecker:
    def __init__(self, providers: Iterable[OAuthProvider]):
        self.providers = list(providers)

    def check_all(self) -> list[ProviderHealthStatus]:
        return [self.check(provider) for provider in self.providers]

    def is_all_healthy(self) -> bool:
        return all(status.is_healthy() for status in self.check_all())

    def check(self, provider: OAuthProvider) -> ProviderHealthStatus:
        credentials = provider.credential_status()
        issues = []
        if provider.is_enabled():
            missing = [name for name, configured in credentials.items() if not configured]
            if missing:
                issues.append("Missing credentials: " + ", ".join(missing))
        return ProviderHealthStatus(
            name=provider.name,
            enabled=provider.is_enabled(),
            credentials=credentials,
            issues=issues,
        )
