"""Static display metadata for the supported providers.

The key set of ``PROVIDER_DISPLAY`` is the list of providers the bundle knows
about; templates and the connection endpoints iterate it in this order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Provider(str, Enum):
    GOOGLE = "google"
    APPLE = "apple"
    FACEBOOK = "facebook"
    OIDC = "oidc"

    @classmethod
    def for_name(cls, name: str) -> "Provider":
        """Map a provider name to its identity slot; named OIDC providers share ``oidc``."""
        try:
            return cls(name.lower())
        except ValueError:
            return cls.OIDC


@dataclass(frozen=True)
class ProviderDisplay:
    name: str
    icon: str
    color: str
    identity_field: str


PROVIDER_DISPLAY: Mapping[str, ProviderDisplay] = MappingProxyType(
    {
        Provider.GOOGLE.value: ProviderDisplay("Google", "google", "#4285F4", "google_id"),
        Provider.APPLE.value: ProviderDisplay("Apple", "apple", "#000000", "apple_id"),
        Provider.FACEBOOK.value: ProviderDisplay("Facebook", "facebook", "#1877F2", "facebook_id"),
        Provider.OIDC.value: ProviderDisplay("OIDC", "openid", "#F78C40", "oidc_id"),
    }
)
