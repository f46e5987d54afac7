"""OAuth identity columns and the per-provider accessors for them."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from headless_oauth.providers.metadata import Provider


@runtime_checkable
class SupportsOAuthIdentity(Protocol):
    google_id: Optional[str]
    apple_id: Optional[str]
    facebook_id: Optional[str]
    oidc_id: Optional[str]


class OAuthIdentityMixin:
    """Adds one nullable, unique provider subject column per provider."""

    google_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    apple_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    facebook_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    oidc_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)


def get_identity(customer: SupportsOAuthIdentity, provider: str) -> Optional[str]:
    slot = Provider.for_name(provider)
    if slot is Provider.GOOGLE:
        return customer.google_id
    elif slot is Provider.APPLE:
        return customer.apple_id
    elif slot is Provider.FACEBOOK:
        return customer.facebook_id
    return customer.oidc_id


def set_identity(customer: SupportsOAuthIdentity, provider: str, value: Optional[str]) -> None:
    slot = Provider.for_name(provider)
    if slot is Provider.GOOGLE:
        customer.google_id = value
    elif slot is Provider.APPLE:
        customer.apple_id = value
    elif slot is Provider.FACEBOOK:
        customer.facebook_id = value
    else:
        customer.oidc_id = value


def identity_column(model: Any, provider: str) -> Any:
    """Mapped column on ``model`` holding the subject id for ``provider``."""
    slot = Provider.for_name(provider)
    if slot is Provider.GOOGLE:
        return model.google_id
    elif slot is Provider.APPLE:
        return model.apple_id
    elif slot is Provider.FACEBOOK:
        return model.facebook_id
    return model.oidc_id


def has_identity(customer: SupportsOAuthIdentity, provider: str) -> bool:
    """Empty strings count as not connected."""
    return bool(get_identity(customer, provider))
