"""Data carriers passed between providers, the resolver and the API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class OAuthTokenData:
    """Tokens returned by a provider's code exchange or refresh."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    id_token: Optional[str] = None


@dataclass(frozen=True)
class OAuthUserData:
    """Normalized identity of the user a provider authenticated."""

    provider: str
    provider_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    refresh_token: Optional[str] = None


class OAuthResponse(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    token: str
    refresh_token: Optional[str] = None
    customer_id: Optional[int] = None
    state: Optional[str] = None
