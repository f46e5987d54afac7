from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OAuthRequest(CamelModel):
    code: str = Field(min_length=1)
    redirect_uri: str = Field(min_length=1)
    state: Optional[str] = Field(default=None, max_length=255)


class OAuthRefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class ProviderOut(CamelModel):
    name: str
    display_name: str


class ProvidersOut(BaseModel):
    providers: list[ProviderOut]


class ConnectionOut(CamelModel):
    provider: str
    display_name: str


class ConnectionsOut(BaseModel):
    connections: list[ConnectionOut]


class UnlinkOut(BaseModel):
    message: str
    provider: str
