"""Host callbacks fired during login.

Every callback is optional. Exceptions raised by a callback propagate
and fail the request, so a host can veto account creation by raising
an ``OAuthException`` from ``on_pre_user_create``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from headless_oauth.providers.models import OAuthUserData

PreUserCreateHook = Callable[[OAuthUserData, Any], None]
ProviderLinkedHook = Callable[[Any, str, str], None]
PostAuthenticationHook = Callable[[Any, OAuthUserData, bool], None]


@dataclass(frozen=True)
class OAuthHooks:
    # (user_data, customer) before the new customer is persisted
    on_pre_user_create: Optional[PreUserCreateHook] = None
    # (customer, provider, provider_id) after an e-mail match is linked
    on_provider_linked: Optional[ProviderLinkedHook] = None
    # (customer, user_data, is_new_user) after a successful login
    on_post_authentication: Optional[PostAuthenticationHook] = None

    def pre_user_create(self, user_data: OAuthUserData, customer: Any) -> None:
        if self.on_pre_user_create is not None:
            self.on_pre_user_create(user_data, customer)

    def provider_linked(self, customer: Any, provider: str, provider_id: str) -> None:
        if self.on_provider_linked is not None:
            self.on_provider_linked(customer, provider, provider_id)

    def post_authentication(self, customer: Any, user_data: OAuthUserData, is_new_user: bool) -> None:
        if self.on_post_authentication is not None:
            self.on_post_authentication(customer, user_data, is_new_user)
