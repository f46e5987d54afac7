"""Maps an authenticated provider identity onto a customer account."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from headless_oauth.core.security import random_password_hash
from headless_oauth.models.customer import Customer
from headless_oauth.models.identity import identity_column, set_identity
from headless_oauth.providers.models import OAuthUserData
from headless_oauth.services.hooks import OAuthHooks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserResolveResult:
    customer: Any
    is_new_user: bool


class UserResolver:
    """
    Resolution order:

    1. A customer already linked to this provider subject.
    2. A customer with the same e-mail; the provider is linked to it and
       empty names are filled in.
    3. A new, verified customer with a random password.
    """

    def __init__(self, db: Session, customer_model: type = Customer, hooks: Optional[OAuthHooks] = None):
        self.db = db
        self.customer_model = customer_model
        self.hooks = hooks or OAuthHooks()

    def resolve(self, user_data: OAuthUserData) -> UserResolveResult:
        customer = self._find_by_provider_id(user_data.provider, user_data.provider_id)
        if customer is not None:
            return UserResolveResult(customer, is_new_user=False)

        customer = self.db.scalar(
            select(self.customer_model).where(self.customer_model.email == user_data.email)
        )
        if customer is not None:
            self._link_provider(customer, user_data)
            return UserResolveResult(customer, is_new_user=False)

        return UserResolveResult(self._create_customer(user_data), is_new_user=True)

    def _find_by_provider_id(self, provider: str, provider_id: str):
        column = identity_column(self.customer_model, provider)
        return self.db.scalar(select(self.customer_model).where(column == provider_id))

    def _link_provider(self, customer, user_data: OAuthUserData) -> None:
        set_identity(customer, user_data.provider, user_data.provider_id)
        # Apple only sends names on the first authorization
        if user_data.first_name is not None and not customer.first_name:
            customer.first_name = user_data.first_name
        if user_data.last_name is not None and not customer.last_name:
            customer.last_name = user_data.last_name
        self.db.commit()
        logger.info("Linked %s identity to existing customer id=%s", user_data.provider, customer.id)
        self.hooks.provider_linked(customer, user_data.provider, user_data.provider_id)

    def _create_customer(self, user_data: OAuthUserData):
        customer = self.customer_model(
            email=user_data.email,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            password_hash=random_password_hash(),
            has_password=False,
            enabled=True,
            verified_at=dt.datetime.now(dt.timezone.utc),
        )
        set_identity(customer, user_data.provider, user_data.provider_id)
        self.hooks.pre_user_create(user_data, customer)
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info("Created customer id=%s from %s login", customer.id, user_data.provider)
        return customer
