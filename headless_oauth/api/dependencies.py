"""Request-scoped dependencies for the OAuth routes."""
from typing import Annotated, Optional, TypeAlias

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from headless_oauth.bundle import HeadlessOAuthBundle
from headless_oauth.core.exceptions import OAuthException
from headless_oauth.core.security import TokenValidationError
from headless_oauth.db.session import get_db
from headless_oauth.models.customer import Customer
from headless_oauth.services.user_resolver import UserResolver

bearer_scheme = HTTPBearer(auto_error=False)

DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def get_bundle(request: Request) -> HeadlessOAuthBundle:
    return request.app.state.oauth_bundle


BundleDep: TypeAlias = Annotated[HeadlessOAuthBundle, Depends(get_bundle)]


def get_user_resolver(db: DbDep, bundle: BundleDep) -> UserResolver:
    return UserResolver(db, hooks=bundle.hooks)


ResolverDep: TypeAlias = Annotated[UserResolver, Depends(get_user_resolver)]


def get_current_customer(
    bundle: BundleDep,
    db: DbDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Customer:
    """Customer named by the bearer access token; anything else is a 401."""
    if credentials is None:
        raise OAuthException("Authentication required", 401)
    try:
        customer_id = bundle.token_issuer.customer_id(credentials.credentials)
    except TokenValidationError as exc:
        raise OAuthException("Authentication required", 401, exc) from exc
    customer = db.get(Customer, customer_id)
    if customer is None or not customer.enabled:
        raise OAuthException("Authentication required", 401)
    return customer


CurrentCustomerDep: TypeAlias = Annotated[Customer, Depends(get_current_customer)]
