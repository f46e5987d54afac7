"""
OAuth authentication routes.

Endpoints:
- GET    /auth/oauth/providers                - List enabled providers
- POST   /auth/oauth/{provider}               - Exchange an authorization code for an access token
- POST   /auth/oauth/{provider}/refresh       - Refresh using a provider refresh token
- GET    /auth/oauth/connections              - Providers linked to the current customer
- DELETE /auth/oauth/connections/{provider}   - Unlink a provider from the current customer
"""

import logging

from fastapi import APIRouter

from headless_oauth.api.dependencies import BundleDep, CurrentCustomerDep, DbDep, ResolverDep
from headless_oauth.core.exceptions import OAuthException
from headless_oauth.models import schemas
from headless_oauth.models.identity import has_identity, set_identity
from headless_oauth.providers.metadata import PROVIDER_DISPLAY, Provider
from headless_oauth.providers.models import OAuthResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth/oauth", tags=["oauth"])


@router.get("/providers", response_model=schemas.ProvidersOut)
def list_providers(bundle: BundleDep):
    return schemas.ProvidersOut(
        providers=[
            schemas.ProviderOut(name=p.name, display_name=p.display_name)
            for p in bundle.providers
            if p.is_enabled()
        ]
    )


@router.get("/connections", response_model=schemas.ConnectionsOut)
def list_connections(bundle: BundleDep, customer: CurrentCustomerDep):
    return schemas.ConnectionsOut(
        connections=[
            schemas.ConnectionOut(provider=p.name, display_name=p.display_name)
            for p in bundle.providers
            if p.is_enabled() and has_identity(customer, p.name)
        ]
    )


@router.delete("/connections/{provider}", response_model=schemas.UnlinkOut)
def unlink_connection(provider: str, customer: CurrentCustomerDep, db: DbDep):
    provider_name = provider.lower()
    if not has_identity(customer, provider_name):
        raise OAuthException("Provider is not connected to this account", 400)

    slot = Provider.for_name(provider_name)
    other_linked = any(has_identity(customer, key) for key in PROVIDER_DISPLAY if key != slot.value)
    if not customer.has_password and not other_linked:
        raise OAuthException(
            "Cannot unlink the last authentication method. "
            "Please set a password first or connect another provider.",
            400,
        )

    set_identity(customer, provider_name, None)
    db.commit()
    logger.info("Unlinked %s from customer id=%s", provider_name, customer.id)
    return schemas.UnlinkOut(message="Provider disconnected successfully", provider=provider_name)


@router.post("/{provider}", response_model=OAuthResponse)
async def authenticate(provider: str, payload: schemas.OAuthRequest, bundle: BundleDep, resolver: ResolverDep):
    return await bundle.processor.process(provider, payload, resolver)


@router.post("/{provider}/refresh", response_model=OAuthResponse)
async def refresh(provider: str, payload: schemas.OAuthRefreshRequest, bundle: BundleDep, resolver: ResolverDep):
    return await bundle.refresh_processor.process(provider, payload, resolver)
