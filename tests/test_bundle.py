import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from headless_oauth.bundle import HTTP_CLIENT, HeadlessOAuthBundle
from headless_oauth.providers.apple import AppleProvider
from headless_oauth.providers.factory import create_providers
from headless_oauth.providers.oidc import OpenIdConnectProvider
from headless_oauth.security.jwks import AppleJwksVerifier, NullAppleJwksVerifier
from headless_oauth.services.hooks import OAuthHooks


def _apple(providers):
    return next(p for p in providers if isinstance(p, AppleProvider))


class TestCreateProviders:
    def test_disabled_providers_are_built(self, make_settings, http_client):
        providers = create_providers(make_settings(), http_client)
        assert [p.name for p in providers] == ["google", "apple", "facebook"]
        assert not any(p.is_enabled() for p in providers)

    def test_apple_verifier_follows_setting(self, make_settings, http_client, memory_cache):
        verified = _apple(create_providers(make_settings(APPLE_CLIENT_ID="c"), http_client, memory_cache))
        assert isinstance(verified.jwks_verifier, AppleJwksVerifier)
        assert verified.jwks_verifier.cache is memory_cache

        unverified = _apple(create_providers(make_settings(OAUTH_VERIFY_APPLE_JWT=False), http_client))
        assert isinstance(unverified.jwks_verifier, NullAppleJwksVerifier)

    def test_named_oidc_providers(self, make_settings, http_client):
        settings = make_settings(
            OIDC_PROVIDERS={
                "Keycloak": {"issuer_url": "https://kc.example", "client_id": "a", "client_secret": "b"},
                "okta": {"issuer_url": "https://okta.example", "enabled": False, "verify_jwt": False},
            }
        )
        oidc = [p for p in create_providers(settings, http_client) if isinstance(p, OpenIdConnectProvider)]
        assert [(p.name, p.is_enabled(), p.verify_jwt) for p in oidc] == [
            ("keycloak", True, True),
            ("okta", False, False),
        ]
        assert oidc[0].discovery is oidc[1].discovery


class TestHeadlessOAuthBundle:
    def test_services_share_one_provider_list(self, make_settings, http_client):
        bundle = HeadlessOAuthBundle(make_settings(), {HTTP_CLIENT: http_client})
        assert bundle.processor.providers == bundle.health_checker.providers
        assert bundle.providers[0].http_client is http_client

    def test_install(self, make_settings, http_client):
        bundle = HeadlessOAuthBundle(make_settings(), {HTTP_CLIENT: http_client})
        app = bundle.install(FastAPI())
        assert app.state.oauth_bundle is bundle
        resp = TestClient(app).get("/auth/oauth/providers")
        assert resp.status_code == 200
        assert resp.json() == {"providers": []}

    def test_hooks_reach_processor(self, make_settings, http_client):
        hooks = OAuthHooks(on_post_authentication=lambda *args: None)
        bundle = HeadlessOAuthBundle(make_settings(), {HTTP_CLIENT: http_client}, hooks=hooks)
        assert bundle.hooks is hooks
        assert bundle.processor.hooks is hooks

    def test_default_hooks_are_empty(self, make_settings, http_client):
        bundle = HeadlessOAuthBundle(make_settings(), {HTTP_CLIENT: http_client})
        assert bundle.processor.hooks == OAuthHooks()

    @pytest.mark.asyncio
    async def test_aclose_leaves_host_client_open(self, make_settings, http_client):
        bundle = HeadlessOAuthBundle(make_settings(), {HTTP_CLIENT: http_client})
        bundle.providers
        await bundle.aclose()
        assert not http_client.is_closed

    @pytest.mark.asyncio
    async def test_aclose_closes_own_client(self, make_settings):
        bundle = HeadlessOAuthBundle(make_settings())
        client = bundle.get(HTTP_CLIENT)
        assert isinstance(client, httpx.AsyncClient)
        await bundle.aclose()
        assert client.is_closed

    @pytest.mark.asyncio
    async def test_aclose_without_client_built(self, make_settings):
        await HeadlessOAuthBundle(make_settings()).aclose()
