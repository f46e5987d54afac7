import pytest
from fastapi.testclient import TestClient

from headless_oauth.api.main import create_app
from headless_oauth.bundle import HOOKS, HTTP_CLIENT
from headless_oauth.models.customer import Customer
from headless_oauth.services.hooks import OAuthHooks

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
CALLBACK = "https://shop.example/oauth/callback"


@pytest.fixture
def app(make_settings, http_client):
    settings = make_settings(
        GOOGLE_ENABLED=True,
        GOOGLE_CLIENT_ID="google-id",
        GOOGLE_CLIENT_SECRET="google-secret",
        APPLE_ENABLED=True,
        APPLE_CLIENT_ID="com.shop.web",
        OAUTH_ALLOWED_REDIRECT_URIS=[CALLBACK],
    )
    return create_app(settings, host_services={HTTP_CLIENT: http_client})


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(app):
    def _headers(customer):
        token = app.state.oauth_bundle.token_issuer.issue(customer.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


def _mock_google(router, user_id="g-1", email="jane@example.com"):
    router.add("POST", GOOGLE_TOKEN_URL, {"access_token": "at", "refresh_token": "rt", "expires_in": 3599})
    router.add(
        "GET",
        GOOGLE_USERINFO_URL,
        {"id": user_id, "email": email, "given_name": "Jane", "family_name": "Doe"},
    )


def test_list_providers(client):
    resp = client.get("/auth/oauth/providers")
    assert resp.status_code == 200
    assert resp.json() == {
        "providers": [
            {"name": "google", "displayName": "Google"},
            {"name": "apple", "displayName": "Apple"},
        ]
    }


def test_login_creates_customer(client, router, db):
    _mock_google(router)
    resp = client.post(
        "/auth/oauth/google",
        json={"code": "auth-code", "redirectUri": CALLBACK, "state": "csrf-1"},
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["state"] == "csrf-1"
    assert body["refreshToken"] == "rt"
    assert body["token"]
    customer = db.get(Customer, body["customerId"])
    assert customer.google_id == "g-1"
    assert router.form(router.calls_to(GOOGLE_TOKEN_URL)[0])["redirect_uri"] == CALLBACK


def test_login_provider_name_is_case_insensitive(client, router):
    _mock_google(router)
    resp = client.post("/auth/oauth/Google", json={"code": "c", "redirectUri": CALLBACK})
    assert resp.status_code == 200
    assert resp.json()["state"] is None


def test_login_rejects_unknown_redirect_uri(client, router):
    resp = client.post("/auth/oauth/google", json={"code": "c", "redirectUri": "https://evil.example/cb"})
    assert resp.status_code == 400
    assert resp.json()["code"] == 400
    assert router.calls == []


def test_login_rejects_malformed_redirect_uri(client, router):
    resp = client.post("/auth/oauth/google", json={"code": "c", "redirectUri": "http://[evil/cb"})
    assert resp.status_code == 400
    assert "is not in the allowed list" in resp.json()["message"]
    assert router.calls == []


def test_login_unsupported_provider(client):
    resp = client.post("/auth/oauth/facebook", json={"code": "c", "redirectUri": CALLBACK})
    assert resp.status_code == 400
    assert resp.json() == {
        "code": 400,
        "message": 'OAuth provider "facebook" is not supported. Available providers: google, apple',
    }


def test_login_upstream_error_keeps_status(client, router):
    router.add("POST", GOOGLE_TOKEN_URL, {"error": "invalid_grant"}, status=401)
    resp = client.post("/auth/oauth/google", json={"code": "c", "redirectUri": CALLBACK})
    assert resp.status_code == 401
    assert resp.json()["message"].startswith("Failed to exchange Google authorization code")


def test_login_apple_misconfigured(client):
    resp = client.post("/auth/oauth/apple", json={"code": "c", "redirectUri": CALLBACK})
    assert resp.status_code == 400
    assert "APPLE_TEAM_ID is not configured" in resp.json()["message"]


def test_login_requires_code(client):
    resp = client.post("/auth/oauth/google", json={"redirectUri": CALLBACK})
    assert resp.status_code == 422


def test_refresh(client, router, db):
    router.add("POST", GOOGLE_TOKEN_URL, {"access_token": "at2", "expires_in": 3599})
    router.add("GET", GOOGLE_USERINFO_URL, {"id": "g-1", "email": "jane@example.com"})
    resp = client.post("/auth/oauth/google/refresh", json={"refreshToken": "rt1"})

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["refreshToken"] == "rt1"
    assert db.get(Customer, body["customerId"]).email == "jane@example.com"


def test_connections_require_authentication(client):
    resp = client.get("/auth/oauth/connections")
    assert resp.status_code == 401
    assert resp.json() == {"code": 401, "message": "Authentication required"}

    resp = client.get("/auth/oauth/connections", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_list_connections(client, make_customer, auth_headers):
    customer = make_customer(google_id="g-1", facebook_id="fb-1")
    resp = client.get("/auth/oauth/connections", headers=auth_headers(customer))
    assert resp.status_code == 200
    # facebook is linked but not enabled
    assert resp.json() == {"connections": [{"provider": "google", "displayName": "Google"}]}


def test_unlink_with_password(client, db, make_customer, auth_headers):
    customer = make_customer(google_id="g-1", has_password=True)
    resp = client.delete("/auth/oauth/connections/google", headers=auth_headers(customer))

    assert resp.status_code == 200
    assert resp.json() == {"message": "Provider disconnected successfully", "provider": "google"}
    db.expire_all()
    assert db.get(Customer, customer.id).google_id is None


def test_unlink_with_another_provider(client, make_customer, auth_headers):
    customer = make_customer(google_id="g-1", apple_id="a-1")
    resp = client.delete("/auth/oauth/connections/apple", headers=auth_headers(customer))
    assert resp.status_code == 200


def test_unlink_last_method_is_refused(client, db, make_customer, auth_headers):
    customer = make_customer(google_id="g-1")
    resp = client.delete("/auth/oauth/connections/google", headers=auth_headers(customer))

    assert resp.status_code == 400
    assert resp.json()["message"] == (
        "Cannot unlink the last authentication method. "
        "Please set a password first or connect another provider."
    )
    db.expire_all()
    assert db.get(Customer, customer.id).google_id == "g-1"


def test_unlink_not_connected(client, make_customer, auth_headers):
    customer = make_customer(has_password=True)
    resp = client.delete("/auth/oauth/connections/google", headers=auth_headers(customer))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Provider is not connected to this account"


@pytest.mark.parametrize("env", ["prod", "production"])
def test_docs_hidden_in_production(http_client, env):
    from headless_oauth.core.config import ProdSettings

    settings = ProdSettings(ENV=env, JWT_SECRET="prod-secret", DATABASE_URL="sqlite://")
    client = TestClient(create_app(settings, host_services={HTTP_CLIENT: http_client}))
    assert client.get("/docs").status_code == 404
    assert client.get("/openapi.json").status_code == 404
    assert client.get("/auth/oauth/providers").json() == {"providers": []}


def test_login_runs_host_hooks(make_settings, http_client, router, make_customer):
    existing = make_customer(email="jane@example.com")
    events = []
    hooks = OAuthHooks(
        on_pre_user_create=lambda user_data, customer: events.append("create"),
        on_provider_linked=lambda customer, provider, pid: events.append(("linked", customer.id, provider, pid)),
        on_post_authentication=lambda customer, user_data, is_new: events.append(("auth", customer.id, is_new)),
    )
    settings = make_settings(
        GOOGLE_ENABLED=True,
        GOOGLE_CLIENT_ID="google-id",
        GOOGLE_CLIENT_SECRET="google-secret",
        OAUTH_ALLOWED_REDIRECT_URIS=[CALLBACK],
    )
    client = TestClient(create_app(settings, host_services={HTTP_CLIENT: http_client, HOOKS: hooks}))
    _mock_google(router)

    resp = client.post("/auth/oauth/google", json={"code": "c", "redirectUri": CALLBACK})

    assert resp.status_code == 200, resp.text
    assert events == [("linked", existing.id, "google", "g-1"), ("auth", existing.id, False)]
