"""Tests for the OAuth exception hierarchy and its HTTP rendering."""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from headless_oauth.core.errors import register_error_handlers
from headless_oauth.core.exceptions import OAuthException, ProviderNotSupportedException


class TestOAuthException:
    def test_defaults(self):
        exc = OAuthException()
        assert exc.message == "An OAuth error occurred"
        assert exc.status_code == 400
        assert exc.cause is None
        assert str(exc) == "An OAuth error occurred"

    def test_cause_is_chained(self):
        root = ValueError("boom")
        exc = OAuthException("wrapped", 502, root)
        assert exc.cause is root
        assert exc.__cause__ is root

    def test_to_dict(self):
        assert OAuthException("Nope", 401).to_dict() == {"code": 401, "message": "Nope"}


class TestProviderNotSupported:
    def test_message_and_status(self):
        exc = ProviderNotSupportedException("github")
        assert exc.status_code == 400
        assert exc.provider == "github"
        assert exc.message == 'OAuth provider "github" is not supported. Available providers: google, apple'

    def test_is_oauth_exception(self):
        assert isinstance(ProviderNotSupportedException("x"), OAuthException)


class TestErrorHandlers:
    def _client(self):
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/oauth-error")
        def oauth_error():
            raise ProviderNotSupportedException("myspace")

        @app.get("/crash")
        def crash():
            raise RuntimeError("unexpected")

        return TestClient(app, raise_server_exceptions=False)

    def test_oauth_exception_rendered_with_its_status(self):
        resp = self._client().get("/oauth-error")
        assert resp.status_code == 400
        assert resp.json() == {
            "code": 400,
            "message": 'OAuth provider "myspace" is not supported. Available providers: google, apple',
        }

    def test_unhandled_exception_is_500_with_correlation_id(self):
        resp = self._client().get("/crash")
        assert resp.status_code == 500
        body = resp.json()
        assert body["detail"] == "Internal server error"
        assert len(body["cid"]) == 32
