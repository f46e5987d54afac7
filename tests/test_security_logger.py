"""Tests for structured security audit events."""
import logging
from unittest.mock import MagicMock

import pytest

from headless_oauth.security.security_logger import NullOAuthSecurityLogger, OAuthSecurityLogger, mask_email


@pytest.fixture
def audit(caplog):
    caplog.set_level(logging.DEBUG, logger="test.audit")
    return OAuthSecurityLogger(logging.getLogger("test.audit"))


class TestMaskEmail:
    @pytest.mark.parametrize(
        "email,masked",
        [
            ("user@example.com", "u***@example.com"),
            ("a@example.com", "***@example.com"),
            ("@example.com", "***@example.com"),
            ("not-an-email", "***"),
            ("a@b@c", "***"),
        ],
    )
    def test_masking(self, email, masked):
        assert mask_email(email) == masked


class TestOAuthSecurityLogger:
    def test_auth_success(self, audit, caplog):
        audit.log_auth_success("google", "jane@example.com", 12, is_new_user=True)
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "OAuth authentication successful"
        assert record.event_type == "oauth_auth_success"
        assert record.email == "j***@example.com"
        assert record.customer_id == 12
        assert record.is_new_user is True

    def test_failures_are_warnings(self, audit, caplog):
        audit.log_auth_failure("apple", "bad code", {"ip": "1.2.3.4"})
        audit.log_refresh_failure("google", "revoked")
        audit.log_jwt_verification_failure("apple", "expired")
        audit.log_suspicious_activity("state_mismatch", {"provider": "google"})
        levels = {r.event_type: r.levelno for r in caplog.records}
        assert levels == {
            "oauth_auth_failure": logging.WARNING,
            "oauth_refresh_failure": logging.WARNING,
            "oauth_jwt_verification_failure": logging.WARNING,
            "oauth_suspicious_activity": logging.WARNING,
        }
        assert caplog.records[0].ip == "1.2.3.4"

    def test_refresh_success(self, audit, caplog):
        audit.log_refresh_success("facebook", 3)
        assert caplog.records[-1].event_type == "oauth_refresh_success"
        assert caplog.records[-1].levelno == logging.INFO

    def test_redirect_rejection_logs_host_only(self, audit, caplog):
        audit.log_redirect_uri_rejected("https://evil.example/cb?token=secret", "google")
        record = caplog.records[-1]
        assert record.redirect_host == "evil.example"
        assert "secret" not in str(record.__dict__)

    def test_redirect_rejection_unparseable_host(self, audit, caplog):
        audit.log_redirect_uri_rejected("not a uri", "google")
        assert caplog.records[-1].redirect_host == "unknown"

    def test_redirect_rejection_malformed_ipv6_host(self, audit, caplog):
        audit.log_redirect_uri_rejected("http://[evil/cb", "google")
        assert caplog.records[-1].redirect_host == "unknown"


class TestNullOAuthSecurityLogger:
    def test_emits_nothing(self):
        audit = NullOAuthSecurityLogger()
        audit.logger = MagicMock(spec=logging.Logger)
        audit.log_auth_success("google", "a@b.c", 1)
        audit.log_auth_failure("google", "x")
        audit.log_redirect_uri_rejected("https://x", "google")
        assert audit.logger.method_calls == []
