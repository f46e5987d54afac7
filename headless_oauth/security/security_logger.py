"""Structured security audit events for OAuth flows.

Every event is a single log record with an ``event_type`` field plus context
passed through ``extra=``, so the JSON formatter emits it as structured data.
E-mail addresses are masked and redirect URIs are reduced to their host.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlparse


def mask_email(email: str) -> str:
    parts = email.split("@")
    if len(parts) != 2:
        return "***"
    local, domain = parts
    if len(local) <= 1:
        return f"***@{domain}"
    return f"{local[0]}***@{domain}"


class OAuthSecurityLogger:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("headless_oauth.security")

    def log_auth_success(self, provider: str, email: str, customer_id: Optional[int], is_new_user: bool = False) -> None:
        self.logger.info(
            "OAuth authentication successful",
            extra={
                "provider": provider,
                "email": mask_email(email),
                "customer_id": customer_id,
                "is_new_user": is_new_user,
                "event_type": "oauth_auth_success",
            },
        )

    def log_auth_failure(self, provider: str, reason: str, context: Optional[dict[str, Any]] = None) -> None:
        self.logger.warning(
            "OAuth authentication failed",
            extra={"provider": provider, "reason": reason, "event_type": "oauth_auth_failure", **(context or {})},
        )

    def log_refresh_success(self, provider: str, customer_id: Optional[int]) -> None:
        self.logger.info(
            "OAuth token refresh successful",
            extra={"provider": provider, "customer_id": customer_id, "event_type": "oauth_refresh_success"},
        )

    def log_refresh_failure(self, provider: str, reason: str, context: Optional[dict[str, Any]] = None) -> None:
        self.logger.warning(
            "OAuth token refresh failed",
            extra={"provider": provider, "reason": reason, "event_type": "oauth_refresh_failure", **(context or {})},
        )

    def log_suspicious_activity(self, activity_type: str, context: Optional[dict[str, Any]] = None) -> None:
        self.logger.warning(
            "Suspicious OAuth activity detected",
            extra={"type": activity_type, "event_type": "oauth_suspicious_activity", **(context or {})},
        )

    def log_jwt_verification_failure(
        self, provider: str, reason: str, context: Optional[dict[str, Any]] = None
    ) -> None:
        self.logger.warning(
            "JWT verification failed",
            extra={
                "provider": provider,
                "reason": reason,
                "event_type": "oauth_jwt_verification_failure",
                **(context or {}),
            },
        )

    def log_redirect_uri_rejected(self, redirect_uri: str, provider: str) -> None:
        try:
            host = urlparse(redirect_uri).hostname or "unknown"
        except ValueError:
            host = "unknown"
        self.logger.warning(
            "Redirect URI rejected",
            extra={"redirect_host": host, "provider": provider, "event_type": "oauth_redirect_uri_rejected"},
        )


class NullOAuthSecurityLogger(OAuthSecurityLogger):
    """Drops every event."""

    def __init__(self):
        super().__init__(logging.getLogger("headless_oauth.null"))

    def log_auth_success(self, provider, email, customer_id, is_new_user=False) -> None:
        return None

    def log_auth_failure(self, provider, reason, context=None) -> None:
        return None

    def log_refresh_success(self, provider, customer_id) -> None:
        return None

    def log_refresh_failure(self, provider, reason, context=None) -> None:
        return None

    def log_suspicious_activity(self, activity_type, context=None) -> None:
        return None

    def log_jwt_verification_failure(self, provider, reason, context=None) -> None:
        return None

    def log_redirect_uri_rejected(self, redirect_uri, provider) -> None:
        return None
