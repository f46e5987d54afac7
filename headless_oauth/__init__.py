"""Headless OAuth/OIDC login for shop customer accounts."""
from headless_oauth.bundle import HeadlessOAuthBundle
from headless_oauth.core.exceptions import OAuthException, ProviderNotSupportedException

__all__ = ["HeadlessOAuthBundle", "OAuthException", "ProviderNotSupportedException"]
