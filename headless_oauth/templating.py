"""Jinja2 helpers for rendering a customer's linked OAuth providers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from headless_oauth.models.identity import SupportsOAuthIdentity, get_identity
from headless_oauth.providers.metadata import PROVIDER_DISPLAY, ProviderDisplay

TEMPLATE_DIR = Path(__file__).parent / "templates"


class OAuthTemplateExtension:
    """Read-only provider display helpers, exposed to templates as globals."""

    def __init__(self, providers: Mapping[str, ProviderDisplay] = PROVIDER_DISPLAY):
        self.providers = providers

    def has_connected_providers(self, customer: Any) -> bool:
        return bool(self.connected_providers(customer))

    def connected_providers(self, customer: Any) -> dict[str, dict[str, str]]:
        if not isinstance(customer, SupportsOAuthIdentity):
            return {}
        connected = {}
        for key, display in self.providers.items():
            identifier = get_identity(customer, key)
            if not identifier:
                continue
            connected[key] = {
                "name": display.name,
                "icon": display.icon,
                "color": display.color,
                "identifier": identifier,
            }
        return connected

    def provider_config(self, provider: str) -> Optional[ProviderDisplay]:
        return self.providers.get(provider)

    def all_providers(self) -> Mapping[str, ProviderDisplay]:
        return self.providers

    def globals(self) -> dict[str, Any]:
        return {
            "oauth_has_providers": self.has_connected_providers,
            "oauth_connected_providers": self.connected_providers,
            "oauth_provider_config": self.provider_config,
            "oauth_all_providers": self.all_providers,
        }

    def register(self, env: Environment) -> Environment:
        env.globals.update(self.globals())
        return env


def create_template_environment(extension: Optional[OAuthTemplateExtension] = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    return (extension or OAuthTemplateExtension()).register(env)
