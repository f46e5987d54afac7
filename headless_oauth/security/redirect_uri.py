from __future__ import annotations

from typing import Iterable

from headless_oauth.core.exceptions import OAuthException


class RedirectUriValidator:
    """Checks client-supplied redirect URIs against an allow-list.

    An empty allow-list turns validation off. A URI is accepted when it equals
    an allowed entry, equals it up to a trailing slash, or lives underneath it
    (``https://shop.example/callback/google`` under ``https://shop.example/callback``).
    """

    def __init__(self, allowed_uris: Iterable[str] = ()):
        self.allowed_uris = [uri for uri in allowed_uris if uri]

    def is_enabled(self) -> bool:
        return bool(self.allowed_uris)

    def is_valid(self, redirect_uri: str) -> bool:
        if not self.is_enabled():
            return True
        for allowed in self.allowed_uris:
            if redirect_uri == allowed:
                return True
            base = allowed.rstrip("/")
            if redirect_uri in (base, base + "/"):
                return True
            if redirect_uri.startswith(base + "/"):
                return True
        return False

    def validate(self, redirect_uri: str) -> None:
        if not self.is_valid(redirect_uri):
            raise OAuthException(f'Redirect URI "{redirect_uri}" is not in the allowed list', 400)


class NullRedirectUriValidator(RedirectUriValidator):
    def __init__(self):
        super().__init__(())
