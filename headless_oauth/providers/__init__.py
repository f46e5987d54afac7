"""OAuth provider clients."""
from .apple import AppleProvider
from .apple_secret import AppleClientSecretGenerator
from .base import OAuthProvider
from .facebook import FacebookProvider
from .factory import create_providers
from .google import GoogleProvider
from .metadata import PROVIDER_DISPLAY, Provider, ProviderDisplay
from .models import OAuthResponse, OAuthTokenData, OAuthUserData
from .oidc import OpenIdConnectProvider

__all__ = [
    "OAuthProvider",
    "GoogleProvider",
    "AppleProvider",
    "AppleClientSecretGenerator",
    "FacebookProvider",
    "OpenIdConnectProvider",
    "create_providers",
    "Provider",
    "ProviderDisplay",
    "PROVIDER_DISPLAY",
    "OAuthTokenData",
    "OAuthUserData",
    "OAuthResponse",
]
