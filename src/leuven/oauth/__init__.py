from leuven.oauth.manager import OAuthManager, ProviderRegistry
from leuven.oauth.models import OAuthProfile, OAuthTokens
from leuven.oauth.providers import (
    BUILTIN_PROVIDERS,
    FacebookProvider,
    GitHubProvider,
    GoogleProvider,
    OAuthProvider,
)

__all__ = [
    "BUILTIN_PROVIDERS",
    "FacebookProvider",
    "GitHubProvider",
    "GoogleProvider",
    "OAuthManager",
    "OAuthProfile",
    "OAuthProvider",
    "OAuthTokens",
    "ProviderRegistry",
]
