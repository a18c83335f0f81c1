from leuven.oauth.providers.base import OAuthProvider
from leuven.oauth.providers.facebook import FacebookProvider
from leuven.oauth.providers.github import GitHubProvider
from leuven.oauth.providers.google import GoogleProvider

BUILTIN_PROVIDERS: tuple[type[OAuthProvider], ...] = (GoogleProvider, GitHubProvider, FacebookProvider)

__all__ = [
    "BUILTIN_PROVIDERS",
    "FacebookProvider",
    "GitHubProvider",
    "GoogleProvider",
    "OAuthProvider",
]
