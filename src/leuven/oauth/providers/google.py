from typing import Any

from leuven.oauth.models import OAuthProfile
from leuven.oauth.providers.base import OAuthProvider


class GoogleProvider(OAuthProvider):
    provider_id = "google"
    authorization_endpoint = "https://accounts.google.com/o/oauth2/v2/auth"
    token_endpoint = "https://oauth2.googleapis.com/token"  # noqa: S105
    userinfo_endpoint = "https://www.googleapis.com/oauth2/v2/userinfo"
    default_scope = "openid email profile"
    # offline access so Google issues a refresh token
    authorization_params = {"access_type": "offline", "prompt": "consent"}  # noqa: RUF012

    def normalize_profile(self, data: dict[str, Any]) -> OAuthProfile:
        return OAuthProfile(
            id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name"),
            image=data.get("picture"),
        )
