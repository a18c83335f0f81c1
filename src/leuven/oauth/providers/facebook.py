from typing import Any

from leuven.oauth.models import OAuthProfile
from leuven.oauth.providers.base import OAuthProvider


class FacebookProvider(OAuthProvider):
    provider_id = "facebook"
    authorization_endpoint = "https://www.facebook.com/v18.0/dialog/oauth"
    token_endpoint = "https://graph.facebook.com/v18.0/oauth/access_token"  # noqa: S105
    userinfo_endpoint = "https://graph.facebook.com/v18.0/me"
    userinfo_params = {"fields": "id,email,name,picture"}  # noqa: RUF012
    default_scope = "email"

    def normalize_profile(self, data: dict[str, Any]) -> OAuthProfile:
        picture = data.get("picture")
        image = None
        if isinstance(picture, dict):
            image = (picture.get("data") or {}).get("url")
        return OAuthProfile(
            id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name"),
            image=image,
        )
