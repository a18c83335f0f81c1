from typing import Any

import httpx

from leuven.oauth.models import OAuthProfile, OAuthTokens
from leuven.oauth.providers.base import OAuthProvider


class GitHubProvider(OAuthProvider):
    """GitHub OAuth app.

    GitHub omits the e-mail from ``/user`` when the address is private, in
    which case the primary verified address is read from ``/user/emails``.
    """

    provider_id = "github"
    authorization_endpoint = "https://github.com/login/oauth/authorize"
    token_endpoint = "https://github.com/login/oauth/access_token"  # noqa: S105
    userinfo_endpoint = "https://api.github.com/user"
    emails_endpoint = "https://api.github.com/user/emails"
    default_scope = "user:email"

    def _request_headers(self) -> dict[str, str]:
        # the GitHub API rejects requests without a User-Agent
        return {"Accept": "application/json", "User-Agent": "leuven"}

    async def get_profile(
        self,
        tokens: OAuthTokens,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> OAuthProfile:
        profile = await super().get_profile(tokens, client=client)
        if profile.email:
            return profile

        async with self._client(client) as http:
            emails = await self._get_json(http, self.emails_endpoint, tokens.access_token)
        return profile.model_copy(update={"email": self.select_email(emails)})

    @staticmethod
    def select_email(emails: Any) -> str | None:  # noqa: ANN401
        if not isinstance(emails, list):
            return None
        verified = [entry for entry in emails if isinstance(entry, dict) and entry.get("verified")]
        for entry in verified:
            if entry.get("primary"):
                return entry.get("email")
        return verified[0].get("email") if verified else None

    def normalize_profile(self, data: dict[str, Any]) -> OAuthProfile:
        return OAuthProfile(
            id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name") or data.get("login"),
            image=data.get("avatar_url"),
        )
