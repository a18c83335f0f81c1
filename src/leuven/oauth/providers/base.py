from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlencode

import httpx

from leuven.core.exceptions import OAuthError, ValidationError
from leuven.oauth.models import OAuthProfile, OAuthTokens

DEFAULT_TIMEOUT = 10.0


class OAuthProvider:
    """Authorization-code flow against one identity provider.

    Built-in providers subclass this and set the endpoint attributes; a
    custom provider can be described by passing them to the constructor.
    HTTP calls use ``client`` when given and otherwise open a short-lived
    ``httpx.AsyncClient``. Nothing is retried.
    """

    provider_id: str = ""
    authorization_endpoint: str = ""
    token_endpoint: str = ""
    userinfo_endpoint: str = ""
    default_scope: str = ""
    authorization_params: Mapping[str, str] = {}  # noqa: RUF012
    userinfo_params: Mapping[str, str] = {}  # noqa: RUF012

    def __init__(  # noqa: PLR0913
        self,
        *,
        client_id: str = "",
        client_secret: str = "",
        scope: str | None = None,
        provider_id: str | None = None,
        authorization_endpoint: str | None = None,
        token_endpoint: str | None = None,
        userinfo_endpoint: str | None = None,
        authorization_params: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.provider_id = provider_id or self.provider_id
        self.scope = scope or self.default_scope
        self.authorization_endpoint = authorization_endpoint or self.authorization_endpoint
        self.token_endpoint = token_endpoint or self.token_endpoint
        self.userinfo_endpoint = userinfo_endpoint or self.userinfo_endpoint
        if authorization_params is not None:
            self.authorization_params = dict(authorization_params)
        self.timeout = timeout

        if not self.provider_id:
            msg = "provider_id must be a non-empty string"
            raise ValueError(msg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider_id={self.provider_id!r}, configured={self.configured})"

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def configure(self, client_id: str, client_secret: str, scope: str | None = None) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        if scope:
            self.scope = scope

    def generate_authorization_url(self, redirect_uri: str, state: str) -> str:
        if not self.client_id:
            msg = f"OAuth provider {self.provider_id} is not configured"
            raise ValidationError(msg)

        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": self.scope,
            "response_type": "code",
            "state": state,
            **self.authorization_params,
        }
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    @asynccontextmanager
    async def _client(self, client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
        if client is not None:
            yield client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as owned:
            yield owned

    def _request_headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    async def exchange_code_for_tokens(
        self,
        code: str,
        redirect_uri: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> OAuthTokens:
        try:
            async with self._client(client) as http:
                response = await http.post(
                    self.token_endpoint,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": redirect_uri,
                        "grant_type": "authorization_code",
                    },
                    headers=self._request_headers(),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            msg = f"oauth token exchange failed: {e.response.status_code}"
            raise OAuthError(msg) from e
        except httpx.RequestError as e:
            msg = "oauth token exchange request failed"
            raise OAuthError(msg) from e
        except ValueError as e:
            msg = "oauth token response is not valid JSON"
            raise OAuthError(msg) from e

        if not isinstance(data, dict) or not data.get("access_token"):
            msg = "missing required field in token response: access_token"
            raise OAuthError(msg)
        return OAuthTokens.from_token_response(data)

    async def _get_json(
        self,
        http: httpx.AsyncClient,
        url: str,
        access_token: str,
        params: Mapping[str, str] | None = None,
    ) -> Any:  # noqa: ANN401
        try:
            response = await http.get(
                url,
                params=params,
                headers={**self._request_headers(), "Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            msg = f"failed to fetch user info: {e.response.status_code}"
            raise OAuthError(msg) from e
        except httpx.RequestError as e:
            msg = "user info request failed"
            raise OAuthError(msg) from e
        except ValueError as e:
            msg = "user info response is not valid JSON"
            raise OAuthError(msg) from e

    async def get_profile(
        self,
        tokens: OAuthTokens,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> OAuthProfile:
        async with self._client(client) as http:
            data = await self._get_json(http, self.userinfo_endpoint, tokens.access_token, self.userinfo_params)
        if not isinstance(data, dict) or data.get("id") in (None, ""):
            msg = "user info response is missing the account id"
            raise OAuthError(msg)
        return self.normalize_profile(data)

    def normalize_profile(self, data: dict[str, Any]) -> OAuthProfile:
        """Map a raw profile payload onto ``OAuthProfile``.

        The generic mapping understands the common field names; built-in
        providers override it for their own payload shape.
        """
        image = data.get("picture") or data.get("avatar_url")
        return OAuthProfile(
            id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name") or data.get("login"),
            image=image if isinstance(image, str) else None,
        )
