from datetime import UTC, datetime, timedelta
from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class OAuthTokens(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str | None = None
    refresh_token: str | None = None
    scope: str | None = None
    id_token: str | None = None
    expires_at: datetime | None = None

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> Self:
        expires_in = data.get("expires_in")
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type"),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
            id_token=data.get("id_token"),
            expires_at=datetime.now(UTC) + timedelta(seconds=int(expires_in)) if expires_in else None,
        )

    def account_fields(self) -> dict[str, Any]:
        return self.model_dump()


class OAuthProfile(BaseModel):
    """Provider profile reduced to the fields the engine needs."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    name: str | None = None
    image: str | None = None
