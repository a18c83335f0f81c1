from typing import Literal

from pydantic import Field, PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from leuven.alchemy.settings import DatabaseSettings

MIN_SECRET_LENGTH = 32


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEUVEN_SESSION_",
        env_file=".env",
        extra="ignore",
    )

    strategy: Literal["database", "jwt"] = Field(default="database")
    max_age: PositiveInt = Field(default=2592000)  # 30 days
    update_age: PositiveInt = Field(default=86400)
    secret: SecretStr


class CookieSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEUVEN_COOKIE_",
        env_file=".env",
        extra="ignore",
    )

    name: str = Field(default="leuven_session")
    # None means "secure unless running in development"
    secure: bool | None = Field(default=None)
    http_only: bool = Field(default=True)
    same_site: Literal["lax", "strict", "none"] = Field(default="lax")
    path: str = Field(default="/")
    domain: str | None = Field(default=None)


class EmailPasswordSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEUVEN_EMAIL_PASSWORD_",
        env_file=".env",
        extra="ignore",
    )

    enabled: bool = Field(default=False)
    reset_token_max_age: PositiveInt = Field(default=900)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    min_password_length: PositiveInt = Field(default=8)


class OAuthProviderSettings(BaseSettings):
    """Credentials for one OAuth provider.

    Field names match the provider-specific subclasses' env prefixes, e.g.
    ``LEUVEN_GOOGLE_CLIENT_ID``.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    client_id: str
    client_secret: SecretStr
    scope: str | None = Field(default=None)

    @field_validator("client_id")
    @classmethod
    def validate_non_empty(cls, value: str, info) -> str:  # noqa: ANN001
        """Ensure required OAuth fields are non-empty."""
        if not value or not value.strip():
            msg = f"{info.field_name} must be a non-empty string"
            raise ValueError(msg)
        return value.strip()


class GoogleSettings(OAuthProviderSettings):
    model_config = SettingsConfigDict(env_prefix="LEUVEN_GOOGLE_", env_file=".env", extra="ignore")


class GitHubSettings(OAuthProviderSettings):
    model_config = SettingsConfigDict(env_prefix="LEUVEN_GITHUB_", env_file=".env", extra="ignore")


class FacebookSettings(OAuthProviderSettings):
    model_config = SettingsConfigDict(env_prefix="LEUVEN_FACEBOOK_", env_file=".env", extra="ignore")


class LeuvenSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEUVEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production"] = Field(default="production")

    database: DatabaseSettings | None = Field(default=None)
    session: SessionSettings = Field(default_factory=SessionSettings)
    cookie: CookieSettings = Field(default_factory=CookieSettings)
    email_password: EmailPasswordSettings = Field(default_factory=EmailPasswordSettings)

    google: GoogleSettings | None = Field(default=None)
    github: GitHubSettings | None = Field(default=None)
    facebook: FacebookSettings | None = Field(default=None)

    @property
    def cookie_secure(self) -> bool:
        if self.cookie.secure is not None:
            return self.cookie.secure
        return self.environment != "development"

    def oauth_providers(self) -> dict[str, OAuthProviderSettings]:
        configured = {"google": self.google, "github": self.github, "facebook": self.facebook}
        return {provider_id: config for provider_id, config in configured.items() if config is not None}
