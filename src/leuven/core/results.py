from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal, Self

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from leuven.protocols import AccountProtocol, SessionProtocol, UserProtocol


@dataclass(frozen=True, slots=True, kw_only=True)
class UserRecord:
    """Snapshot of a user that is safe to hand to callers.

    The password hash never leaves the store layer. Timestamps are ``None``
    when the user was rebuilt from a stateless session token.
    """

    id: UUID | str
    email: str
    email_verified: bool
    name: str | None = None
    image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: UserProtocol) -> Self:
        return cls(
            id=user.id,
            email=user.email,
            email_verified=bool(user.email_verified),
            name=user.name,
            image=user.image,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionRecord:
    id: UUID | str
    user_id: UUID | str
    session_token: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, session: SessionProtocol) -> Self:
        return cls(
            id=session.id,
            user_id=session.user_id,
            session_token=session.session_token,
            expires_at=session.expires_at,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class AccountRecord:
    id: UUID
    user_id: UUID
    provider: str
    provider_account_id: str
    expires_at: datetime | None = None
    scope: str | None = None

    @classmethod
    def from_model(cls, account: AccountProtocol) -> Self:
        return cls(
            id=account.id,
            user_id=account.user_id,
            provider=account.provider,
            provider_account_id=account.provider_account_id,
            expires_at=account.expires_at,
            scope=account.scope,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionData:
    """Authenticated context returned by both session strategies."""

    user: UserRecord
    session: SessionRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class SignUpResult:
    success: bool
    user: UserRecord | None = None
    requires_verification: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> Self:
        return cls(success=False, error=error)


@dataclass(frozen=True, slots=True, kw_only=True)
class SignInResult:
    success: bool
    user: UserRecord | None = None
    account: AccountRecord | None = None
    session: SessionRecord | None = None
    cookie: str | None = None
    # True when an OAuth callback created the user
    created: bool = False
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> Self:
        return cls(success=False, error=error)

    def with_session(self, session: SessionRecord, cookie: str) -> Self:
        return replace(self, session=session, cookie=cookie)


@dataclass(frozen=True, slots=True, kw_only=True)
class SessionInfo:
    valid: bool
    expired: bool
    data: SessionData | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HealthStatus:
    status: Literal["ok", "error"]
    database: bool
    error: str | None = None
