from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, declarative_mixin, declared_attr, mapped_column

from leuven.alchemy.types import DateTimeUTC


def _utcnow() -> datetime:
    return datetime.now(UTC)


@declarative_mixin
class PrimaryKeyMixin:
    """Adds a client-generated UUID primary key."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


@declarative_mixin
class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTimeUTC, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTimeUTC, default=_utcnow, onupdate=_utcnow)


@declarative_mixin
class UserMixin:
    """Columns required by ``UserProtocol``.

    The e-mail column carries the unique constraint that guards concurrent
    sign-ups.
    """

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    email_verified: Mapped[bool] = mapped_column(default=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)


@declarative_mixin
class AccountMixin:
    """Provider identity linked to a user.

    A provider identity maps to one user, and a user holds at most one
    account per provider.
    """

    __user_table__ = "users"

    @declared_attr.directive
    def __table_args__(cls) -> tuple[UniqueConstraint, ...]:  # noqa: N805
        return (
            UniqueConstraint("provider", "provider_account_id"),
            UniqueConstraint("user_id", "provider"),
        )

    @declared_attr
    def user_id(cls) -> Mapped[UUID]:  # noqa: N805
        return mapped_column(ForeignKey(f"{cls.__user_table__}.id", ondelete="CASCADE"), index=True)

    provider: Mapped[str] = mapped_column(String(50), index=True)
    provider_account_id: Mapped[str] = mapped_column(String(255))
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTimeUTC, nullable=True)
    token_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    scope: Mapped[str | None] = mapped_column(String(512), nullable=True)
    id_token: Mapped[str | None] = mapped_column(Text, nullable=True)


@declarative_mixin
class SessionMixin:
    __user_table__ = "users"

    @declared_attr
    def user_id(cls) -> Mapped[UUID]:  # noqa: N805
        return mapped_column(ForeignKey(f"{cls.__user_table__}.id", ondelete="CASCADE"), index=True)

    session_token: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTimeUTC, index=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)


@declarative_mixin
class VerificationTokenMixin:
    identifier: Mapped[str] = mapped_column(String(255), index=True)
    token: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    purpose: Mapped[str] = mapped_column(String(50))
    expires_at: Mapped[datetime] = mapped_column(DateTimeUTC, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTimeUTC, default=_utcnow)


__all__ = [
    "AccountMixin",
    "PrimaryKeyMixin",
    "SessionMixin",
    "TimestampMixin",
    "UserMixin",
    "VerificationTokenMixin",
]
