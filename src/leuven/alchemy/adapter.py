import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leuven.core.exceptions import DatabaseError, UniqueViolationError
from leuven.protocols import (
    AccountProtocol,
    SessionProtocol,
    StoreProtocol,
    UserProtocol,
    VerificationTokenProtocol,
)

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL, also reported by asyncpg/psycopg)
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(orig).lower()
    return "unique" in message or "duplicate" in message


@asynccontextmanager
async def _translate_errors(session: AsyncSession) -> AsyncIterator[None]:
    try:
        yield
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            msg = "Record violates a uniqueness constraint"
            raise UniqueViolationError(msg) from exc
        msg = "Record violates an integrity constraint"
        raise DatabaseError(msg) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("database operation failed")
        msg = "Database operation failed"
        raise DatabaseError(msg) from exc


class AlchemyAdapter[
    UserT: UserProtocol,
    AccountT: AccountProtocol,
    SessionT: SessionProtocol,
    TokenT: VerificationTokenProtocol,
](StoreProtocol[UserT, AccountT, SessionT, TokenT]):
    """SQLAlchemy implementation of the store.

    Every write commits on its own; the caller owns the ``AsyncSession``.
    """

    def __init__(
        self,
        *,
        user: type[UserT],
        account: type[AccountT],
        session: type[SessionT],
        verification_token: type[TokenT],
    ) -> None:
        self.user_model = user
        self.account_model = account
        self.session_model = session
        self.verification_token_model = verification_token

    async def ping(self, session: AsyncSession) -> None:
        async with _translate_errors(session):
            await session.execute(text("SELECT 1"))

    async def _add(self, session: AsyncSession, obj: Any) -> None:  # noqa: ANN401
        session.add(obj)
        async with _translate_errors(session):
            await session.commit()
            await session.refresh(obj)

    async def _scalar(self, session: AsyncSession, stmt: Any) -> Any:  # noqa: ANN401
        async with _translate_errors(session):
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _delete(self, session: AsyncSession, stmt: Any) -> int:  # noqa: ANN401
        async with _translate_errors(session):
            result = await session.execute(stmt)
            await session.commit()
        return result.rowcount  # type: ignore[attr-defined]

    async def create_user(
        self,
        session: AsyncSession,
        email: str,
        name: str | None = None,
        image: str | None = None,
        password_hash: str | None = None,
        *,
        email_verified: bool = False,
    ) -> UserT:
        user = self.user_model(
            email=email,
            email_verified=email_verified,
            name=name,
            image=image,
            password_hash=password_hash,
        )
        await self._add(session, user)
        return user

    async def get_user_by_id(self, session: AsyncSession, user_id: UUID) -> UserT | None:
        stmt = select(self.user_model).where(self.user_model.id == user_id)
        return await self._scalar(session, stmt)

    async def get_user_by_email(self, session: AsyncSession, email: str) -> UserT | None:
        stmt = select(self.user_model).where(self.user_model.email == email)
        return await self._scalar(session, stmt)

    async def update_user(
        self,
        session: AsyncSession,
        user_id: UUID,
        **updates: Any,  # noqa: ANN401
    ) -> UserT | None:
        user = await self.get_user_by_id(session, user_id)
        if not user:
            return None

        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        user.updated_at = datetime.now(UTC)
        await self._add(session, user)
        return user

    async def create_account(
        self,
        session: AsyncSession,
        user_id: UUID,
        provider: str,
        provider_account_id: str,
        **tokens: Any,  # noqa: ANN401
    ) -> AccountT:
        account = self.account_model(
            user_id=user_id,
            provider=provider,
            provider_account_id=provider_account_id,
            access_token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
            expires_at=tokens.get("expires_at"),
            token_type=tokens.get("token_type"),
            scope=tokens.get("scope"),
            id_token=tokens.get("id_token"),
        )
        await self._add(session, account)
        return account

    async def get_account(
        self,
        session: AsyncSession,
        provider: str,
        provider_account_id: str,
    ) -> AccountT | None:
        stmt = select(self.account_model).where(
            self.account_model.provider == provider,
            self.account_model.provider_account_id == provider_account_id,
        )
        return await self._scalar(session, stmt)

    async def get_account_by_user(
        self,
        session: AsyncSession,
        user_id: UUID,
        provider: str,
    ) -> AccountT | None:
        stmt = select(self.account_model).where(
            self.account_model.user_id == user_id,
            self.account_model.provider == provider,
        )
        return await self._scalar(session, stmt)

    async def update_account_tokens(
        self,
        session: AsyncSession,
        account_id: UUID,
        **tokens: Any,  # noqa: ANN401
    ) -> AccountT | None:
        stmt = select(self.account_model).where(self.account_model.id == account_id)
        account = await self._scalar(session, stmt)
        if not account:
            return None

        # providers omit the refresh token on repeat logins; keep the stored one
        for key, value in tokens.items():
            if hasattr(account, key) and value is not None:
                setattr(account, key, value)

        account.updated_at = datetime.now(UTC)
        await self._add(session, account)
        return account

    async def create_session(
        self,
        session: AsyncSession,
        user_id: UUID,
        session_token: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SessionT:
        session_obj = self.session_model(
            user_id=user_id,
            session_token=session_token,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self._add(session, session_obj)
        return session_obj

    async def get_session_by_token(self, session: AsyncSession, session_token: str) -> SessionT | None:
        stmt = select(self.session_model).where(self.session_model.session_token == session_token)
        return await self._scalar(session, stmt)

    async def update_session(
        self,
        session: AsyncSession,
        session_token: str,
        **updates: Any,  # noqa: ANN401
    ) -> SessionT | None:
        session_obj = await self.get_session_by_token(session, session_token)
        if not session_obj:
            return None

        for key, value in updates.items():
            if hasattr(session_obj, key):
                setattr(session_obj, key, value)

        session_obj.updated_at = datetime.now(UTC)
        await self._add(session, session_obj)
        return session_obj

    async def delete_session(self, session: AsyncSession, session_token: str) -> bool:
        stmt = delete(self.session_model).where(self.session_model.session_token == session_token)
        return await self._delete(session, stmt) > 0

    async def delete_sessions_by_user(self, session: AsyncSession, user_id: UUID) -> int:
        stmt = delete(self.session_model).where(self.session_model.user_id == user_id)
        return await self._delete(session, stmt)

    async def delete_expired_sessions(self, session: AsyncSession) -> int:
        stmt = delete(self.session_model).where(self.session_model.expires_at <= datetime.now(UTC))
        return await self._delete(session, stmt)

    async def create_verification_token(
        self,
        session: AsyncSession,
        identifier: str,
        token: str,
        purpose: str,
        expires_at: datetime,
    ) -> TokenT:
        token_obj = self.verification_token_model(
            identifier=identifier,
            token=token,
            purpose=purpose,
            expires_at=expires_at,
        )
        await self._add(session, token_obj)
        return token_obj

    async def get_verification_token(self, session: AsyncSession, token: str) -> TokenT | None:
        stmt = select(self.verification_token_model).where(self.verification_token_model.token == token)
        return await self._scalar(session, stmt)

    async def delete_verification_token(self, session: AsyncSession, token: str) -> bool:
        stmt = delete(self.verification_token_model).where(self.verification_token_model.token == token)
        return await self._delete(session, stmt) > 0

    async def delete_expired_verification_tokens(self, session: AsyncSession) -> int:
        stmt = delete(self.verification_token_model).where(
            self.verification_token_model.expires_at <= datetime.now(UTC),
        )
        return await self._delete(session, stmt)
