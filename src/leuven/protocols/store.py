from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from leuven.protocols.account import AccountProtocol
from leuven.protocols.session import SessionProtocol
from leuven.protocols.user import UserProtocol
from leuven.protocols.verification_token import VerificationTokenProtocol

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from leuven.protocols.connection import DBConnection


@runtime_checkable
class StoreProtocol[
    UserT: UserProtocol,
    AccountT: AccountProtocol,
    SessionT: SessionProtocol,
    TokenT: VerificationTokenProtocol,
](Protocol):
    """Persistence contract consumed by the engine.

    Implementations raise ``UniqueViolationError`` when a write collides with a
    uniqueness constraint (user e-mail, provider account, session token,
    verification token) and ``DatabaseError`` for any other storage failure.
    """

    async def ping(self, session: DBConnection) -> None: ...

    async def create_user(
        self,
        session: DBConnection,
        email: str,
        name: str | None = None,
        image: str | None = None,
        password_hash: str | None = None,
        *,
        email_verified: bool = False,
    ) -> UserT: ...

    async def get_user_by_id(self, session: DBConnection, user_id: UUID) -> UserT | None: ...

    async def get_user_by_email(self, session: DBConnection, email: str) -> UserT | None: ...

    async def update_user(
        self,
        session: DBConnection,
        user_id: UUID,
        **updates: Any,  # noqa: ANN401
    ) -> UserT | None: ...

    async def create_account(
        self,
        session: DBConnection,
        user_id: UUID,
        provider: str,
        provider_account_id: str,
        **tokens: Any,  # noqa: ANN401
    ) -> AccountT: ...

    async def get_account(
        self,
        session: DBConnection,
        provider: str,
        provider_account_id: str,
    ) -> AccountT | None: ...

    async def get_account_by_user(
        self,
        session: DBConnection,
        user_id: UUID,
        provider: str,
    ) -> AccountT | None: ...

    async def update_account_tokens(
        self,
        session: DBConnection,
        account_id: UUID,
        **tokens: Any,  # noqa: ANN401
    ) -> AccountT | None: ...

    async def create_session(
        self,
        session: DBConnection,
        user_id: UUID,
        session_token: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SessionT: ...

    async def get_session_by_token(self, session: DBConnection, session_token: str) -> SessionT | None: ...

    async def update_session(
        self,
        session: DBConnection,
        session_token: str,
        **updates: Any,  # noqa: ANN401
    ) -> SessionT | None: ...

    async def delete_session(self, session: DBConnection, session_token: str) -> bool: ...

    async def delete_sessions_by_user(self, session: DBConnection, user_id: UUID) -> int: ...

    async def delete_expired_sessions(self, session: DBConnection) -> int: ...

    async def create_verification_token(
        self,
        session: DBConnection,
        identifier: str,
        token: str,
        purpose: str,
        expires_at: datetime,
    ) -> TokenT: ...

    async def get_verification_token(self, session: DBConnection, token: str) -> TokenT | None: ...

    async def delete_verification_token(self, session: DBConnection, token: str) -> bool: ...

    async def delete_expired_verification_tokens(self, session: DBConnection) -> int: ...
