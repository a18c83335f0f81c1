import logging
from datetime import UTC, datetime
from uuid import UUID

from leuven.core.exceptions import DatabaseError
from leuven.core.results import SessionData, SessionInfo, SessionRecord, UserRecord
from leuven.core.settings import CookieSettings
from leuven.protocols import DBConnection
from leuven.session.cookies import parse_cookie_header, serialize_cookie
from leuven.session.strategies import SessionStrategy

logger = logging.getLogger(__name__)


class SessionManager:
    """Delegates session work to a ``SessionStrategy`` and owns the session cookie."""

    def __init__(
        self,
        strategy: SessionStrategy,
        cookie_settings: CookieSettings,
        max_age: int,
        *,
        secure: bool = True,
    ) -> None:
        self.strategy = strategy
        self.cookie_settings = cookie_settings
        self.max_age = max_age
        self.secure = secure

    @property
    def cookie_name(self) -> str:
        return self.cookie_settings.name

    async def create_session(
        self,
        db: DBConnection,
        user: UserRecord,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SessionRecord:
        return await self.strategy.create(db, user, ip_address=ip_address, user_agent=user_agent)

    async def get_session(self, db: DBConnection, token: str) -> SessionData | None:
        return await self.strategy.get(db, token)

    async def validate_session(self, db: DBConnection, token: str) -> SessionData | None:
        return await self.strategy.validate(db, token)

    async def update_session(self, db: DBConnection, token: str) -> SessionRecord | None:
        return await self.strategy.update(db, token)

    async def delete_session(self, db: DBConnection, token: str) -> bool:
        return await self.strategy.delete(db, token)

    async def delete_all_user_sessions(self, db: DBConnection, user_id: UUID) -> int:
        return await self.strategy.delete_all_for_user(db, user_id)

    async def cleanup_expired_sessions(self, db: DBConnection) -> int:
        return await self.strategy.cleanup_expired(db)

    async def get_session_info(self, db: DBConnection, token: str) -> SessionInfo:
        try:
            data = await self.strategy.get(db, token, include_expired=True)
        except DatabaseError as exc:
            return SessionInfo(valid=False, expired=False, error=exc.message)

        if data is None:
            return SessionInfo(valid=False, expired=False, error="Session not found")
        if data.session.expires_at <= datetime.now(UTC):
            return SessionInfo(valid=False, expired=True, error="Session expired")
        return SessionInfo(valid=True, expired=False, data=data)

    def create_session_cookie(self, token: str) -> str:
        return self._cookie(token, self.max_age)

    def create_logout_cookie(self) -> str:
        return self._cookie("", 0)

    def _cookie(self, value: str, max_age: int) -> str:
        return serialize_cookie(
            self.cookie_settings.name,
            value,
            max_age=max_age,
            path=self.cookie_settings.path,
            domain=self.cookie_settings.domain,
            secure=self.secure,
            http_only=self.cookie_settings.http_only,
            same_site=self.cookie_settings.same_site,
        )

    def get_session_token_from_cookies(self, cookie_header: str | None) -> str | None:
        return parse_cookie_header(cookie_header).get(self.cookie_settings.name) or None
