import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from leuven.core.exceptions import TokenError
from leuven.core.results import SessionData, SessionRecord, UserRecord
from leuven.protocols import DBConnection, StoreProtocol
from leuven.session.tokens import sign_session_token, verify_session_token
from leuven.utils.crypto import generate_session_id, generate_session_token

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStrategy(Protocol):
    """How sessions are issued and resolved.

    Every implementation returns the same ``SessionRecord``/``SessionData``
    shapes so callers never branch on the strategy in use.
    """

    async def create(
        self,
        db: DBConnection,
        user: UserRecord,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SessionRecord: ...

    async def get(self, db: DBConnection, token: str, *, include_expired: bool = False) -> SessionData | None: ...

    async def validate(self, db: DBConnection, token: str) -> SessionData | None: ...

    async def update(self, db: DBConnection, token: str) -> SessionRecord | None: ...

    async def delete(self, db: DBConnection, token: str) -> bool: ...

    async def delete_all_for_user(self, db: DBConnection, user_id: UUID) -> int: ...

    async def cleanup_expired(self, db: DBConnection) -> int: ...


class DatabaseSessionStrategy:
    """Opaque tokens backed by a session row.

    Sessions are revocable. ``update`` slides the expiry forward once fewer
    than ``update_age`` seconds remain.
    """

    def __init__(self, adapter: StoreProtocol, max_age: int, update_age: int) -> None:
        self.adapter = adapter
        self.max_age = max_age
        self.update_age = update_age

    async def create(
        self,
        db: DBConnection,
        user: UserRecord,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SessionRecord:
        expires_at = datetime.now(UTC) + timedelta(seconds=self.max_age)
        session = await self.adapter.create_session(
            db,
            user_id=user.id,
            session_token=generate_session_token(),
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.debug("session created", extra={"user_id": str(user.id)})
        return SessionRecord.from_model(session)

    async def get(self, db: DBConnection, token: str, *, include_expired: bool = False) -> SessionData | None:
        session = await self.adapter.get_session_by_token(db, token)
        if session is None:
            return None
        if not include_expired and session.expires_at <= datetime.now(UTC):
            return None

        user = await self.adapter.get_user_by_id(db, session.user_id)
        if user is None:
            return None
        return SessionData(user=UserRecord.from_model(user), session=SessionRecord.from_model(session))

    async def validate(self, db: DBConnection, token: str) -> SessionData | None:
        data = await self.get(db, token, include_expired=True)
        if data is None:
            return None

        if data.session.expires_at <= datetime.now(UTC):
            await self.adapter.delete_session(db, token)
            return None

        session = await self.update(db, token)
        if session is None:
            # removed by a concurrent sign-out or cleanup
            return None
        return SessionData(user=data.user, session=session)

    async def update(self, db: DBConnection, token: str) -> SessionRecord | None:
        session = await self.adapter.get_session_by_token(db, token)
        now = datetime.now(UTC)
        if session is None or session.expires_at <= now:
            return None

        updates: dict[str, Any] = {}
        if (session.expires_at - now).total_seconds() < self.update_age:
            updates["expires_at"] = now + timedelta(seconds=self.max_age)

        session = await self.adapter.update_session(db, token, **updates)
        return SessionRecord.from_model(session) if session is not None else None

    async def delete(self, db: DBConnection, token: str) -> bool:
        return await self.adapter.delete_session(db, token)

    async def delete_all_for_user(self, db: DBConnection, user_id: UUID) -> int:
        return await self.adapter.delete_sessions_by_user(db, user_id)

    async def cleanup_expired(self, db: DBConnection) -> int:
        return await self.adapter.delete_expired_sessions(db)


def _parse_id(value: Any) -> UUID | str:  # noqa: ANN401
    try:
        return UUID(str(value))
    except ValueError:
        return str(value)


class StatelessSessionStrategy:
    """Self-contained HS256 tokens.

    Nothing is stored, so a token stays valid until it expires: sign-out only
    clears the cookie, and ``delete``/``delete_all_for_user`` cannot revoke
    tokens already issued.
    """

    def __init__(self, secret: str, max_age: int) -> None:
        self.secret = secret
        self.max_age = max_age

    async def create(
        self,
        db: DBConnection,  # noqa: ARG002
        user: UserRecord,
        *,
        ip_address: str | None = None,  # noqa: ARG002
        user_agent: str | None = None,  # noqa: ARG002
    ) -> SessionRecord:
        issued_at = int(datetime.now(UTC).timestamp())
        expires = issued_at + self.max_age
        session_id = generate_session_id()
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "email_verified": user.email_verified,
            "image": user.image,
            "iat": issued_at,
            "exp": expires,
            "jti": str(session_id),
        }
        token = sign_session_token(claims, secret=self.secret)
        return SessionRecord(
            id=session_id,
            user_id=user.id,
            session_token=token,
            expires_at=datetime.fromtimestamp(expires, UTC),
            created_at=datetime.fromtimestamp(issued_at, UTC),
            updated_at=datetime.fromtimestamp(issued_at, UTC),
        )

    def _decode(self, token: str, *, include_expired: bool) -> SessionData | None:
        try:
            claims = verify_session_token(token, secret=self.secret, verify_exp=not include_expired)
        except TokenError as exc:
            logger.debug("rejected session token: %s", exc.code)
            return None

        try:
            user_id = _parse_id(claims["sub"])
            issued_at = datetime.fromtimestamp(int(claims["iat"]), UTC)
            user = UserRecord(
                id=user_id,
                email=claims["email"],
                email_verified=bool(claims.get("email_verified", False)),
                name=claims.get("name"),
                image=claims.get("image"),
            )
            session = SessionRecord(
                id=_parse_id(claims.get("jti", claims["sub"])),
                user_id=user_id,
                session_token=token,
                expires_at=datetime.fromtimestamp(int(claims["exp"]), UTC),
                created_at=issued_at,
                updated_at=issued_at,
            )
        except (KeyError, TypeError, ValueError):
            logger.debug("rejected session token: missing claims")
            return None
        return SessionData(user=user, session=session)

    async def get(self, db: DBConnection, token: str, *, include_expired: bool = False) -> SessionData | None:  # noqa: ARG002
        return self._decode(token, include_expired=include_expired)

    async def validate(self, db: DBConnection, token: str) -> SessionData | None:
        return await self.get(db, token)

    async def update(self, db: DBConnection, token: str) -> SessionRecord | None:
        # tokens are immutable once issued
        data = await self.get(db, token)
        return data.session if data is not None else None

    async def delete(self, db: DBConnection, token: str) -> bool:  # noqa: ARG002
        return True

    async def delete_all_for_user(self, db: DBConnection, user_id: UUID) -> int:  # noqa: ARG002
        return 0

    async def cleanup_expired(self, db: DBConnection) -> int:  # noqa: ARG002
        return 0
