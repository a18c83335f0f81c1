from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, cast

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

if TYPE_CHECKING:
    from typing import Protocol

    class DBAPICursor(Protocol):
        def execute(self, operation: str) -> object: ...
        def close(self) -> None: ...

    class DBAPIConnection(Protocol):
        def cursor(self) -> DBAPICursor: ...


@dataclass(slots=True, kw_only=True, frozen=True)
class SQLAlchemyRuntime:
    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]


class DatabaseSettings(BaseSettings):
    """Connection settings for the bundled SQLAlchemy store.

    ``url`` is any async SQLAlchemy URL, e.g. ``postgresql+asyncpg://...`` or
    ``sqlite+aiosqlite:///auth.db``.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEUVEN_DATABASE_",
        env_file=".env",
        extra="ignore",
    )

    url: str
    echo: bool = Field(default=False)
    enable_foreign_keys: bool = Field(default=True)

    @cached_property
    def _runtime(self) -> SQLAlchemyRuntime:
        url = make_url(self.url)
        engine = create_async_engine(url, echo=self.echo)

        if url.get_backend_name() == "sqlite" and self.enable_foreign_keys:

            @event.listens_for(engine.sync_engine, "connect")
            def _enable_foreign_keys(dbapi_conn: object, _connection_record: object) -> None:
                cursor = cast("DBAPIConnection", dbapi_conn).cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        return SQLAlchemyRuntime(
            engine=engine,
            session_maker=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
        )

    def __call__(self) -> SQLAlchemyRuntime:
        return self._runtime

    @property
    def engine(self) -> AsyncEngine:
        return self._runtime.engine

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        return self._runtime.session_maker

