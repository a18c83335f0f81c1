from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from __tests__.fixtures.database import get_test_engine, get_test_session_factory
from __tests__.fixtures.models import Account, Session, User, VerificationToken
from leuven.alchemy import AlchemyAdapter
from leuven.core.settings import EmailPasswordSettings, LeuvenSettings, SessionSettings
from leuven.password.hashing import BcryptHasher

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"  # noqa: S105
# minimum bcrypt cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = await get_test_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return await get_test_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(db_session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with db_session_factory() as session:
        yield session


@pytest.fixture
def adapter() -> AlchemyAdapter:
    return AlchemyAdapter(
        user=User,
        account=Account,
        session=Session,
        verification_token=VerificationToken,
    )


@pytest.fixture
def hasher() -> BcryptHasher:
    return BcryptHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def email_password_settings() -> EmailPasswordSettings:
    return EmailPasswordSettings(enabled=True, bcrypt_rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def settings(email_password_settings: EmailPasswordSettings) -> LeuvenSettings:
    return LeuvenSettings(
        environment="production",
        session=SessionSettings(secret=SecretStr(TEST_SECRET), max_age=3600, update_age=900),
        email_password=email_password_settings,
    )
