from leuven.alchemy.adapter import AlchemyAdapter
from leuven.alchemy.base import NAMING_CONVENTION, Base
from leuven.alchemy.mixins import (
    AccountMixin,
    PrimaryKeyMixin,
    SessionMixin,
    TimestampMixin,
    UserMixin,
    VerificationTokenMixin,
)
from leuven.alchemy.settings import DatabaseSettings, SQLAlchemyRuntime
from leuven.alchemy.types import DateTimeUTC

__all__ = [
    "NAMING_CONVENTION",
    "AccountMixin",
    "AlchemyAdapter",
    "Base",
    "DatabaseSettings",
    "DateTimeUTC",
    "PrimaryKeyMixin",
    "SQLAlchemyRuntime",
    "SessionMixin",
    "TimestampMixin",
    "UserMixin",
    "VerificationTokenMixin",
]
