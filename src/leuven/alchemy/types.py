from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def _as_utc(value: datetime) -> datetime:
    # naive values are treated as UTC; SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class DateTimeUTC(TypeDecorator[datetime]):
    """Timezone-aware datetime column, always UTC in both directions.

    Session and token expiries are compared against ``datetime.now(UTC)``, so
    every value this column hands back must be aware.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, _dialect: Any) -> datetime | None:  # type: ignore[override]  # noqa: ANN401
        if value is None:
            return None
        if not isinstance(value, datetime):
            msg = f"DateTimeUTC expects datetime or None, got {type(value)}"
            raise TypeError(msg)
        return _as_utc(value)

    def process_result_value(self, value: Any, _dialect: Any) -> datetime | None:  # type: ignore[override]  # noqa: ANN401
        return None if value is None else _as_utc(value)
