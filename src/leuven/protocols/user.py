from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class UserProtocol(Protocol):
    id: UUID
    email: str
    email_verified: bool
    name: str | None
    image: str | None
    password_hash: str | None  # None for OAuth-only users
    created_at: datetime
    updated_at: datetime
