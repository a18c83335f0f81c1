from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class VerificationTokenProtocol(Protocol):
    id: UUID
    identifier: str
    token: str
    purpose: str
    expires_at: datetime
    created_at: datetime
