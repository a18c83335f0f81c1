from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from leuven.core.results import AccountRecord, SessionRecord, UserRecord
    from leuven.protocols import DBConnection

logger = logging.getLogger(__name__)

HookEvent = Literal["on_signup", "on_signin", "on_signout"]


@dataclass(frozen=True, slots=True, kw_only=True)
class HookContext:
    user: UserRecord
    db: DBConnection
    session: SessionRecord | None = None
    account: AccountRecord | None = None


type HookHandler = Callable[[HookContext], None | Awaitable[None]]


@dataclass(frozen=True, slots=True, kw_only=True)
class Hooks:
    on_signup: HookHandler | Sequence[HookHandler] | None = None
    on_signin: HookHandler | Sequence[HookHandler] | None = None
    on_signout: HookHandler | Sequence[HookHandler] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HookRunner:
    """Runs lifecycle observers after an operation has succeeded.

    Handlers may be plain or async callables. Each runs on its own; an
    exception is logged and the remaining handlers still run.
    """

    hooks: Hooks

    async def emit(self, event: HookEvent | str, context: HookContext) -> None:
        for handler in self._normalize(self._handlers_for(event)):
            try:
                result = handler(context)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("%s hook %r failed", event, handler)

    def _handlers_for(self, event: HookEvent | str) -> HookHandler | Sequence[HookHandler] | None:
        match event:
            case "on_signup":
                return self.hooks.on_signup
            case "on_signin":
                return self.hooks.on_signin
            case "on_signout":
                return self.hooks.on_signout
            case _:
                return None

    @staticmethod
    def _normalize[HandlerT](handlers: HandlerT | Sequence[HandlerT] | None) -> list[HandlerT]:
        if handlers is None:
            return []

        if isinstance(handlers, Sequence) and not isinstance(handlers, (str, bytes)):
            return list(handlers)

        return [handlers]
