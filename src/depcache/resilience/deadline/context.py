from __future__ import annotations

import asyncio
import contextlib
import inspect
from contextvars import ContextVar, Token
from typing import Any, AsyncIterator, Awaitable, TypeVar

from depcache.kernel.errors import TimeoutError as AppTimeoutError
from depcache.resilience.timeouts.deadline import Deadline

__all__ = [
    "DeadlineContext",
    "DeadlineExceededError",
    "deadline_aware",
]

T = TypeVar("T")


class DeadlineExceededError(AppTimeoutError):
    """Raised when the active deadline has been exceeded."""

    default_code = "deadline_exceeded"


_DEADLINE_VAR: ContextVar[Deadline | None] = ContextVar("_deadline", default=None)


class DeadlineContext:
    """Context-variable wrapper for propagating deadlines across async boundaries."""

    @staticmethod
    def set(deadline: Deadline) -> Token[Deadline | None]:
        return _DEADLINE_VAR.set(deadline)

    @staticmethod
    def get() -> Deadline | None:
        return _DEADLINE_VAR.get()

    @staticmethod
    def reset(token: Token[Deadline | None]) -> None:
        _DEADLINE_VAR.reset(token)

    @staticmethod
    def raise_if_exceeded() -> None:
        dl = _DEADLINE_VAR.get()
        if dl is not None and dl.is_expired:
            raise DeadlineExceededError("Deadline exceeded")

    @staticmethod
    @contextlib.asynccontextmanager
    async def scoped(deadline: Deadline) -> AsyncIterator[Deadline]:
        token = _DEADLINE_VAR.set(deadline)
        try:
            yield deadline
        finally:
            _DEADLINE_VAR.reset(token)


async def deadline_aware(coro: Awaitable[T], deadline: Deadline | None = None) -> T:
    """Await *coro*, cancelling it if the given (or context) deadline expires.

    An explicit *deadline* never extends the one already in the context; the
    earlier of the two wins. Raises :class:`DeadlineExceededError` on expiry.
    """
    ctx = _DEADLINE_VAR.get()
    dl = deadline.earliest(ctx) if deadline is not None else ctx
    if dl is None:
        return await coro
    remaining = dl.remaining_seconds
    if remaining <= 0:
        # Close the coroutine cleanly to avoid "never awaited" warnings
        if inspect.iscoroutine(coro):
            coro.close()
        raise DeadlineExceededError("Deadline already exceeded")
    try:
        return await asyncio.wait_for(coro, timeout=remaining)
    except asyncio.TimeoutError:
        raise DeadlineExceededError("Deadline exceeded during execution") from None
