"""Resilience – Deadline."""
from __future__ import annotations

import dataclasses
import time
from datetime import timedelta


@dataclasses.dataclass(frozen=True)
class Deadline:
    """An absolute point on the monotonic clock after which work is abandoned."""
    expires_at: float

    @classmethod
    def after(cls, timeout: float | timedelta) -> "Deadline":
        seconds = timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
        return cls(expires_at=time.monotonic() + seconds)

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def earliest(self, other: "Deadline | None") -> "Deadline":
        """Return whichever of the two deadlines expires first."""
        if other is None or self.expires_at <= other.expires_at:
            return self
        return other


__all__ = ["Deadline"]
