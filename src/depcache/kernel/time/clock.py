"""Kernel time – Clock protocol + implementations."""
from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Port: a monotonic source of seconds, swappable for deterministic tests."""

    def now(self) -> float: ...


class MonotonicClock:
    """Production clock backed by :func:`time.monotonic`."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Test clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        """Move the clock forward by *seconds*."""
        self._now += seconds


__all__ = ["Clock", "ManualClock", "MonotonicClock"]
