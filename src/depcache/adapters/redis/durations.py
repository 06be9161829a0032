"""Redis adapter – conversion of TTL arguments to whole seconds."""
from __future__ import annotations

from datetime import timedelta

Duration = float | timedelta


def ttl_seconds(ttl: Duration) -> int:
    """Whole seconds of *ttl*, rounded down. Sub-second values become ``0``."""
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
    return int(seconds)


__all__ = ["Duration", "ttl_seconds"]
