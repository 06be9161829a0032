"""Resilience – Deadline propagation via contextvars."""
from depcache.resilience.deadline.context import (
    DeadlineContext,
    DeadlineExceededError,
    deadline_aware,
)

__all__ = ["DeadlineContext", "DeadlineExceededError", "deadline_aware"]
