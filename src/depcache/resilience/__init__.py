"""Resilience – deadlines and their propagation."""

from depcache.resilience.deadline import DeadlineContext, DeadlineExceededError, deadline_aware
from depcache.resilience.timeouts import Deadline

__all__ = [
    "Deadline",
    "DeadlineContext",
    "DeadlineExceededError",
    "deadline_aware",
]
