"""Resilience – deadlines."""
from depcache.resilience.timeouts.deadline import Deadline

__all__ = ["Deadline"]
