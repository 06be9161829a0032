"""Kernel time – Clock port + implementations."""
from depcache.kernel.time.clock import Clock, ManualClock, MonotonicClock

__all__ = ["Clock", "ManualClock", "MonotonicClock"]
