"""
depcache – tag-invalidated cache client for Redis.

Import path convention::

    from depcache.adapters.redis import RedisCache, RedisLock, connect
    from depcache.config import RedisCacheSettings, EnvSettingsLoader
    from depcache.kernel.errors import NilReplyError, LockMismatchError
    from depcache.resilience import Deadline, DeadlineContext
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
