"""Redis adapter – tag-invalidated cache, distributed lock, pool and scripts."""
from depcache.adapters.redis.cache import RedisCache, connect, get_default_cache, set_default_cache
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dialer import DialOptions, Dialer
from depcache.adapters.redis.lock import RedisLock
from depcache.adapters.redis.pool import ConnectionPool, PoolStats
from depcache.adapters.redis.scripts import Script, ScriptRegistry

__all__ = [
    "ConnectionPool",
    "DialOptions",
    "Dialer",
    "PoolStats",
    "RedisCache",
    "RedisConnection",
    "RedisLock",
    "Script",
    "ScriptRegistry",
    "connect",
    "get_default_cache",
    "set_default_cache",
]
