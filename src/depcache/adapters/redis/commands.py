"""Redis adapter – command names and the reserved dependency prefix."""
from __future__ import annotations

ADD_TO_SET = "SADD"
ALL_KEYS = "*"
AUTH = "AUTH"
DELETE = "DEL"
EVALSHA = "EVALSHA"
EXEC = "EXEC"
EXISTS = "EXISTS"
EXPIRE = "EXPIRE"
FLUSH_ALL = "FLUSHALL"
GET = "GET"
HASH_GET = "HGET"
HASH_KEY_SET = "HSET"
HASH_MAP_GET = "HMGET"
HASH_MAP_SET = "HMSET"
IS_MEMBER = "SISMEMBER"
KEYS = "KEYS"
LIST_PUSH = "RPUSH"
LIST_RANGE = "LRANGE"
LOAD = "LOAD"
MEMBERS = "SMEMBERS"
MULTI = "MULTI"
PING = "PING"
REMOVE_MEMBER = "SREM"
SCRIPT = "SCRIPT"
SELECT = "SELECT"
SET = "SET"
SET_EXPIRATION = "SETEX"

DEPENDENCY_PREFIX = "depend:"
