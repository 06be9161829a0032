"""Redis adapter – Dialer: opens and prepares new connections for the pool."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Any

from redis import exceptions as redis_exceptions
from redis.asyncio.connection import AbstractConnection, Connection, SSLConnection
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.replies import is_ok
from depcache.config.url import RedisURL
from depcache.kernel.errors import BaseError, DialError
from depcache.kernel.time import Clock, MonotonicClock
from depcache.observability.logging import get_logger

logger = get_logger(__name__)


@dataclasses.dataclass
class DialOptions:
    """Socket-level options applied to every new connection.

    ``connection_class`` and ``connection_kwargs`` let tests (or embedders)
    substitute another :class:`redis.asyncio.connection.AbstractConnection`
    implementation; see :func:`depcache.testing.fakes.fake_dial_options`.
    """

    connect_timeout: float | None = 5.0
    read_timeout: float | None = None
    keepalive: bool = True
    connection_class: type[AbstractConnection] | None = None
    connection_kwargs: dict[str, Any] = dataclasses.field(default_factory=dict)


class Dialer:
    """Callable that returns a freshly dialed, authenticated :class:`RedisConnection`.

    Dialing connects over TCP (TLS for ``rediss://``), then issues ``AUTH``
    when the URL carries a password and ``SELECT`` when it names a database.
    Any failure raises :class:`~depcache.kernel.errors.DialError` and the
    half-open connection is closed.
    """

    def __init__(
        self,
        url: RedisURL,
        options: DialOptions | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self.url = url
        self.options = options or DialOptions()
        self._clock = clock or MonotonicClock()

    def _raw_connection(self) -> AbstractConnection:
        opts = self.options
        connection_class = opts.connection_class
        if connection_class is None:
            connection_class = SSLConnection if self.url.ssl else Connection
        return connection_class(
            host=self.url.host,
            port=self.url.port,
            socket_connect_timeout=opts.connect_timeout or None,
            socket_timeout=opts.read_timeout or None,
            socket_keepalive=opts.keepalive,
            retry=Retry(NoBackoff(), 0),
            **opts.connection_kwargs,
        )

    async def __call__(self) -> RedisConnection:
        raw = self._raw_connection()
        conn = RedisConnection(raw, address=self.url.address, created_at=self._clock.now())
        try:
            await raw.connect()
            if self.url.password:
                reply = await conn.do(commands.AUTH, self.url.password)
                if not is_ok(reply):
                    raise DialError(self.url.address, f"AUTH returned {reply!r}")
            if self.url.database is not None:
                reply = await conn.do(commands.SELECT, self.url.database)
                if not is_ok(reply):
                    raise DialError(self.url.address, f"SELECT returned {reply!r}")
        except asyncio.CancelledError:
            await conn.close()
            raise
        except DialError:
            await conn.close()
            raise
        except (BaseError, redis_exceptions.RedisError, OSError) as exc:
            await conn.close()
            logger.warning("dial_failed", url=self.url.redacted(), error=str(exc))
            raise DialError(self.url.address, f"dial {self.url.address}: {exc}", cause=exc) from exc
        logger.info("dialed", url=self.url.redacted())
        return conn


__all__ = ["DialOptions", "Dialer"]
