"""Config – RedisURL, the parsed form of ``redis://[user[:password]@]host:port[/db]``."""
from __future__ import annotations

import dataclasses
from urllib.parse import unquote, urlsplit

from depcache.config.validation import InvalidURLError, MissingRedisURLError

DEFAULT_PORT = 6379
SCHEMES = ("redis", "rediss")


@dataclasses.dataclass(frozen=True)
class RedisURL:
    """Destination of a connection pool.

    The user part of the URL is accepted but ignored; authentication uses the
    password only. ``database`` is ``None`` when the URL has no path segment.
    """

    host: str
    port: int = DEFAULT_PORT
    password: str | None = dataclasses.field(default=None, repr=False)
    database: int | None = None
    ssl: bool = False

    @classmethod
    def parse(cls, url: str) -> "RedisURL":
        if not url:
            raise MissingRedisURLError()
        try:
            parts = urlsplit(url)
            port = parts.port
        except ValueError as exc:
            raise InvalidURLError(url, str(exc)) from exc

        if parts.scheme not in SCHEMES:
            raise InvalidURLError(url, f"unsupported scheme {parts.scheme!r}")
        if not parts.hostname:
            raise InvalidURLError(url, "missing host")

        password = unquote(parts.password) if parts.password is not None else None

        database: int | None = None
        path = parts.path.strip("/")
        if path:
            try:
                database = int(path)
            except ValueError as exc:
                raise InvalidURLError(url, f"database {path!r} is not a number") from exc
            if database < 0:
                raise InvalidURLError(url, "database must not be negative")

        return cls(
            host=parts.hostname,
            port=port if port is not None else DEFAULT_PORT,
            password=password or None,
            database=database,
            ssl=parts.scheme == "rediss",
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def redacted(self) -> str:
        """Render the URL with the password masked, for logs."""
        scheme = "rediss" if self.ssl else "redis"
        auth = ":***@" if self.password else ""
        db = f"/{self.database}" if self.database is not None else ""
        return f"{scheme}://{auth}{self.address}{db}"


__all__ = ["DEFAULT_PORT", "RedisURL"]
