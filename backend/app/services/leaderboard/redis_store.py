"""Redis sorted-set backend for the leaderboard."""

from typing import Callable, List, Optional, Tuple
import logging
import threading

import redis
from redis.exceptions import RedisError

from .errors import BackendUnavailable
from .store import OrderedStore

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (RedisError, OSError)


class RedisConnection:
    """Lazily connected redis client with a ping health check per use.

    A failed ping drops the client and reconnects once. A failed reconnect
    raises BackendUnavailable; there is no retry loop.
    """

    def __init__(self, url: str, socket_timeout: float = 2.0, client_factory: Optional[Callable] = None):
        self.url = url
        self.socket_timeout = socket_timeout
        self._client_factory = client_factory or redis.Redis.from_url
        self._client = None
        self._lock = threading.Lock()

    def _connect(self):
        try:
            client = self._client_factory(
                self.url,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
                decode_responses=True,
            )
            client.ping()
        except _TRANSPORT_ERRORS as exc:
            logger.error(f"Failed to connect to Redis at {self.url}: {exc}")
            raise BackendUnavailable(f"Cannot connect to Redis: {exc}") from exc
        logger.info(f"Connected to Redis at {self.url}")
        return client

    def client(self):
        # Health check runs outside the lock so concurrent callers ping in parallel
        with self._lock:
            current = self._client
        if current is not None:
            try:
                if current.ping():
                    return current
            except _TRANSPORT_ERRORS as exc:
                logger.warning(f"Redis ping failed, reconnecting: {exc}")
            self._discard(current)
        return self._replace(current)

    def _replace(self, stale):
        fresh = self._connect()
        with self._lock:
            if self._client is not None and self._client is not stale:
                # Another caller reconnected first; keep theirs
                winner = self._client
            else:
                self._client = winner = fresh
        if winner is not fresh:
            self._close(fresh)
        return winner

    def invalidate(self) -> None:
        with self._lock:
            current = self._client
        if current is not None:
            self._discard(current)

    def _discard(self, client) -> None:
        with self._lock:
            if self._client is client:
                self._client = None
        self._close(client)

    @staticmethod
    def _close(client) -> None:
        try:
            client.close()
        except _TRANSPORT_ERRORS:
            pass


class RedisOrderedStore(OrderedStore):
    """One sorted set plus an INCR counter for sequences.

    Atomicity comes from the redis commands themselves; no local locking.
    """

    def __init__(self, connection: RedisConnection, key: str):
        self.connection = connection
        self.key = key
        self.sequence_key = f"{key}:seq"

    def _run(self, op: str, fn):
        try:
            return fn(self.connection.client())
        except BackendUnavailable:
            raise
        except _TRANSPORT_ERRORS as exc:
            self.connection.invalidate()
            raise BackendUnavailable(f"Redis {op} failed: {exc}") from exc

    def next_sequence(self) -> int:
        return int(self._run('INCR', lambda c: c.incr(self.sequence_key)))

    def insert(self, member: str, score: int) -> bool:
        added = self._run('ZADD', lambda c: c.zadd(self.key, {member: score}))
        return bool(added)

    def range_descending(self, offset: int, count: int) -> List[Tuple[str, int]]:
        if offset < 0 or count <= 0:
            return []
        rows = self._run(
            'ZREVRANGE',
            lambda c: c.zrevrange(self.key, offset, offset + count - 1, withscores=True),
        )
        return [(member, int(score)) for member, score in rows or []]

    def rank(self, member: str) -> Optional[int]:
        rank = self._run('ZREVRANK', lambda c: c.zrevrank(self.key, member))
        return int(rank) if rank is not None else None

    def size(self) -> int:
        return int(self._run('ZCARD', lambda c: c.zcard(self.key)) or 0)

    def remove_lowest(self, count: int) -> int:
        if count <= 0:
            return 0
        return int(self._run('ZREMRANGEBYRANK', lambda c: c.zremrangebyrank(self.key, 0, count - 1)) or 0)

    def trim(self, max_size: int) -> int:
        # Negative stop keeps the top max_size members in one command
        return int(self._run('ZREMRANGEBYRANK', lambda c: c.zremrangebyrank(self.key, 0, -(max_size + 1))) or 0)

    def clear(self) -> None:
        self._run('DEL', lambda c: c.delete(self.key))
