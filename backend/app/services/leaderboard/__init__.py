"""Leaderboard domain services: ranking engine and its storage backends.

Routes and socket handlers reach the engine through `get_engine()`; the
app factory builds it from config with `build_engine()`.
"""

from flask import current_app

from .engine import LeaderboardEngine
from .entry import ANONYMOUS_PLAYER, MAX_SCORE, Entry, RankedEntry
from .errors import BackendUnavailable, LeaderboardError, ValidationError
from .redis_store import RedisConnection, RedisOrderedStore
from .store import MemoryOrderedStore, OrderedStore
from .validation import validate_submission

EXTENSION_KEY = 'leaderboard'


def build_engine(config) -> LeaderboardEngine:
    backend = (config.get('LEADERBOARD_BACKEND') or 'memory').lower()
    if backend == 'redis':
        connection = RedisConnection(
            config.get('REDIS_URL', 'redis://localhost:6379/0'),
            socket_timeout=float(config.get('REDIS_SOCKET_TIMEOUT', 2)),
        )
        store = RedisOrderedStore(connection, config.get('LEADERBOARD_KEY', 'click_game:leaderboard'))
    elif backend == 'memory':
        store = MemoryOrderedStore()
    else:
        raise ValueError(f"Unknown LEADERBOARD_BACKEND: {backend}")
    return LeaderboardEngine(
        store,
        max_size=int(config.get('LEADERBOARD_MAX_SIZE', 1000)),
        default_limit=int(config.get('LEADERBOARD_DEFAULT_LIMIT', 5)),
        max_score=int(config.get('MAX_SCORE', MAX_SCORE)),
    )


def get_engine() -> LeaderboardEngine:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'ANONYMOUS_PLAYER',
    'BackendUnavailable',
    'Entry',
    'LeaderboardEngine',
    'LeaderboardError',
    'MAX_SCORE',
    'MemoryOrderedStore',
    'OrderedStore',
    'RankedEntry',
    'RedisConnection',
    'RedisOrderedStore',
    'EXTENSION_KEY',
    'ValidationError',
    'build_engine',
    'get_engine',
    'validate_submission',
]
