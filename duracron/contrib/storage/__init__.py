"""Contributed timer stores for duracron."""

__all__ = []

# Redis timer store (optional)
try:
    from duracron.contrib.storage.redis import RedisTimerStore

    __all__.append("RedisTimerStore")
except ImportError:
    RedisTimerStore = None  # type: ignore[assignment, misc]

# PostgreSQL timer store (optional)
try:
    from duracron.contrib.storage.postgres import PostgreSQLTimerStore

    __all__.append("PostgreSQLTimerStore")
except ImportError:
    PostgreSQLTimerStore = None  # type: ignore[assignment, misc]
