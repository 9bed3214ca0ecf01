"""Redis-based timer store."""

from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.common.exceptions import StoreConnectionError
from duracron.utils.time import from_epoch_millis, to_epoch_millis


class RedisTimerStore(TimerStoreAdapter):
    """
    Redis-based timer store.

    Design Decisions:
    - All values live in one Redis Hash so multi-key writes are a single
      HSET / HDEL (atomic on the server)
    - The alarm is a plain string key holding epoch milliseconds
    - One key prefix per scheduler instance isolates instances

    Schema:
        Hash:   "{prefix}data"  -> {key: value}
        String: "{prefix}alarm" -> epoch millis

    Example:
        >>> import redis
        >>> client = redis.Redis(host='localhost', port=6379, decode_responses=True)
        >>> store = RedisTimerStore(client, key_prefix="duracron:user-42:")
    """

    def __init__(self, redis_client: Any, key_prefix: str = "duracron:") -> None:
        """
        Initialize Redis timer store.

        Args:
            redis_client: Redis client instance with decode_responses=True
            key_prefix: Prefix for all Redis keys (default: "duracron:")
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_data_key(self) -> str:
        return f"{self.key_prefix}data"

    def _make_alarm_key(self) -> str:
        return f"{self.key_prefix}alarm"

    @contextmanager
    def _translate_errors(self) -> Generator[None, None, None]:
        """Map redis transport errors onto StoreConnectionError."""
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StoreConnectionError(f"Redis unavailable: {e}") from e

    def get(self, key: str) -> str | None:
        with self._translate_errors():
            return self.redis.hget(self._make_data_key(), key)

    def put(self, key: str, value: str) -> None:
        with self._translate_errors():
            self.redis.hset(self._make_data_key(), key, value)

    def delete(self, key: str) -> bool:
        with self._translate_errors():
            return self.redis.hdel(self._make_data_key(), key) > 0

    def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        keys = list(keys)
        if not keys:
            return {}
        with self._translate_errors():
            values = self.redis.hmget(self._make_data_key(), keys)
        return {key: value for key, value in zip(keys, values) if value is not None}

    def put_many(self, entries: Mapping[str, str]) -> None:
        """
        Write several keys atomically.

        Implementation:
            HSET {prefix}data k1 v1 k2 v2 ...
        """
        if not entries:
            return
        with self._translate_errors():
            self.redis.hset(self._make_data_key(), mapping=dict(entries))

    def delete_many(self, keys: Iterable[str]) -> int:
        """
        Delete several keys atomically.

        Implementation:
            HDEL {prefix}data k1 k2 ...
        """
        keys = list(keys)
        if not keys:
            return 0
        with self._translate_errors():
            return int(self.redis.hdel(self._make_data_key(), *keys))

    def get_alarm(self) -> datetime | None:
        with self._translate_errors():
            raw = self.redis.get(self._make_alarm_key())
        if raw is None:
            return None
        return from_epoch_millis(raw)

    def set_alarm(self, when: datetime) -> None:
        with self._translate_errors():
            self.redis.set(self._make_alarm_key(), str(to_epoch_millis(when)))

    def delete_alarm(self) -> bool:
        with self._translate_errors():
            return self.redis.delete(self._make_alarm_key()) > 0
