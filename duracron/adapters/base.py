"""Abstract base class for durable timer stores."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime


class TimerStoreAdapter(ABC):
    """Durable key-value store with a single alarm slot."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Get a value.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO IMPLEMENTS: Store adapter developer                      │
        │ WHO CALLS:      duracron Core (PendingFireRepository)        │
        │ WHEN CALLED:    Startup reconciliation, every alarm fire     │
        └──────────────────────────────────────────────────────────────┘

        Args:
            key: Key to read

        Returns:
            Stored value, or None if absent
        """
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """
        Store a value, overwriting any previous one.

        Args:
            key: Key to write
            value: String value
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a value.

        Returns:
            True if deleted, False if absent
        """
        pass

    def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        """
        Read several keys.

        Returns:
            Mapping of the keys that are present (absent keys are omitted)
        """
        result: dict[str, str] = {}
        for key in keys:
            value = self.get(key)
            if value is not None:
                result[key] = value
        return result

    @abstractmethod
    def put_many(self, entries: Mapping[str, str]) -> None:
        """
        Write several keys atomically.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      duracron Core when recording a pending fire  │
        ├──────────────────────────────────────────────────────────────┤
        │ CRITICAL: all entries become visible together or none do.    │
        │ The pending-fire keys must never be observed partially       │
        │ written, even if the process dies mid-call.                  │
        └──────────────────────────────────────────────────────────────┘

        Example implementations:
            InMemory: dict.update under a mutex
            Redis: MULTI / HSET ... / EXEC pipeline
            PostgreSQL: single transaction with upserts
        """
        pass

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> int:
        """
        Delete several keys atomically.

        Returns:
            Number of keys that existed
        """
        pass

    @abstractmethod
    def get_alarm(self) -> datetime | None:
        """
        Get the armed alarm time.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      duracron Core (AlarmSlot, AlarmDispatcher)   │
        │ WHEN CALLED:    Startup, every dispatcher poll               │
        └──────────────────────────────────────────────────────────────┘

        Returns:
            Alarm time (timezone-aware UTC), or None if no alarm is armed
        """
        pass

    @abstractmethod
    def set_alarm(self, when: datetime) -> None:
        """
        Arm the single alarm slot, replacing any previous alarm.

        Args:
            when: Instant to fire at (timezone-aware)
        """
        pass

    @abstractmethod
    def delete_alarm(self) -> bool:
        """
        Disarm the alarm slot.

        Returns:
            True if an alarm was armed, False otherwise
        """
        pass
