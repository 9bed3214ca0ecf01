"""In-memory timer store for testing and single-process use."""

import threading
from collections.abc import Iterable, Mapping
from datetime import datetime

from duracron.adapters.base import TimerStoreAdapter
from duracron.utils.time import ensure_utc


class InMemoryTimerStore(TimerStoreAdapter):
    """In-memory timer store (state is lost when the process exits)."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._alarm: datetime | None = None
        self._mutex = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._mutex:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._mutex:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._mutex:
            return self._data.pop(key, None) is not None

    def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        with self._mutex:
            return {key: self._data[key] for key in keys if key in self._data}

    def put_many(self, entries: Mapping[str, str]) -> None:
        with self._mutex:
            self._data.update(entries)

    def delete_many(self, keys: Iterable[str]) -> int:
        with self._mutex:
            removed = 0
            for key in keys:
                if self._data.pop(key, None) is not None:
                    removed += 1
            return removed

    def get_alarm(self) -> datetime | None:
        with self._mutex:
            return self._alarm

    def set_alarm(self, when: datetime) -> None:
        with self._mutex:
            self._alarm = ensure_utc(when)

    def delete_alarm(self) -> bool:
        with self._mutex:
            was_armed = self._alarm is not None
            self._alarm = None
            return was_armed

    def keys(self) -> list[str]:
        """Return all stored keys (for inspection in tests)."""
        with self._mutex:
            return list(self._data.keys())
