"""Test helpers shared across unit and integration tests."""

import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.pending import PendingFire, PendingFireRepository


class FrozenClock:
    """Manually advanced clock injected into schedulers."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class TaskRecorder:
    """Creates handlers that record each call."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def handler(self, name: str) -> Callable[[], None]:
        def _run() -> None:
            self.calls.append(name)

        _run.__name__ = name.replace("-", "_")
        return _run

    def count(self, name: str) -> int:
        return self.calls.count(name)


class SimulatedCrash(BaseException):
    """Stands in for the process dying; escapes every `except Exception`."""


class CrashingStore(TimerStoreAdapter):
    """Wraps a store and 'kills the process' on the Nth call of one method."""

    def __init__(self, inner: TimerStoreAdapter, method: str, on_call: int = 1) -> None:
        self.inner = inner
        self.method = method
        self.on_call = on_call
        self.calls = 0

    def _maybe_crash(self, method: str) -> None:
        if method != self.method:
            return
        self.calls += 1
        if self.calls == self.on_call:
            raise SimulatedCrash(f"process killed during {method}")

    def get(self, key):
        self._maybe_crash("get")
        return self.inner.get(key)

    def put(self, key, value):
        self._maybe_crash("put")
        self.inner.put(key, value)

    def delete(self, key):
        self._maybe_crash("delete")
        return self.inner.delete(key)

    def get_many(self, keys):
        self._maybe_crash("get_many")
        return self.inner.get_many(keys)

    def put_many(self, entries):
        self._maybe_crash("put_many")
        self.inner.put_many(entries)

    def delete_many(self, keys):
        self._maybe_crash("delete_many")
        return self.inner.delete_many(keys)

    def get_alarm(self):
        self._maybe_crash("get_alarm")
        return self.inner.get_alarm()

    def set_alarm(self, when):
        self._maybe_crash("set_alarm")
        self.inner.set_alarm(when)

    def delete_alarm(self):
        self._maybe_crash("delete_alarm")
        return self.inner.delete_alarm()


def dt(year, month, day, hour=0, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second, tzinfo=UTC)


def write_pending(store: TimerStoreAdapter, task_name: str, pattern: str, fire_at: datetime) -> None:
    """Persist a pending fire and its alarm the way a previous process would have."""
    PendingFireRepository(store).save(
        PendingFire(task_name=task_name, pattern=pattern, fire_at=fire_at)
    )
    store.set_alarm(fire_at)


def wait_for(
    condition: Callable[[], bool],
    timeout: float = 5.0,
    interval: float = 0.05,
    error_message: str | None = None,
) -> bool:
    """
    Wait until condition is True, polling at interval.

    Raises:
        AssertionError: If timeout exceeded
    """
    start = time.time()
    while time.time() - start < timeout:
        if condition():
            return True
        time.sleep(interval)

    elapsed = time.time() - start
    raise AssertionError(
        error_message or f"Condition not met within {timeout}s (elapsed: {elapsed:.2f}s)"
    )


