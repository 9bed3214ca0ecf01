"""Durable record of the single pending fire."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.common.exceptions import InconsistentPersistedStateError
from duracron.core.scheduling import ScheduleCandidate
from duracron.core.tasks.registry import TaskSet
from duracron.utils.retry import store_retry
from duracron.utils.time import ensure_utc, parse_iso_datetime, to_iso

NEXT_TIME_KEY = "next-time"
NEXT_TASK_KEY = "next-task"
NEXT_PATTERN_KEY = "next-pattern"

PENDING_FIRE_KEYS = (NEXT_TIME_KEY, NEXT_TASK_KEY, NEXT_PATTERN_KEY)


@dataclass(frozen=True)
class PendingFire:
    """The task armed to fire next, with the pattern snapshot it was computed from."""

    task_name: str
    pattern: str
    fire_at: datetime

    @classmethod
    def from_candidate(cls, candidate: ScheduleCandidate) -> "PendingFire":
        return cls(
            task_name=candidate.task_name,
            pattern=candidate.pattern,
            fire_at=ensure_utc(candidate.fire_at),
        )

    @classmethod
    def from_storage(cls, data: dict[str, str]) -> "PendingFire | None":
        """
        Rebuild a record from stored keys.

        Returns:
            The record, or None if no key is present

        Raises:
            InconsistentPersistedStateError: If only some keys are present,
                or the stored time cannot be parsed
        """
        present = [key for key in PENDING_FIRE_KEYS if data.get(key)]
        if not present:
            return None
        if len(present) != len(PENDING_FIRE_KEYS):
            raise InconsistentPersistedStateError(
                f"Pending fire record is partial: found {present}, "
                f"expected all of {list(PENDING_FIRE_KEYS)}",
                present_keys=present,
            )

        try:
            fire_at = parse_iso_datetime(data[NEXT_TIME_KEY])
        except ValueError as e:
            raise InconsistentPersistedStateError(
                f"Pending fire time is not a valid timestamp: {data[NEXT_TIME_KEY]!r}",
                present_keys=present,
            ) from e

        return cls(
            task_name=data[NEXT_TASK_KEY],
            pattern=data[NEXT_PATTERN_KEY],
            fire_at=fire_at,
        )

    def to_storage(self) -> dict[str, str]:
        return {
            NEXT_TIME_KEY: to_iso(self.fire_at),
            NEXT_TASK_KEY: self.task_name,
            NEXT_PATTERN_KEY: self.pattern,
        }

    def is_due(self, now: datetime, tolerance: timedelta = timedelta(0)) -> bool:
        """True once *now* (plus tolerance for early alarm delivery) reaches fire_at."""
        return self.fire_at <= ensure_utc(now) + tolerance

    def matches(self, task_set: TaskSet) -> bool:
        """True if the live task set still has this task with the same pattern."""
        return task_set.pattern_for(self.task_name) == self.pattern


class PendingFireRepository:
    """Reads and writes the pending-fire keys as one unit."""

    def __init__(self, store: TimerStoreAdapter) -> None:
        self.store = store

    @store_retry
    def _read(self) -> dict[str, str]:
        return self.store.get_many(PENDING_FIRE_KEYS)

    def load(self) -> PendingFire | None:
        """
        Load the pending fire.

        Raises:
            InconsistentPersistedStateError: If the stored record is partial
        """
        return PendingFire.from_storage(self._read())

    @store_retry
    def save(self, pending: PendingFire) -> None:
        """Persist all three keys in one atomic write."""
        self.store.put_many(pending.to_storage())

    @store_retry
    def clear(self) -> int:
        """Delete all three keys in one atomic write."""
        return self.store.delete_many(PENDING_FIRE_KEYS)
