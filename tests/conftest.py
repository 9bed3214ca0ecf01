"""Common test fixtures."""

import pytest
from helpers import FrozenClock, TaskRecorder, dt

from duracron import DurableCronScheduler, InMemoryTimerStore, TaskSet
from duracron.adapters.base import TimerStoreAdapter


@pytest.fixture
def clock():
    """Clock frozen at 2025-06-15 10:32:00 UTC."""
    return FrozenClock(dt(2025, 6, 15, 10, 32))


@pytest.fixture
def store():
    return InMemoryTimerStore()


@pytest.fixture
def recorder():
    return TaskRecorder()


@pytest.fixture
def make_scheduler(store, clock, recorder):
    """
    Build a scheduler over the shared store and clock.

    patterns: name -> pattern; every name gets a recording handler.
    """
    created: list[DurableCronScheduler] = []

    def _make(
        patterns: dict[str, str],
        version: int = 1,
        store_override: TimerStoreAdapter | None = None,
        **options,
    ) -> DurableCronScheduler:
        task_set = TaskSet.from_mapping(
            patterns,
            {name: recorder.handler(name) for name in patterns},
            version=version,
        )
        scheduler = DurableCronScheduler(
            task_set,
            store_override or store,
            clock=clock,
            **options,
        )
        created.append(scheduler)
        return scheduler

    yield _make

    for scheduler in created:
        if scheduler.is_running():
            scheduler.stop()
