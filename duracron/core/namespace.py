"""Name-to-instance routing for scheduler instances."""

import threading
from collections.abc import Callable
from typing import Any

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.scheduler import DurableCronScheduler
from duracron.core.tasks.registry import TaskSet
from duracron.type_defs import FetchResponse


class SchedulerNamespace:
    """
    Owns one DurableCronScheduler per logical subject (e.g. per user).

    Instances are created on first use, each with its own store, and share
    no mutable state.

    Usage:
        >>> namespace = SchedulerNamespace(
        ...     task_set_factory=lambda name: user_tasks(name),
        ...     store_factory=lambda name: RedisTimerStore(client, key_prefix=f"duracron:{name}:"),
        ... )
        >>> namespace.fetch("jonny-alexander", request)
        {'status': 200, 'body': 'OK', 'scheduler': 'jonny-alexander'}
    """

    def __init__(
        self,
        task_set_factory: Callable[[str], TaskSet],
        store_factory: Callable[[str], TimerStoreAdapter],
        start_dispatchers: bool = False,
        **scheduler_options: Any,
    ) -> None:
        """
        Initialize namespace.

        Args:
            task_set_factory: Builds the task set for a scheduler name
            store_factory: Builds the (isolated) store for a scheduler name
            start_dispatchers: Start each scheduler's alarm dispatcher on creation
            **scheduler_options: Passed through to DurableCronScheduler
        """
        self.task_set_factory = task_set_factory
        self.store_factory = store_factory
        self.start_dispatchers = start_dispatchers
        self.scheduler_options = scheduler_options

        self._instances: dict[str, DurableCronScheduler] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> DurableCronScheduler:
        """
        Return the scheduler for *name*, creating it on first use.

        Raises:
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Scheduler name cannot be empty")

        with self._lock:
            scheduler = self._instances.get(name)
            if scheduler is None:
                scheduler = DurableCronScheduler(
                    self.task_set_factory(name),
                    self.store_factory(name),
                    name=name,
                    **self.scheduler_options,
                )
                if self.start_dispatchers:
                    scheduler.start()
                self._instances[name] = scheduler
            return scheduler

    def fetch(self, name: str, request: Any = None) -> FetchResponse:
        """Route an inbound request to the named scheduler and return its acknowledgment."""
        return self.get(name).fetch(request)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._instances.keys())

    def shutdown(self) -> None:
        """Stop every instance's alarm dispatcher."""
        with self._lock:
            instances = list(self._instances.values())
        for scheduler in instances:
            scheduler.stop()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
