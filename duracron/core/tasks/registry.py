"""Immutable task sets and the registry that builds them."""

import threading
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from duracron.core.common.exceptions import DuplicateTaskError, TaskNotRegisteredError
from duracron.core.tasks.definition import TaskDefinition


class TaskSet:
    """
    Immutable, versioned snapshot of task definitions.

    Iteration is in lexicographic task-name order so every consumer sees the
    same ordering.
    """

    __slots__ = ("_tasks", "_version")

    def __init__(self, tasks: list[TaskDefinition] | None = None, version: int = 1) -> None:
        if version < 1:
            raise ValueError("TaskSet version must be >= 1")

        by_name: dict[str, TaskDefinition] = {}
        for task in tasks or []:
            if task.name in by_name:
                raise DuplicateTaskError(
                    f"Task '{task.name}' is defined more than once. "
                    "Task names must be unique within a task set."
                )
            by_name[task.name] = task

        self._tasks = MappingProxyType(dict(sorted(by_name.items())))
        self._version = version

    @classmethod
    def from_mapping(
        cls,
        patterns: Mapping[str, str],
        handlers: Mapping[str, Callable[[], Any]],
        version: int = 1,
    ) -> "TaskSet":
        """
        Build a task set from name -> pattern and name -> handler mappings.

        Args:
            patterns: Task name to cron pattern
            handlers: Task name to handler callable
            version: Snapshot version

        Raises:
            TaskNotRegisteredError: If a pattern names a task without a handler
        """
        missing = sorted(name for name in patterns if name not in handlers)
        if missing:
            raise TaskNotRegisteredError(
                f"No handler registered for task(s): {', '.join(missing)}\n"
                "Every scheduled task name needs a handler."
            )

        return cls(
            [
                TaskDefinition(name=name, pattern=pattern, handler=handlers[name])
                for name, pattern in patterns.items()
            ],
            version=version,
        )

    @property
    def version(self) -> int:
        return self._version

    def get(self, name: str) -> TaskDefinition | None:
        return self._tasks.get(name)

    def pattern_for(self, name: str) -> str | None:
        """Return the live pattern for a task, or None if the task is gone."""
        task = self._tasks.get(name)
        return task.pattern if task else None

    def names(self) -> list[str]:
        return list(self._tasks.keys())

    def patterns(self) -> dict[str, str]:
        """Return a name -> pattern copy."""
        return {name: task.pattern for name, task in self._tasks.items()}

    def replace(self, tasks: list[TaskDefinition]) -> "TaskSet":
        """Return a new snapshot with the next version number."""
        return TaskSet(tasks, version=self._version + 1)

    def __iter__(self) -> Iterator[TaskDefinition]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __repr__(self) -> str:
        return f"TaskSet(version={self._version}, tasks={self.patterns()!r})"


class TaskRegistry:
    """
    Thread-safe builder for task sets.

    Usage:
        >>> registry = TaskRegistry()
        >>> @registry.task("clean-mail", "0 0 * * *")
        ... def clean_mail():
        ...     ...
        >>> task_set = registry.snapshot()
    """

    def __init__(self) -> None:
        self._tasks: dict[str, TaskDefinition] = {}
        self._lock = threading.RLock()
        self._version = 0

    def register(
        self,
        name: str,
        pattern: str,
        handler: Callable[[], Any],
        timeout_seconds: float | None = None,
    ) -> TaskDefinition:
        """
        Register a task (thread-safe).

        Raises:
            DuplicateTaskError: If the name is already registered
        """
        definition = TaskDefinition(
            name=name, pattern=pattern, handler=handler, timeout_seconds=timeout_seconds
        )
        with self._lock:
            if name in self._tasks:
                raise DuplicateTaskError(
                    f"Task '{name}' is already registered. "
                    "Call unregister() first to change its pattern or handler."
                )
            self._tasks[name] = definition
        return definition

    def task(
        self, name: str, pattern: str, timeout_seconds: float | None = None
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
        """Decorator form of register()."""

        def decorator(func: Callable[[], Any]) -> Callable[[], Any]:
            self.register(name, pattern, func, timeout_seconds=timeout_seconds)
            return func

        return decorator

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._tasks.pop(name, None) is not None

    def snapshot(self) -> TaskSet:
        """Freeze the current registrations into a new versioned TaskSet."""
        with self._lock:
            self._version += 1
            return TaskSet(list(self._tasks.values()), version=self._version)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._tasks
