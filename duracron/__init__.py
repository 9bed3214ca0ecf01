"""
duracron - Durable single-alarm cron scheduler

Usage:
    from duracron import DurableCronScheduler, InMemoryTimerStore, TaskRegistry

    registry = TaskRegistry()

    @registry.task("check-usage", "* * * * *")
    def check_usage():
        ...

    @registry.task("clean-mail", "0 0 * * *")
    def clean_mail():
        ...

    scheduler = DurableCronScheduler(
        registry.snapshot(),
        InMemoryTimerStore(),
        name="jonny-alexander",
    )

    # Deliver alarms from a background thread
    scheduler.start()

    # Or let the host deliver them
    scheduler.on_alarm()
"""

from duracron.adapters.storage import InMemoryTimerStore
from duracron.core import (
    DurableCronScheduler,
    FireOutcome,
    InconsistentPersistedStateError,
    InvalidPatternError,
    MissedFirePolicy,
    PendingFire,
    SchedulerConfigurationError,
    SchedulerError,
    SchedulerNamespace,
    SchedulerState,
    SchedulerStateError,
    StoreConnectionError,
    TaskDefinition,
    TaskNotRegisteredError,
    TaskRegistry,
    TaskSet,
    select_next,
)

__all__ = [
    # Core
    "DurableCronScheduler",
    "SchedulerNamespace",
    "SchedulerState",
    "MissedFirePolicy",
    "FireOutcome",
    "PendingFire",
    "select_next",
    # Tasks
    "TaskDefinition",
    "TaskSet",
    "TaskRegistry",
    # Exceptions
    "SchedulerError",
    "SchedulerConfigurationError",
    "InvalidPatternError",
    "TaskNotRegisteredError",
    "SchedulerStateError",
    "InconsistentPersistedStateError",
    "StoreConnectionError",
    # Stores
    "InMemoryTimerStore",
]
