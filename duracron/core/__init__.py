"""Core scheduler components."""

from duracron.core.alarm import AlarmSlot
from duracron.core.common import (
    AlarmAlreadyArmedError,
    DuplicateTaskError,
    FireOutcome,
    InconsistentPersistedStateError,
    InvalidPatternError,
    MissedFirePolicy,
    SchedulerConfigurationError,
    SchedulerError,
    SchedulerState,
    SchedulerStateError,
    StoreConnectionError,
    TaskNotRegisteredError,
    TaskTimeoutError,
)
from duracron.core.execution import AlarmDispatcher, TaskExecutor
from duracron.core.misfire import MissedFireHandler
from duracron.core.namespace import SchedulerNamespace
from duracron.core.pending import PENDING_FIRE_KEYS, PendingFire, PendingFireRepository
from duracron.core.scheduler import DurableCronScheduler
from duracron.core.scheduling import NextFireSelector, ScheduleCandidate, select_next
from duracron.core.tasks import TaskDefinition, TaskRegistry, TaskSet
from duracron.core.triggers import CronEvaluator, CronExpression, RecurrenceEvaluator

__all__ = [
    # Common Types
    "SchedulerState",
    "MissedFirePolicy",
    "FireOutcome",
    # Exceptions
    "SchedulerError",
    "SchedulerConfigurationError",
    "InvalidPatternError",
    "TaskNotRegisteredError",
    "DuplicateTaskError",
    "SchedulerStateError",
    "InconsistentPersistedStateError",
    "AlarmAlreadyArmedError",
    "TaskTimeoutError",
    "StoreConnectionError",
    # Tasks
    "TaskDefinition",
    "TaskSet",
    "TaskRegistry",
    # Recurrence
    "RecurrenceEvaluator",
    "CronEvaluator",
    "CronExpression",
    # Scheduling
    "ScheduleCandidate",
    "NextFireSelector",
    "select_next",
    "PendingFire",
    "PendingFireRepository",
    "PENDING_FIRE_KEYS",
    "AlarmSlot",
    "MissedFireHandler",
    # Execution
    "TaskExecutor",
    "AlarmDispatcher",
    # Scheduler
    "DurableCronScheduler",
    "SchedulerNamespace",
]
