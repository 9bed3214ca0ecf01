"""Common components shared across core modules."""

from duracron.core.common.exceptions import (
    AlarmAlreadyArmedError,
    DuplicateTaskError,
    InconsistentPersistedStateError,
    InvalidPatternError,
    SchedulerConfigurationError,
    SchedulerError,
    SchedulerStateError,
    StoreConnectionError,
    TaskNotRegisteredError,
    TaskTimeoutError,
)
from duracron.core.common.types import FireOutcome, MissedFirePolicy, SchedulerState

__all__ = [
    # Types
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
]
