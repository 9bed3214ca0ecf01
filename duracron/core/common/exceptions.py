"""Custom exceptions for duracron."""


class SchedulerError(Exception):
    """Base exception for scheduler errors."""

    pass


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class SchedulerConfigurationError(SchedulerError):
    """Task set or scheduler configuration is invalid."""

    pass


class InvalidPatternError(SchedulerConfigurationError):
    """A recurrence pattern could not be parsed."""

    def __init__(self, pattern: str, reason: str | None = None) -> None:
        self.pattern = pattern
        self.reason = reason
        message = f"Invalid cron pattern: '{pattern}'"
        if reason:
            message += f"\nReason: {reason}"
        super().__init__(message)


class TaskNotRegisteredError(SchedulerConfigurationError):
    """A task name has no handler bound to it."""

    pass


class DuplicateTaskError(SchedulerConfigurationError):
    """A task name was defined more than once."""

    pass


# ---------------------------------------------------------------------------
# State errors
# ---------------------------------------------------------------------------


class SchedulerStateError(SchedulerError):
    """Scheduler or persisted state is not what an operation expects."""

    pass


class InconsistentPersistedStateError(SchedulerStateError):
    """The persisted pending-fire record is partial or contradicts the alarm."""

    def __init__(self, message: str, present_keys: list[str] | None = None) -> None:
        self.present_keys = present_keys or []
        super().__init__(message)


class AlarmAlreadyArmedError(SchedulerStateError):
    """An alarm was armed while another one is still set."""

    pass


class TaskTimeoutError(SchedulerStateError):
    """A task handler exceeded its timeout."""

    pass


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------


class StoreConnectionError(SchedulerError):
    """Transient failure talking to the durable timer store."""

    pass
