"""Common type definitions for duracron."""

from enum import Enum


class SchedulerState(str, Enum):
    """Scheduler state (derived from the pending-fire record)."""

    IDLE = "idle"  # No pending fire, no alarm
    ARMED = "armed"  # Pending fire recorded, alarm set

    def __str__(self) -> str:
        return self.value


class MissedFirePolicy(str, Enum):
    """What to do with an occurrence whose time passed while the process was down."""

    RUN_ONCE = "run_once"  # Execute once, late
    SKIP = "skip"  # Log as missed, do not execute

    def __str__(self) -> str:
        return self.value


class FireOutcome(str, Enum):
    """Result of handling a pending fire."""

    EXECUTED = "executed"
    FAILED = "failed"
    STALE = "stale"
    MISSED_SKIPPED = "missed_skipped"
    NOT_DUE = "not_due"
    NO_PENDING = "no_pending"
    INCONSISTENT = "inconsistent"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value
