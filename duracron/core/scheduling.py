"""Selection of the next occurrence across a task set."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from duracron.core.common.exceptions import InvalidPatternError
from duracron.core.tasks.registry import TaskSet
from duracron.core.triggers.base import RecurrenceEvaluator
from duracron.utils.logging import ContextLogger, get_default_logger
from duracron.utils.time import ensure_utc


@dataclass(frozen=True)
class ScheduleCandidate:
    """The task that fires first, with the pattern used to compute its time."""

    task_name: str
    pattern: str
    fire_at: datetime


class NextFireSelector:
    """
    Domain service choosing the single next task to fire.

    Pure computation: asks the evaluator for every task's next occurrence
    strictly after *now* and keeps the earliest. Callers persist the result.
    """

    def __init__(
        self,
        evaluator: RecurrenceEvaluator,
        logger: ContextLogger | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.logger = logger or get_default_logger()

    def select(
        self, task_set: TaskSet | Mapping[str, str], now: datetime
    ) -> ScheduleCandidate | None:
        """
        Select the earliest upcoming occurrence.

        Invalid patterns are logged and excluded for this round only. Ties on
        fire time go to the lexicographically smallest task name.

        Args:
            task_set: TaskSet or name -> pattern mapping
            now: Reference time

        Returns:
            Winning candidate, or None if nothing is schedulable
        """
        patterns = task_set.patterns() if isinstance(task_set, TaskSet) else dict(task_set)
        now = ensure_utc(now)

        best: ScheduleCandidate | None = None
        for name in sorted(patterns):
            pattern = patterns[name]
            try:
                fire_at = self.evaluator.next_occurrence(pattern, now)
            except InvalidPatternError as e:
                self.logger.error(
                    "Invalid cron pattern, task excluded from this round",
                    task=name,
                    pattern=pattern,
                    reason=e.reason,
                )
                continue

            if best is None or fire_at < best.fire_at:
                best = ScheduleCandidate(task_name=name, pattern=pattern, fire_at=fire_at)

        return best


def select_next(
    task_set: TaskSet | Mapping[str, str],
    evaluator: RecurrenceEvaluator,
    now: datetime,
    logger: ContextLogger | None = None,
) -> ScheduleCandidate | None:
    """Functional shortcut for NextFireSelector(evaluator, logger).select(task_set, now)."""
    return NextFireSelector(evaluator, logger).select(task_set, now)
