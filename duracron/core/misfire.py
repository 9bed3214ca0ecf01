"""Missed-fire handling."""

from datetime import datetime, timedelta

from duracron.core.common.types import MissedFirePolicy
from duracron.core.pending import PendingFire
from duracron.utils.logging import ContextLogger
from duracron.utils.time import ensure_utc, to_iso


class MissedFireHandler:
    """
    Decide what happens to an occurrence that passed while the process was down.

    RUN_ONCE executes the task once, late, however many occurrences were
    missed. SKIP only records the miss in the log.
    """

    def __init__(
        self,
        policy: MissedFirePolicy | str = MissedFirePolicy.RUN_ONCE,
        logger: ContextLogger | None = None,
    ) -> None:
        self.policy = MissedFirePolicy(policy)
        self.logger = logger

    @staticmethod
    def get_delay(pending: PendingFire, current_time: datetime) -> timedelta:
        """How late the occurrence is (zero if not late)."""
        delay = ensure_utc(current_time) - pending.fire_at
        return max(delay, timedelta(0))

    def should_execute(self, pending: PendingFire, current_time: datetime) -> bool:
        """
        Apply the policy to a missed occurrence.

        Args:
            pending: The overdue pending fire (pattern already validated)
            current_time: When the miss was detected

        Returns:
            True if the task should run now
        """
        delay = self.get_delay(pending, current_time)

        if self.logger:
            self.logger.warning(
                "Missed fire detected",
                task=pending.task_name,
                pattern=pending.pattern,
                scheduled_for=to_iso(pending.fire_at),
                delay_seconds=int(delay.total_seconds()),
                policy=self.policy.value,
            )

        return self.policy == MissedFirePolicy.RUN_ONCE
