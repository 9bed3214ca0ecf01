"""Durable single-alarm cron scheduler."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.alarm import AlarmSlot
from duracron.core.common.exceptions import (
    InconsistentPersistedStateError,
    SchedulerConfigurationError,
)
from duracron.core.common.types import FireOutcome, MissedFirePolicy, SchedulerState
from duracron.core.execution.alarm_loop import AlarmDispatcher
from duracron.core.execution.task_executor import TaskExecutor
from duracron.core.misfire import MissedFireHandler
from duracron.core.pending import PendingFire, PendingFireRepository
from duracron.core.scheduling import NextFireSelector
from duracron.core.tasks.registry import TaskSet
from duracron.core.triggers.base import RecurrenceEvaluator
from duracron.core.triggers.cron import CronEvaluator
from duracron.type_defs import FetchResponse, SchedulerStatus
from duracron.utils.logging import ContextLogger, setup_logger
from duracron.utils.time import ensure_utc, to_iso, utc_now

OnFailureCallback = Callable[[str, Exception], None]
OnSuccessCallback = Callable[[str], None]


class DurableCronScheduler:
    """
    Keeps exactly one alarm armed for the earliest upcoming task occurrence.

    The pending fire (task, pattern, time) lives in the durable store, so the
    schedule survives restarts. Every operation runs under one lock, and the
    constructor reconciles persisted state before returning, so no caller can
    observe the scheduler mid-startup.

    Source of truth:
        The pending-fire record. It is written before the alarm is armed and
        deleted before the alarm is disarmed; on startup the record decides,
        and an alarm without a record is discarded.

    Example:
        >>> tasks = TaskSet.from_mapping({"check-usage": "* * * * *"}, {"check-usage": check})
        >>> scheduler = DurableCronScheduler(tasks, InMemoryTimerStore())
        >>> scheduler.start()  # deliver alarms from a background thread
    """

    MIN_POLL_INTERVAL = 0.05
    MAX_EARLY_FIRE_TOLERANCE = 60

    def __init__(
        self,
        task_set: TaskSet,
        store: TimerStoreAdapter,
        name: str = "default",
        evaluator: RecurrenceEvaluator | None = None,
        timezone: str = "UTC",
        missed_fire_policy: MissedFirePolicy | str = MissedFirePolicy.RUN_ONCE,
        early_fire_tolerance_seconds: float = 1.0,
        poll_interval_seconds: float = 1.0,
        clock: Callable[[], datetime] = utc_now,
        logger: ContextLogger | logging.Logger | None = None,
        on_failure: OnFailureCallback | None = None,
        on_success: OnSuccessCallback | None = None,
    ) -> None:
        """
        Initialize the scheduler and reconcile persisted state.

        Args:
            task_set: Immutable task snapshot
            store: Durable timer store (one per scheduler instance)
            name: Instance name, used in logs
            evaluator: Recurrence evaluator (default: CronEvaluator(timezone))
            timezone: IANA timezone patterns are evaluated in
            missed_fire_policy: What to do with occurrences missed while down
            early_fire_tolerance_seconds: How early an alarm may be delivered
                and still count as due
            poll_interval_seconds: Alarm dispatcher poll interval
            clock: Returns the current time (timezone-aware)
            logger: Custom logger (uses default if None)
            on_failure: Called with (task_name, error) when a task raises
            on_success: Called with task_name when a task completes

        Raises:
            ValueError: If parameters are invalid
        """
        if not isinstance(task_set, TaskSet):
            raise SchedulerConfigurationError(
                f"task_set must be a TaskSet, got {type(task_set).__name__}. "
                "Use TaskSet.from_mapping() or TaskRegistry.snapshot()."
            )
        if not name:
            raise ValueError("Scheduler name cannot be empty")
        if poll_interval_seconds < self.MIN_POLL_INTERVAL:
            raise ValueError(f"poll_interval_seconds must be >= {self.MIN_POLL_INTERVAL}")
        if not 0 <= early_fire_tolerance_seconds <= self.MAX_EARLY_FIRE_TOLERANCE:
            raise ValueError(
                f"early_fire_tolerance_seconds must be between 0 and {self.MAX_EARLY_FIRE_TOLERANCE}"
            )

        self.name = name
        self.store = store
        self.clock = clock
        self.early_fire_tolerance = timedelta(seconds=early_fire_tolerance_seconds)
        self.on_failure = on_failure
        self.on_success = on_success

        base_logger = (
            logger.logger if isinstance(logger, ContextLogger) else (logger or setup_logger())
        )
        self.logger = ContextLogger(
            base_logger, {"component": self.__class__.__name__, "scheduler": name}
        )

        self._task_set = task_set
        self._lock = threading.RLock()
        # Set when an operation failed midway; cleared by the next successful fire
        self._needs_recompute = False

        self._selector = NextFireSelector(evaluator or CronEvaluator(timezone), self.logger)
        self._repository = PendingFireRepository(store)
        self._alarm = AlarmSlot(store)
        self._missed_fire_handler = MissedFireHandler(missed_fire_policy, self.logger)
        self._executor = TaskExecutor(self.logger)
        self._dispatcher = AlarmDispatcher(
            store,
            self.on_alarm,
            self.logger,
            poll_interval_seconds=poll_interval_seconds,
            clock=clock,
            name=name,
            redeliver=self._recompute_needed,
        )

        # Blocking barrier: nothing else may touch state until this completes
        with self._lock:
            self._reconcile_on_startup()

    # ------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------

    @property
    def task_set(self) -> TaskSet:
        return self._task_set

    @property
    def state(self) -> SchedulerState:
        """IDLE if no fire is pending, ARMED otherwise."""
        with self._lock:
            try:
                pending = self._repository.load()
            except InconsistentPersistedStateError:
                return SchedulerState.IDLE
            return SchedulerState.ARMED if pending else SchedulerState.IDLE

    @property
    def needs_recompute(self) -> bool:
        """True after a failed operation until the next alarm handling succeeds."""
        return self._needs_recompute

    def get_pending(self) -> PendingFire | None:
        """
        Return the pending fire.

        Raises:
            InconsistentPersistedStateError: If the stored record is partial
        """
        with self._lock:
            return self._repository.load()

    def start(self) -> None:
        """
        Start delivering alarms from a background thread (non-blocking).

        Without start(), the host calls on_alarm() itself when the alarm is due.
        """
        self._dispatcher.start()

    def stop(self) -> dict[str, Any]:
        """
        Stop alarm delivery. The schedule stays persisted.

        Returns:
            Dictionary with shutdown status
        """
        was_running = self._dispatcher.is_running()
        self._dispatcher.stop(wait=True)
        with self._lock:
            self._executor.shutdown_async()
        return {"was_running": was_running}

    def is_running(self) -> bool:
        return self._dispatcher.is_running()

    def tick(self) -> bool:
        """Run one alarm-delivery check synchronously (returns True if delivered)."""
        return self._dispatcher.tick()

    def fetch(self, request: Any = None) -> FetchResponse:
        """Inbound request entry point; scheduling is not exposed here."""
        with self._lock:
            return {"status": 200, "body": "OK", "scheduler": self.name}

    def on_alarm(self) -> FireOutcome:
        """
        Handle alarm delivery.

        Safe to call more than once for the same instant: a delivery with no
        due pending fire changes nothing.

        Returns:
            What happened to the pending fire
        """
        with self._lock:
            now = ensure_utc(self.clock())
            try:
                outcome = self._handle_alarm(now)
            except Exception as e:
                # The record and alarm may already be cleared; the dispatcher
                # keeps redelivering until a fire completes
                self._needs_recompute = True
                self.logger.error("Alarm handling failed", error=str(e), exc_info=True)
                return FireOutcome.ERROR
            self._needs_recompute = False
            return outcome

    def replace_tasks(self, task_set: TaskSet) -> FireOutcome | None:
        """
        Swap in a new task snapshot and reschedule.

        A pending fire that is already due is handled against the new snapshot
        (skipped if its pattern changed). Otherwise the pending fire is
        dropped and selection runs again.

        Args:
            task_set: Snapshot with a higher version than the current one

        Returns:
            Outcome of the due fire if one was handled, else None

        Raises:
            SchedulerConfigurationError: If the version does not increase
        """
        with self._lock:
            if task_set.version <= self._task_set.version:
                raise SchedulerConfigurationError(
                    f"Task set version must increase: current={self._task_set.version}, "
                    f"new={task_set.version}. Use TaskSet.replace() or TaskRegistry.snapshot()."
                )

            previous_version = self._task_set.version
            self._task_set = task_set
            self.logger.info(
                "Task set replaced",
                previous_version=previous_version,
                version=task_set.version,
                tasks=task_set.names(),
            )

            now = ensure_utc(self.clock())
            try:
                pending = self._load_or_discard()
                if pending is not None and pending.is_due(now, self.early_fire_tolerance):
                    outcome = self._consume(pending, now, missed=False)
                else:
                    self._reset(now)
                    outcome = None
            except Exception as e:
                self._needs_recompute = True
                self.logger.error("Rescheduling after replace failed", error=str(e), exc_info=True)
                return FireOutcome.ERROR
            self._needs_recompute = False
            return outcome

    def get_status(self) -> SchedulerStatus:
        """Return a snapshot of scheduler state for monitoring."""
        with self._lock:
            try:
                pending = self._repository.load()
            except InconsistentPersistedStateError:
                pending = None
            alarm_at = self.store.get_alarm()
            return {
                "name": self.name,
                "state": (SchedulerState.ARMED if pending else SchedulerState.IDLE).value,
                "pending_task": pending.task_name if pending else None,
                "pending_pattern": pending.pattern if pending else None,
                "fire_at": to_iso(pending.fire_at) if pending else None,
                "alarm_at": to_iso(alarm_at) if alarm_at else None,
                "task_set_version": self._task_set.version,
                "tasks": self._task_set.names(),
                "dispatcher_running": self._dispatcher.is_running(),
                "needs_recompute": self._needs_recompute,
            }

    def check_consistency(self) -> list[str]:
        """
        Check that the alarm and the pending-fire record agree.

        Returns:
            Violations found (empty list when consistent)
        """
        with self._lock:
            problems: list[str] = []
            alarm_at = self.store.get_alarm()

            try:
                pending = self._repository.load()
            except InconsistentPersistedStateError as e:
                return [str(e)]

            if pending is None:
                if alarm_at is not None:
                    problems.append(f"alarm armed for {to_iso(alarm_at)} without a pending fire")
            else:
                if alarm_at is None:
                    problems.append(f"pending fire for '{pending.task_name}' but no alarm armed")
                elif alarm_at != pending.fire_at:
                    problems.append(
                        f"alarm at {to_iso(alarm_at)} does not match pending fire "
                        f"at {to_iso(pending.fire_at)}"
                    )
                if not pending.matches(self._task_set):
                    problems.append(
                        f"pending fire for '{pending.task_name}' uses pattern "
                        f"'{pending.pattern}' not in the live task set"
                    )

            if self._alarm.armed_at != alarm_at:
                problems.append("alarm slot out of sync with the store")

            return problems

    # ------------------------------------------------------------------------
    # Internal Methods
    # ------------------------------------------------------------------------

    def _reconcile_on_startup(self) -> None:
        """Settle whatever was pending before the restart, then arm the next fire."""
        try:
            now = ensure_utc(self.clock())
            alarm_at = self._alarm.sync()
            pending = self._load_or_discard()

            if pending is None:
                if alarm_at is not None:
                    self.logger.warning(
                        "Alarm armed without pending fire, discarding",
                        alarm_at=to_iso(alarm_at),
                    )
                self._reset(now)
                return

            if alarm_at != pending.fire_at:
                self.logger.warning(
                    "Alarm does not match pending fire, trusting the record",
                    alarm_at=to_iso(alarm_at) if alarm_at else None,
                    fire_at=to_iso(pending.fire_at),
                )

            if pending.is_due(now):
                self._consume(pending, now, missed=True)
            else:
                self._reset(now)
        except Exception as e:
            self._needs_recompute = True
            self.logger.error("Failed to set up schedule", error=str(e), exc_info=True)

    def _handle_alarm(self, now: datetime) -> FireOutcome:
        try:
            pending = self._repository.load()
        except InconsistentPersistedStateError as e:
            self.logger.warning("Inconsistent pending fire, resetting alarms", error=str(e))
            self._reset(now)
            return FireOutcome.INCONSISTENT

        if pending is None:
            # Already consumed (duplicate delivery) or stray alarm
            self.logger.debug("Alarm delivered with no pending fire")
            self._reset(now)
            return FireOutcome.NO_PENDING

        if not pending.is_due(now, self.early_fire_tolerance):
            self._repair_alarm(pending)
            return FireOutcome.NOT_DUE

        return self._consume(pending, now, missed=False)

    def _consume(self, pending: PendingFire, now: datetime, missed: bool) -> FireOutcome:
        """Validate and run a due pending fire; always clears and re-arms afterwards."""
        outcome = FireOutcome.STALE
        try:
            if not pending.matches(self._task_set):
                self.logger.warning(
                    "Stale schedule entry, skipping execution",
                    task=pending.task_name,
                    recorded_pattern=pending.pattern,
                    live_pattern=self._task_set.pattern_for(pending.task_name),
                )
            elif missed and not self._missed_fire_handler.should_execute(pending, now):
                outcome = FireOutcome.MISSED_SKIPPED
            else:
                outcome = self._run_task(pending, missed)
        finally:
            # Early delivery must not select the consumed occurrence again
            self._reset(max(ensure_utc(self.clock()), pending.fire_at))
        return outcome

    def _run_task(self, pending: PendingFire, missed: bool) -> FireOutcome:
        task = self._task_set.get(pending.task_name)
        if task is None:
            return FireOutcome.STALE

        self.logger.info(
            "Running missed task" if missed else "Running task",
            task=task.name,
            pattern=task.pattern,
            scheduled_for=to_iso(pending.fire_at),
        )
        try:
            self._executor.execute(task)
        except Exception as e:
            self.logger.error("Task failed", task=task.name, error=str(e), exc_info=True)
            self._invoke_callback(self.on_failure, task.name, e)
            return FireOutcome.FAILED

        self._invoke_callback(self.on_success, task.name)
        return FireOutcome.EXECUTED

    def _recompute_needed(self) -> bool:
        return self._needs_recompute

    def _invoke_callback(self, callback: Callable[..., Any] | None, *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            self.logger.error("Callback failed", error=str(e), exc_info=True)

    def _load_or_discard(self) -> PendingFire | None:
        """Load the pending fire, treating a partial record as absent."""
        try:
            return self._repository.load()
        except InconsistentPersistedStateError as e:
            self.logger.warning(
                "Inconsistent pending fire, discarding",
                error=str(e),
                present_keys=e.present_keys,
            )
            return None

    def _clear(self) -> None:
        """Delete the record first, then the alarm."""
        self._repository.clear()
        self._alarm.disarm()

    def _reset(self, now: datetime) -> PendingFire | None:
        """Clear any pending fire and arm the next one (IDLE if none)."""
        self._clear()
        candidate = self._selector.select(self._task_set, now)
        if candidate is None:
            self.logger.info("No schedulable tasks, scheduler idle")
            return None

        pending = PendingFire.from_candidate(candidate)
        # Record first: a crash before arming leaves a record that startup honours
        self._repository.save(pending)
        self._alarm.arm(pending.fire_at)

        self.logger.info(
            "Next task scheduled",
            task=pending.task_name,
            pattern=pending.pattern,
            fire_at=to_iso(pending.fire_at),
        )
        return pending

    def _repair_alarm(self, pending: PendingFire) -> None:
        """Re-arm the alarm for the recorded time if the two disagree."""
        alarm_at = self._alarm.sync()
        if alarm_at == pending.fire_at:
            return
        self.logger.warning(
            "Alarm does not match pending fire, re-arming",
            alarm_at=to_iso(alarm_at) if alarm_at else None,
            fire_at=to_iso(pending.fire_at),
        )
        self._alarm.disarm()
        self._alarm.arm(pending.fire_at)
