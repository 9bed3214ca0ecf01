"""Startup reconciliation against persisted state."""

import logging
from unittest.mock import Mock

import pytest
from helpers import dt, write_pending

from duracron import (
    DurableCronScheduler,
    InMemoryTimerStore,
    MissedFirePolicy,
    PendingFire,
    SchedulerConfigurationError,
    SchedulerState,
    StoreConnectionError,
    TaskSet,
)
from duracron.core.pending import NEXT_TASK_KEY, PendingFireRepository


class TestFreshStart:
    """Empty store."""

    def test_arms_earliest_task(self, make_scheduler, store):
        scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert scheduler.state == SchedulerState.ARMED
        assert scheduler.get_pending() == PendingFire("A", "*/5 * * * *", dt(2025, 6, 15, 10, 35))
        assert store.get_alarm() == dt(2025, 6, 15, 10, 35)
        assert scheduler.check_consistency() == []

    def test_picks_earliest_of_several(self, make_scheduler):
        scheduler = make_scheduler(
            {"check-usage": "0 * * * *", "clean-mail": "0 0 * * *", "bill": "0 0 1 * *"}
        )

        pending = scheduler.get_pending()
        assert pending.task_name == "check-usage"
        assert pending.fire_at == dt(2025, 6, 15, 11, 0)

    def test_never_occurring_pattern_excluded(self, make_scheduler, recorder):
        scheduler = make_scheduler({"A": "0 0 31 2 *", "B": "0 0 * * *"})

        assert scheduler.get_pending() == PendingFire("B", "0 0 * * *", dt(2025, 6, 16, 0, 0))
        assert scheduler.check_consistency() == []

    def test_empty_task_set_stays_idle(self, make_scheduler, store):
        scheduler = make_scheduler({})

        assert scheduler.state == SchedulerState.IDLE
        assert store.get_alarm() is None
        assert store.keys() == []
        assert scheduler.check_consistency() == []

    def test_all_invalid_patterns_stay_idle(self, make_scheduler, store, recorder):
        scheduler = make_scheduler({"A": "bad(", "B": "* * *"})

        assert scheduler.state == SchedulerState.IDLE
        assert store.get_alarm() is None
        assert recorder.calls == []

    def test_invalid_pattern_excluded(self, make_scheduler):
        scheduler = make_scheduler({"A": "bad(", "B": "0 0 * * *"})
        assert scheduler.get_pending().task_name == "B"


class TestMissedFire:
    """A due record found at startup."""

    def test_missed_fire_runs_once_then_rearms(self, make_scheduler, store, recorder):
        """Past fire time, unchanged pattern: run once late, arm the next occurrence."""
        write_pending(store, "clean-mail", "0 0 * * *", dt(2025, 6, 15, 0, 0))

        scheduler = make_scheduler({"clean-mail": "0 0 * * *"})

        assert recorder.calls == ["clean-mail"]
        assert scheduler.get_pending() == PendingFire(
            "clean-mail", "0 0 * * *", dt(2025, 6, 16, 0, 0)
        )
        assert store.get_alarm() == dt(2025, 6, 16, 0, 0)
        assert scheduler.check_consistency() == []

    def test_missed_fire_not_repeated_on_next_restart(self, make_scheduler, store, recorder):
        write_pending(store, "clean-mail", "0 0 * * *", dt(2025, 6, 15, 0, 0))

        make_scheduler({"clean-mail": "0 0 * * *"})
        make_scheduler({"clean-mail": "0 0 * * *"})

        assert recorder.count("clean-mail") == 1

    def test_many_missed_occurrences_run_once(self, make_scheduler, store, recorder):
        """Down for hours on a per-minute task: still one late run."""
        write_pending(store, "check-usage", "* * * * *", dt(2025, 6, 15, 6, 0))

        scheduler = make_scheduler({"check-usage": "* * * * *"})

        assert recorder.count("check-usage") == 1
        assert scheduler.get_pending().fire_at == dt(2025, 6, 15, 10, 33)

    def test_skip_policy_logs_only(self, make_scheduler, store, recorder, caplog):
        write_pending(store, "clean-mail", "0 0 * * *", dt(2025, 6, 15, 0, 0))

        with caplog.at_level(logging.WARNING, logger="duracron"):
            scheduler = make_scheduler(
                {"clean-mail": "0 0 * * *"}, missed_fire_policy=MissedFirePolicy.SKIP
            )

        assert recorder.calls == []
        assert "Missed fire detected" in caplog.text
        assert scheduler.get_pending().fire_at == dt(2025, 6, 16, 0, 0)

    def test_record_without_alarm_still_honoured(self, make_scheduler, store, recorder):
        """The record is the source of truth; a missing alarm does not hide a missed fire."""
        PendingFireRepository(store).save(
            PendingFire("clean-mail", "0 0 * * *", dt(2025, 6, 15, 0, 0))
        )

        scheduler = make_scheduler({"clean-mail": "0 0 * * *"})

        assert recorder.calls == ["clean-mail"]
        assert scheduler.check_consistency() == []


class TestStaleRecord:
    def test_changed_pattern_not_executed(self, make_scheduler, store, recorder, caplog):
        write_pending(store, "A", "0 0 * * *", dt(2025, 6, 15, 0, 0))

        with caplog.at_level(logging.WARNING, logger="duracron"):
            scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert recorder.calls == []
        assert "Stale schedule entry" in caplog.text
        assert scheduler.get_pending() == PendingFire("A", "*/5 * * * *", dt(2025, 6, 15, 10, 35))

    def test_removed_task_not_executed(self, make_scheduler, store, recorder):
        write_pending(store, "gone", "0 0 * * *", dt(2025, 6, 15, 0, 0))

        scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert recorder.calls == []
        assert scheduler.get_pending().task_name == "A"


class TestFutureRecord:
    def test_future_record_rearmed_without_running(self, make_scheduler, store, recorder):
        write_pending(store, "A", "*/5 * * * *", dt(2025, 6, 15, 10, 35))

        scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert recorder.calls == []
        assert scheduler.get_pending().fire_at == dt(2025, 6, 15, 10, 35)
        assert store.get_alarm() == dt(2025, 6, 15, 10, 35)

    def test_future_record_recomputed_for_new_task_set(self, make_scheduler, store):
        write_pending(store, "clean-mail", "0 0 * * *", dt(2025, 6, 16, 0, 0))

        scheduler = make_scheduler({"clean-mail": "0 0 * * *", "check-usage": "* * * * *"})

        assert scheduler.get_pending().task_name == "check-usage"
        assert store.get_alarm() == dt(2025, 6, 15, 10, 33)


class TestInconsistentState:
    def test_alarm_without_record_discarded(self, make_scheduler, store, recorder):
        store.set_alarm(dt(2025, 6, 15, 9, 0))

        scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert recorder.calls == []
        assert store.get_alarm() == dt(2025, 6, 15, 10, 35)
        assert scheduler.check_consistency() == []

    def test_alarm_without_record_and_no_tasks(self, make_scheduler, store):
        store.set_alarm(dt(2025, 6, 15, 9, 0))

        make_scheduler({})

        assert store.get_alarm() is None

    def test_partial_record_treated_as_absent(self, make_scheduler, store, recorder, caplog):
        store.put(NEXT_TASK_KEY, "ghost")
        store.set_alarm(dt(2025, 6, 15, 9, 0))

        with caplog.at_level(logging.WARNING, logger="duracron"):
            scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert recorder.calls == []
        assert "Inconsistent pending fire" in caplog.text
        assert store.get(NEXT_TASK_KEY) == "A"
        assert scheduler.check_consistency() == []


class TestStartupFailures:
    def test_store_errors_logged_not_raised(self, clock, recorder, caplog):
        store = InMemoryTimerStore()
        store.get_many = Mock(side_effect=RuntimeError("disk on fire"))
        tasks = TaskSet.from_mapping({"A": "*/5 * * * *"}, {"A": recorder.handler("A")})

        with caplog.at_level(logging.ERROR, logger="duracron"):
            DurableCronScheduler(tasks, store, clock=clock)

        assert "Failed to set up schedule" in caplog.text

    def test_transient_store_errors_retried(self, make_scheduler, store):
        original = store.put_many
        attempts = []

        def flaky_put_many(entries):
            attempts.append(entries)
            if len(attempts) == 1:
                raise StoreConnectionError("blip")
            original(entries)

        store.put_many = flaky_put_many

        scheduler = make_scheduler({"A": "*/5 * * * *"})

        assert len(attempts) == 2
        assert scheduler.get_pending().fire_at == dt(2025, 6, 15, 10, 35)


class TestConstructorValidation:
    def test_rejects_plain_mapping(self, store):
        with pytest.raises(SchedulerConfigurationError, match="TaskSet"):
            DurableCronScheduler({"A": "* * * * *"}, store)

    @pytest.mark.parametrize(
        "options",
        [
            {"name": ""},
            {"poll_interval_seconds": 0.01},
            {"early_fire_tolerance_seconds": -1},
            {"early_fire_tolerance_seconds": 61},
            {"timezone": "Not/AZone"},
        ],
    )
    def test_invalid_options(self, store, options):
        with pytest.raises(ValueError):
            DurableCronScheduler(TaskSet(), store, **options)

    def test_unknown_policy(self, store):
        with pytest.raises(ValueError):
            DurableCronScheduler(TaskSet(), store, missed_fire_policy="run_all")
