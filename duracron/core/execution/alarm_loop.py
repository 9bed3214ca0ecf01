"""Background delivery of due alarms."""

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from duracron.adapters.base import TimerStoreAdapter
from duracron.utils.logging import ContextLogger
from duracron.utils.time import ensure_utc, utc_now


class AlarmDispatcher:
    """
    Polls the store's alarm slot from a daemon thread and invokes the callback
    once the armed instant is reached.

    Delivery is at-least-once: if the callback fails, the alarm stays armed
    and is delivered again on the next poll. When a failure also cleared the
    alarm, the redeliver hook reports it and the callback runs on every poll
    until the hook returns False.
    """

    MIN_POLL_INTERVAL = 0.05

    def __init__(
        self,
        store: TimerStoreAdapter,
        on_alarm: Callable[[], Any],
        logger: ContextLogger,
        poll_interval_seconds: float = 1.0,
        clock: Callable[[], datetime] = utc_now,
        name: str = "default",
        redeliver: Callable[[], bool] | None = None,
    ) -> None:
        if poll_interval_seconds < self.MIN_POLL_INTERVAL:
            raise ValueError(f"poll_interval_seconds must be >= {self.MIN_POLL_INTERVAL}")

        self.store = store
        self.on_alarm = on_alarm
        self.logger = logger
        self.poll_interval_seconds = poll_interval_seconds
        self.clock = clock
        self.name = name
        self.redeliver = redeliver

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling in a daemon thread (non-blocking)."""
        if self.is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name=f"duracron-alarm-{self.name}",
        )
        self._thread.start()

    def _run_loop(self) -> None:
        while not self._stop_event.wait(timeout=self.poll_interval_seconds):
            self.tick()

    def tick(self) -> bool:
        """
        Check the alarm once and deliver it if due.

        Returns:
            True if the callback was invoked
        """
        try:
            alarm_at = self.store.get_alarm()
            due = alarm_at is not None and ensure_utc(alarm_at) <= ensure_utc(self.clock())
            if not due and not (self.redeliver and self.redeliver()):
                return False
            self.on_alarm()
            return True
        except Exception as e:
            self.logger.error("Alarm delivery failed", error=str(e), exc_info=True)
            return False

    def stop(self, wait: bool = True) -> None:
        """Stop polling."""
        self._stop_event.set()
        if wait and self._thread is not None:
            self._thread.join(timeout=5)
        self._thread = None
