"""Type definitions using TypedDict for internal data structures."""

from typing import TypedDict


class SchedulerStatus(TypedDict):
    """Snapshot returned by DurableCronScheduler.get_status()."""

    name: str
    state: str
    pending_task: str | None
    pending_pattern: str | None
    fire_at: str | None
    alarm_at: str | None
    task_set_version: int
    tasks: list[str]
    dispatcher_running: bool
    needs_recompute: bool


class FetchResponse(TypedDict):
    """Acknowledgment returned by the inbound entry point."""

    status: int
    body: str
    scheduler: str
