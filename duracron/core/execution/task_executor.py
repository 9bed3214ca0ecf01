"""Task handler execution with sync/async dispatch and timeout."""

import asyncio
import threading
from typing import Any

from duracron.core.common.exceptions import TaskTimeoutError
from duracron.core.tasks.definition import TaskDefinition
from duracron.utils.logging import ContextLogger


class TaskExecutor:
    """
    Runs task handlers.

    Separated from the scheduler to isolate "how to invoke a handler" from
    "how to manage the pending fire".

    Coroutines run on a shared event loop owned by a background thread, so a
    fire can be handled from any thread, including one already running a loop.
    """

    def __init__(self, logger: ContextLogger) -> None:
        self.logger = logger

        # Shared event loop for async handlers (lazy-initialized)
        self._async_loop: asyncio.AbstractEventLoop | None = None
        self._async_thread: threading.Thread | None = None
        self._async_lock = threading.Lock()

    def execute(self, task: TaskDefinition) -> None:
        """
        Run a task's handler to completion.

        Raises:
            TaskTimeoutError: If the handler exceeds task.timeout_seconds
            Exception: Whatever the handler raises
        """
        if task.is_async:
            loop = self.ensure_async_loop()
            asyncio.run_coroutine_threadsafe(self._execute_async(task), loop).result()
        else:
            self._execute_sync(task)

    def _execute_sync(self, task: TaskDefinition) -> None:
        timeout_seconds = task.timeout_seconds
        if not timeout_seconds:
            task.handler()
            return

        result: dict[str, Any] = {"completed": False, "error": None}

        def _run_with_result() -> None:
            try:
                task.handler()
                result["completed"] = True
            except Exception as e:
                result["error"] = e

        thread = threading.Thread(
            target=_run_with_result,
            daemon=True,
            name=f"duracron-task-{task.name}",
        )
        thread.start()
        thread.join(timeout=timeout_seconds)

        if thread.is_alive():
            self.logger.warning(
                "Task timeout - worker thread left running",
                task=task.name,
                timeout_seconds=timeout_seconds,
                thread_name=thread.name,
            )
            raise TaskTimeoutError(
                f"Task '{task.name}' exceeded timeout of {timeout_seconds}s. "
                "The worker thread cannot be forcefully stopped and may continue running."
            )

        error = result["error"]
        if error:
            raise error

        if not result["completed"]:
            raise RuntimeError(f"Task '{task.name}' did not complete")

    async def _execute_async(self, task: TaskDefinition) -> None:
        coro = task.handler()
        if not task.timeout_seconds:
            await coro
            return

        try:
            await asyncio.wait_for(coro, timeout=task.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise TaskTimeoutError(
                f"Task '{task.name}' exceeded timeout of {task.timeout_seconds}s."
            ) from e

    def ensure_async_loop(self) -> asyncio.AbstractEventLoop:
        """Get or create the shared event loop for async handlers (thread-safe)."""
        if self._async_loop is None or self._async_loop.is_closed():
            with self._async_lock:
                if self._async_loop is None or self._async_loop.is_closed():
                    self._async_loop = asyncio.new_event_loop()
                    self._async_thread = threading.Thread(
                        target=self._async_loop.run_forever,
                        daemon=True,
                        name="duracron-async",
                    )
                    self._async_thread.start()
        return self._async_loop

    def is_async_loop_running(self) -> bool:
        return self._async_thread is not None and self._async_thread.is_alive()

    def shutdown_async(self) -> None:
        """Stop the shared event loop (it is recreated on the next async task)."""
        with self._async_lock:
            loop, thread = self._async_loop, self._async_thread
            self._async_loop = None
            self._async_thread = None

        if loop is None or loop.is_closed():
            return

        loop.call_soon_threadsafe(loop.stop)
        if thread:
            thread.join(timeout=5)
            if thread.is_alive():
                self.logger.warning("Async loop did not stop in time", thread_name=thread.name)
                return
        loop.close()
