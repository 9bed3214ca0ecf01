"""Task execution and alarm delivery."""

from duracron.core.execution.alarm_loop import AlarmDispatcher
from duracron.core.execution.task_executor import TaskExecutor

__all__ = ["AlarmDispatcher", "TaskExecutor"]
