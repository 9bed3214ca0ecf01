"""Task definitions and task sets."""

from duracron.core.tasks.definition import TaskDefinition
from duracron.core.tasks.registry import TaskRegistry, TaskSet

__all__ = ["TaskDefinition", "TaskSet", "TaskRegistry"]
