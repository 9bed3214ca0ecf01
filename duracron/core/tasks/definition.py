"""Task definition model."""

import inspect
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskDefinition(BaseModel):
    """
    A named recurring task: cron pattern plus the handler it dispatches to.

    Handlers are resolved when the definition is built, so a task can never
    reference a name without a callable behind it.

    Example:
        >>> TaskDefinition(name="check-usage", pattern="* * * * *", handler=check_usage)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1, max_length=255)
    pattern: str
    handler: Callable[[], Any]
    timeout_seconds: float | None = Field(default=None, gt=0)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task name cannot be blank")
        if value != value.strip():
            raise ValueError(f"Task name '{value}' has leading or trailing whitespace")
        return value

    @property
    def is_async(self) -> bool:
        """True if the handler is a coroutine function."""
        return inspect.iscoroutinefunction(self.handler)
