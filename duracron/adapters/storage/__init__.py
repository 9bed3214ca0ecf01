"""Built-in timer stores."""

from duracron.adapters.storage.memory import InMemoryTimerStore

__all__ = ["InMemoryTimerStore"]
