"""Adapter pattern implementations for durable timer stores."""

from duracron.adapters.base import TimerStoreAdapter

__all__ = ["TimerStoreAdapter"]
