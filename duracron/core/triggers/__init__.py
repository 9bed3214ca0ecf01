"""Recurrence evaluators."""

from duracron.core.triggers.base import RecurrenceEvaluator, RecurrenceExpression
from duracron.core.triggers.cron import CronEvaluator, CronExpression

__all__ = [
    "RecurrenceEvaluator",
    "RecurrenceExpression",
    "CronEvaluator",
    "CronExpression",
]
