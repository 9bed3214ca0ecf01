"""Base classes for recurrence evaluation."""

from abc import ABC, abstractmethod
from datetime import datetime


class RecurrenceExpression(ABC):
    """A parsed recurrence pattern."""

    pattern: str

    @abstractmethod
    def next(self, after: datetime) -> datetime:
        """
        Calculate the next occurrence strictly after a reference time.

        Args:
            after: Reference time (timezone-aware)

        Returns:
            Next occurrence in UTC

        Raises:
            InvalidPatternError: If the pattern has no next occurrence
        """
        pass


class RecurrenceEvaluator(ABC):
    """Abstract base class for recurrence pattern parsers."""

    @abstractmethod
    def parse(self, pattern: str) -> RecurrenceExpression:
        """
        Parse a recurrence pattern.

        Args:
            pattern: Pattern string (e.g., "*/5 * * * *")

        Returns:
            Parsed expression

        Raises:
            InvalidPatternError: If the pattern is malformed
        """
        pass

    def next_occurrence(self, pattern: str, after: datetime) -> datetime:
        """Parse a pattern and return its next occurrence after a reference time."""
        return self.parse(pattern).next(after)
