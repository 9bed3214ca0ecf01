"""Cron recurrence evaluator backed by croniter."""

from datetime import datetime

from croniter import CroniterBadDateError, croniter

from duracron.core.common.exceptions import InvalidPatternError
from duracron.core.triggers.base import RecurrenceEvaluator, RecurrenceExpression
from duracron.utils.time import UTC, ensure_utc, get_timezone


class CronExpression(RecurrenceExpression):
    """A validated cron pattern bound to an evaluation timezone."""

    def __init__(self, pattern: str, timezone: str = "UTC") -> None:
        self.pattern = pattern
        self.timezone = timezone
        self._tz = get_timezone(timezone)

    def next(self, after: datetime) -> datetime:
        """
        Calculate next occurrence strictly after *after*.

        Args:
            after: Reference time (naive values are treated as UTC)

        Returns:
            Next occurrence in UTC

        Raises:
            InvalidPatternError: If the pattern parses but never matches a date
                (e.g. "0 0 31 2 *")
        """
        current = ensure_utc(after).astimezone(self._tz)

        # croniter walks fields in the local timezone (DST aware)
        try:
            next_time = croniter(self.pattern, current).get_next(datetime)
        except CroniterBadDateError as e:
            raise InvalidPatternError(self.pattern, f"pattern never occurs: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidPatternError(self.pattern, str(e)) from e

        return next_time.astimezone(UTC)

    def __repr__(self) -> str:
        return f"CronExpression({self.pattern!r}, timezone={self.timezone!r})"


class CronEvaluator(RecurrenceEvaluator):
    """
    Parses standard cron patterns.

    Accepts what croniter accepts: five fields (minute hour day month
    day_of_week), an optional trailing seconds field, and aliases such as
    "@daily".
    """

    def __init__(self, timezone: str = "UTC") -> None:
        """
        Initialize evaluator.

        Args:
            timezone: IANA timezone patterns are evaluated in

        Raises:
            ValueError: If timezone is invalid
        """
        get_timezone(timezone)
        self.timezone = timezone

    def parse(self, pattern: str) -> CronExpression:
        """
        Parse and validate a cron pattern.

        Raises:
            InvalidPatternError: If the pattern is empty or malformed
        """
        if not isinstance(pattern, str) or not pattern.strip():
            raise InvalidPatternError(str(pattern), "pattern is empty")

        try:
            # Construction validates every field
            croniter(pattern)
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidPatternError(pattern, str(e)) from e

        return CronExpression(pattern, self.timezone)
