"""The scheduler's single alarm slot."""

from datetime import datetime

from duracron.adapters.base import TimerStoreAdapter
from duracron.core.common.exceptions import AlarmAlreadyArmedError
from duracron.utils.retry import store_retry
from duracron.utils.time import ensure_utc, to_iso


class AlarmSlot:
    """
    Owned view of the store's single alarm.

    arm() and disarm() are the only mutators, and arm() refuses to overwrite an
    armed slot, so at most one timer can ever be set.
    """

    def __init__(self, store: TimerStoreAdapter) -> None:
        self.store = store
        self._armed_at: datetime | None = None

    @property
    def armed_at(self) -> datetime | None:
        return self._armed_at

    @property
    def is_armed(self) -> bool:
        return self._armed_at is not None

    @store_retry
    def sync(self) -> datetime | None:
        """Load the alarm currently armed in the store."""
        self._armed_at = self.store.get_alarm()
        return self._armed_at

    @store_retry
    def _set(self, when: datetime) -> None:
        self.store.set_alarm(when)

    @store_retry
    def _delete(self) -> bool:
        return self.store.delete_alarm()

    def arm(self, when: datetime) -> None:
        """
        Arm the slot.

        Raises:
            AlarmAlreadyArmedError: If the slot is already armed
        """
        if self._armed_at is not None:
            raise AlarmAlreadyArmedError(
                f"Alarm already armed for {to_iso(self._armed_at)}; "
                "disarm it before arming a new one."
            )
        when = ensure_utc(when)
        self._set(when)
        self._armed_at = when

    def disarm(self) -> bool:
        """
        Disarm the slot (no-op if nothing is armed in the store).

        Returns:
            True if the store had an alarm armed
        """
        was_armed = self._delete()
        self._armed_at = None
        return was_armed
