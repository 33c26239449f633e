"""ReminderService: keeps stored reminders and their alerts in step.

The Store and the Notifier share nothing but the reminder id. This module
drives both for every reminder change:

- add:    insert, then schedule. If scheduling fails the insert is undone.
- edit:   update, cancel the old alert, schedule the new time.
- done:   update, cancel (or re-schedule when un-done).
- remove: delete, cancel.
"""

from datetime import datetime
from typing import Optional

from errors import SchedulingError
from logger_config import setup_logger
from notifier import Notifier
from schemas import Mood, MoodEntry, Reminder
from store import Store

logger = setup_logger(__name__, 'service.log')


def notification_body(reminder: Reminder) -> str:
    """Alert text: the note, or the category when there is no note."""
    return reminder.note or reminder.category


class ReminderService:
    """Composes a Store and a Notifier. Both are owned by the caller."""

    def __init__(self, store: Store, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def _schedule(self, reminder: Reminder) -> None:
        self.notifier.schedule(
            reminder.id,
            reminder.title,
            notification_body(reminder),
            reminder.date_time
        )

    def add_reminder(self, reminder: Reminder) -> Reminder:
        """Persist a new reminder and schedule its alert.

        Returns:
            Reminder: the stored reminder with its assigned id

        Raises:
            StorageError: insert failed (nothing was scheduled)
            SchedulingError: alert could not be scheduled (insert rolled back)
        """
        reminder_id = self.store.insert_reminder(reminder)
        stored = reminder.model_copy(update={"id": reminder_id})

        if stored.done:
            return stored

        try:
            self._schedule(stored)
        except SchedulingError:
            logger.error(f"Scheduling failed for reminder {reminder_id}, removing it from the store")
            self.store.delete_reminder(reminder_id)
            raise
        return stored

    def edit_reminder(self, reminder: Reminder) -> int:
        """Save every field of an existing reminder and move its alert.

        Returns:
            int: rows updated (0 when the id does not exist)

        Raises:
            SchedulingError: the row was updated but has no alert
        """
        count = self.store.update_reminder(reminder)
        self.notifier.cancel(reminder.id)
        if count and not reminder.done:
            self._schedule(reminder)
        return count

    def set_done(self, reminder_id: int, done: bool = True) -> Optional[Reminder]:
        """Mark a reminder done (cancels its alert) or not done (re-schedules)."""
        reminder = self.store.get_reminder(reminder_id)
        if reminder is None:
            return None

        updated = reminder.model_copy(update={"done": done})
        self.edit_reminder(updated)
        return updated

    def remove_reminder(self, reminder_id: int) -> int:
        """Delete a reminder and cancel its alert. Returns rows removed."""
        count = self.store.delete_reminder(reminder_id)
        self.notifier.cancel(reminder_id)
        return count

    def log_mood(self, mood: Mood, note: Optional[str] = None, date: Optional[datetime] = None) -> MoodEntry:
        """Validate and store a mood entry. Returns it with its id."""
        fields = {"mood": mood, "note": note}
        if date is not None:
            fields["date"] = date
        entry = MoodEntry(**fields)
        mood_id = self.store.insert_mood(entry)
        return entry.model_copy(update={"id": mood_id})

    def restore_schedules(self, now: Optional[datetime] = None) -> int:
        """Schedule an alert for every open reminder still in the future.

        Used at startup: pending alerts are held in memory and do not
        survive a restart. Reminders whose time has passed are left alone.

        Returns:
            int: number of alerts scheduled
        """
        now = now or datetime.now(self.notifier.tz)
        scheduled = 0
        for reminder in self.store.list_open_reminders():
            if self.notifier.localize(reminder.date_time) <= self.notifier.localize(now):
                continue
            self._schedule(reminder)
            scheduled += 1
        logger.info(f"Restored {scheduled} pending alert(s)")
        return scheduled
