"""CRUD operations for Health Reminders.

This module provides database operations for reminders and mood entries,
plus the mapping between the typed records and their table rows.
IMPORTANT: All datetime parameters and return values are datetime objects, NOT strings.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from database import MoodRow, ReminderRow
from schemas import Mood, MoodEntry, Reminder


def to_storage_row(reminder: Reminder) -> ReminderRow:
    """Map a Reminder to a table row. An unset id stays unset."""
    return ReminderRow(
        id=reminder.id,
        title=reminder.title,
        note=reminder.note,
        date_time=reminder.date_time,
        category=reminder.category,
        done=reminder.done
    )


def from_storage_row(row: ReminderRow) -> Reminder:
    """Map a table row back to a Reminder."""
    return Reminder.model_validate(row)


def mood_to_storage_row(entry: MoodEntry) -> MoodRow:
    """Map a MoodEntry to a table row."""
    return MoodRow(
        id=entry.id,
        mood=entry.mood.value,
        note=entry.note,
        date=entry.date
    )


def mood_from_storage_row(row: MoodRow) -> MoodEntry:
    """Map a table row back to a MoodEntry."""
    return MoodEntry.model_validate(row)


def create_reminder(db: Session, reminder: Reminder) -> int:
    """Insert a reminder.

    Args:
        db: Database session
        reminder: Reminder without an id

    Returns:
        int: The id assigned by the database

    Raises:
        ValueError: reminder already has an id
        SQLAlchemyError: On database errors
    """
    if reminder.id is not None:
        raise ValueError(f"Reminder already persisted with id {reminder.id}")

    row = to_storage_row(reminder)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row.id


def get_reminder(db: Session, reminder_id: int) -> Optional[Reminder]:
    """Get a specific reminder by ID, or None if it does not exist."""
    row = db.get(ReminderRow, reminder_id)
    return from_storage_row(row) if row else None


def get_reminders(db: Session) -> List[Reminder]:
    """Get all reminders, earliest due first."""
    rows = db.query(ReminderRow).order_by(ReminderRow.date_time.asc(), ReminderRow.id.asc()).all()
    return [from_storage_row(row) for row in rows]


def get_open_reminders(db: Session) -> List[Reminder]:
    """Get reminders not yet marked done, earliest due first."""
    rows = db.query(ReminderRow).filter(
        ReminderRow.done.is_(False)
    ).order_by(ReminderRow.date_time.asc(), ReminderRow.id.asc()).all()
    return [from_storage_row(row) for row in rows]


def update_reminder(db: Session, reminder: Reminder) -> int:
    """Overwrite every field of the row matching reminder.id.

    Returns:
        int: Number of rows changed (0 if the id does not exist)

    Raises:
        ValueError: reminder has no id
        SQLAlchemyError: On database errors
    """
    if reminder.id is None:
        raise ValueError("Cannot update a reminder that has no id")

    count = db.query(ReminderRow).filter(ReminderRow.id == reminder.id).update(
        {
            ReminderRow.title: reminder.title,
            ReminderRow.note: reminder.note,
            ReminderRow.date_time: reminder.date_time,
            ReminderRow.category: reminder.category,
            ReminderRow.done: reminder.done,
        },
        synchronize_session=False
    )
    db.commit()
    return count


def delete_reminder(db: Session, reminder_id: int) -> int:
    """Delete a reminder. Returns the number of rows removed (0 or 1)."""
    count = db.query(ReminderRow).filter(ReminderRow.id == reminder_id).delete(
        synchronize_session=False
    )
    db.commit()
    return count


def create_mood(db: Session, entry: MoodEntry) -> int:
    """Insert a mood entry and return its new id.

    Raises:
        ValueError: entry already has an id
        SQLAlchemyError: On database errors
    """
    if entry.id is not None:
        raise ValueError(f"Mood entry already persisted with id {entry.id}")

    row = mood_to_storage_row(entry)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row.id


def get_moods(db: Session, since: Optional[datetime] = None) -> List[MoodEntry]:
    """Get mood entries, newest first.

    Args:
        db: Database session
        since: Optional lower bound (inclusive) on the entry date
    """
    query = db.query(MoodRow)
    if since is not None:
        query = query.filter(MoodRow.date >= since)
    rows = query.order_by(MoodRow.date.desc(), MoodRow.id.desc()).all()
    return [mood_from_storage_row(row) for row in rows]


def get_mood_counts(db: Session, since: datetime) -> Dict[Mood, int]:
    """Count mood entries per mood since a date. Every mood is present."""
    counts = {mood: 0 for mood in Mood}
    rows = db.query(MoodRow.mood, func.count(MoodRow.id)).filter(
        MoodRow.date >= since
    ).group_by(MoodRow.mood).all()
    for mood, count in rows:
        counts[Mood(mood)] = count
    return counts
