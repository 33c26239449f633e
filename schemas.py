"""Pydantic schemas for Health Reminders.

Typed records passed between the caller, the Store and the Notifier.
Building a record validates it: an empty title or an unknown mood raises
pydantic's ValidationError before anything reaches the database.
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORIES = ("Academics", "Health", "Personal", "General")
"""Suggested reminder categories. The store accepts any label."""


class Mood(str, enum.Enum):
    """Moods a user can log"""
    HAPPY = "happy"
    SAD = "sad"
    STRESSED = "stressed"
    NEUTRAL = "neutral"


MOOD_EMOJI = {
    Mood.HAPPY: "😊",
    Mood.SAD: "😢",
    Mood.STRESSED: "😫",
    Mood.NEUTRAL: "😐",
}


def mood_emoji(mood) -> str:
    """Return the display emoji for a mood (enum member or its string value)."""
    try:
        return MOOD_EMOJI[Mood(mood)]
    except ValueError:
        return MOOD_EMOJI[Mood.NEUTRAL]


class Reminder(BaseModel):
    """A user reminder.

    `id` is None until the Store assigns one on insert; after that it is the
    only key correlating the stored row with its pending notification.
    """

    id: Optional[int] = Field(None, description="Assigned by the store on insert")

    title: str = Field(
        ...,
        min_length=1,
        description="Reminder title",
        examples=["Submit assignment", "Take vitamins"]
    )

    note: str = Field(default="", description="Free text, may be empty")

    date_time: datetime = Field(..., description="When the reminder should fire")

    category: str = Field(
        default="General",
        description="Category label, e.g. Academics, Health, Personal, General"
    )

    done: bool = Field(default=False, description="Completion flag")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    # Build directly from ReminderRow
    model_config = ConfigDict(from_attributes=True)


class MoodEntry(BaseModel):
    """A self-reported mood. Immutable once created."""

    id: Optional[int] = Field(None, description="Assigned by the store on insert")
    mood: Mood = Field(..., description="happy, sad, stressed or neutral")
    note: Optional[str] = Field(None, description="Optional free text")
    date: datetime = Field(default_factory=datetime.now, description="When the mood was logged")

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def emoji(self) -> str:
        return mood_emoji(self.mood)


class ScheduledNotification(BaseModel):
    """A pending alert as reported by the Notifier."""

    id: int
    title: str
    body: str
    at: datetime


class Notification(BaseModel):
    """Payload handed to a delivery channel when an alert fires."""

    id: int
    title: str
    body: str
    scheduled_for: datetime
    channel_id: str
    channel_name: str
    importance: str
