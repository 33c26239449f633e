"""Exceptions raised by Health Reminders.

Empty titles and unknown moods are rejected by pydantic's ValidationError
when the record is built, so there is no separate validation exception here.
"""


class HealthReminderError(Exception):
    """Base exception for Health Reminders"""
    pass


class StorageError(HealthReminderError):
    """Local database unavailable, write failed or schema mismatch"""
    pass


class SchedulingError(HealthReminderError):
    """Alert could not be scheduled (permission denied, channel unavailable)"""
    pass


class DeliveryError(HealthReminderError):
    """Delivery channel could not hand an alert over"""
    pass
