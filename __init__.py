"""Health Reminders - reminder scheduling and mood tracking core.

This package stores reminders and mood entries in a local SQLite file and
delivers a one-shot alert for each open reminder at its due time.

Features:
- Reminders with title, note, due datetime, category and done flag
- Append-only mood log (happy, sad, stressed, neutral)
- At most one pending alert per reminder, moved on edit, cancelled on
  delete or completion
- Log or HTTP push delivery channels

Components:
- config: Application settings
- database: SQLAlchemy tables and engine setup
- schemas: Pydantic records
- crud: Database CRUD operations and record/row mapping
- store: Store service object
- channels: Alert delivery channels
- notifier: APScheduler-backed alert scheduling
- service: Keeps the store and the notifier in step

Usage:
    store = Store()
    notifier = Notifier()
    notifier.initialize()
    service = ReminderService(store, notifier)
    service.restore_schedules()
"""

__version__ = "1.0.0"
__description__ = "Health reminder and mood tracking core"
