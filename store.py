"""Store: durable CRUD for reminders and mood entries.

A Store owns one engine for one local database file. The engine is opened
on first use and stays open until close() is called; construct one Store
per process and pass it to whatever needs it.
"""

import contextlib
import threading
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud
import database
from config import settings
from errors import StorageError
from logger_config import setup_logger
from schemas import Mood, MoodEntry, Reminder

logger = setup_logger(__name__, 'store.log')


class Store:
    """Reminder and mood persistence.

    Every operation runs in its own short session. Database failures are
    raised as StorageError; a missing id on update/delete is reported as
    zero affected rows.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self._engine = None
        self._session_factory = None
        self._open_lock = threading.Lock()

    def _open(self):
        with self._open_lock:
            return self._open_locked()

    def _open_locked(self):
        if self._session_factory is None:
            try:
                engine = database.create_db_engine(self.database_url)
            except SQLAlchemyError as e:
                raise StorageError(f"Invalid database URL {self.database_url}: {e}") from e
            try:
                self._session_factory = database.init_db(engine)
            except StorageError:
                engine.dispose()
                raise
            self._engine = engine
        return self._session_factory

    @contextlib.contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        db = self._open()()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"{operation} failed: {str(e)}")
            raise StorageError(f"{operation} failed: {e}") from e
        except ValidationError as e:
            logger.error(f"{operation} read an invalid row: {str(e)}")
            raise StorageError(f"{operation} read an invalid row: {e}") from e
        finally:
            db.close()

    def close(self) -> None:
        """Dispose of the engine. The next operation reopens it."""
        with self._open_lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None

    # Reminders

    def insert_reminder(self, reminder: Reminder) -> int:
        with self._session("insert_reminder") as db:
            reminder_id = crud.create_reminder(db, reminder)
        logger.info(f"Reminder {reminder_id} inserted: '{reminder.title}' at {reminder.date_time.isoformat()}")
        return reminder_id

    def update_reminder(self, reminder: Reminder) -> int:
        with self._session("update_reminder") as db:
            count = crud.update_reminder(db, reminder)
        if count:
            logger.info(f"Reminder {reminder.id} updated")
        else:
            logger.info(f"Reminder {reminder.id} not found, nothing updated")
        return count

    def delete_reminder(self, reminder_id: int) -> int:
        with self._session("delete_reminder") as db:
            count = crud.delete_reminder(db, reminder_id)
        if count:
            logger.info(f"Reminder {reminder_id} deleted")
        return count

    def get_reminder(self, reminder_id: int) -> Optional[Reminder]:
        with self._session("get_reminder") as db:
            return crud.get_reminder(db, reminder_id)

    def list_reminders(self) -> List[Reminder]:
        """All reminders ordered by due time, earliest first."""
        with self._session("list_reminders") as db:
            return crud.get_reminders(db)

    def list_open_reminders(self) -> List[Reminder]:
        with self._session("list_open_reminders") as db:
            return crud.get_open_reminders(db)

    # Moods

    def insert_mood(self, entry: MoodEntry) -> int:
        with self._session("insert_mood") as db:
            mood_id = crud.create_mood(db, entry)
        logger.info(f"Mood {mood_id} logged: {entry.mood.value}")
        return mood_id

    def list_moods_since(self, since: datetime) -> List[MoodEntry]:
        """Mood entries dated at or after `since`, newest first."""
        with self._session("list_moods_since") as db:
            return crud.get_moods(db, since)

    def list_all_moods(self) -> List[MoodEntry]:
        with self._session("list_all_moods") as db:
            return crud.get_moods(db)

    def count_moods_since(self, since: datetime) -> Dict[Mood, int]:
        with self._session("count_moods_since") as db:
            return crud.get_mood_counts(db, since)
