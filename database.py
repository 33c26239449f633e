"""Database module for Health Reminders.

This module defines the SQLAlchemy table models and engine setup.
IMPORTANT: timestamps are stored as ISO-8601 TEXT, but read and written as
datetime objects through the IsoDateTime column type.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, String, Text, create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from errors import StorageError
from logger_config import setup_logger

logger = setup_logger(__name__, 'database.log')

# SQLAlchemy Base
Base = declarative_base()


class IsoDateTime(TypeDecorator):
    """datetime stored as an ISO-8601 string.

    Values are written with a fixed microsecond width so that text order is
    time order. Aware values are converted to UTC first; naive values are
    kept as wall-clock time.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.isoformat(timespec="microseconds")

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return datetime.fromisoformat(value)


class ReminderRow(Base):
    """Row in the reminders table."""

    __tablename__ = "reminders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    note = Column(Text, nullable=False, default="")

    # Column keeps its persisted name, attribute is snake_case
    date_time = Column("dateTime", IsoDateTime, nullable=False, index=True)

    category = Column(Text, nullable=False, default="General")
    done = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return (
            f"<ReminderRow(id={self.id}, title={self.title}, "
            f"dateTime={self.date_time}, category={self.category}, done={self.done})>"
        )


class MoodRow(Base):
    """Row in the moods table."""

    __tablename__ = "moods"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    mood = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    date = Column(IsoDateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<MoodRow(id={self.id}, mood={self.mood}, date={self.date})>"


EXPECTED_COLUMNS = {
    "reminders": {"id", "title", "note", "dateTime", "category", "done"},
    "moods": {"id", "mood", "note", "date"},
}


def create_db_engine(database_url: str):
    """Create the engine for the local database file."""
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        echo=False  # Set to True for SQL debugging
    )


def init_db(engine) -> sessionmaker:
    """Create the tables if needed and return a session factory.

    Raises:
        StorageError: database cannot be opened or has an unexpected schema
    """
    try:
        Base.metadata.create_all(bind=engine)
        _assert_expected_schema(engine)
    except SQLAlchemyError as e:
        raise StorageError(f"Cannot open database {engine.url}: {e}") from e

    logger.info(f"Database initialized: {engine.url}")
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _assert_expected_schema(engine) -> None:
    """Check column names of both tables. No migration is attempted."""
    inspector = inspect(engine)
    for table, expected in EXPECTED_COLUMNS.items():
        columns = {c["name"] for c in inspector.get_columns(table)}
        missing = expected - columns
        if missing:
            raise StorageError(
                f"Schema mismatch in table '{table}': missing columns {sorted(missing)}. "
                f"Database: {engine.url}"
            )
