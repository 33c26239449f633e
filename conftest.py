"""Shared pytest fixtures for Health Reminders."""

import threading

import pytest

from channels import NotificationChannel
from notifier import Notifier
from service import ReminderService
from store import Store


class RecordingChannel(NotificationChannel):
    """Keeps every delivered alert in memory."""

    name = "recording"

    def __init__(self):
        self.sent = []
        self.delivered = threading.Event()
        self.is_available = True

    def available(self) -> bool:
        return self.is_available

    def send(self, notification) -> None:
        self.sent.append(notification)
        self.delivered.set()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'health_reminders.db'}"


@pytest.fixture
def store(db_url):
    store = Store(db_url)
    yield store
    store.close()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def notifier(channel):
    notifier = Notifier(channel=channel, timezone="UTC", enabled=True)
    notifier.initialize()
    yield notifier
    notifier.shutdown()


@pytest.fixture
def service(store, notifier):
    return ReminderService(store, notifier)
