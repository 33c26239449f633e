"""Tests for alert scheduling and delivery channels."""

import json
import threading
import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest

from channels import HttpChannel, LoggingChannel, NotificationChannel, build_channel
from config import Settings
from errors import DeliveryError, SchedulingError
from notifier import Notifier
from schemas import Notification

FUTURE = datetime(2099, 1, 10, 9, 0, 0, tzinfo=timezone.utc)


def wait_until(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.02)
    return condition()


def test_schedule_creates_pending_alert(notifier):
    scheduled = notifier.schedule(1, "Submit assignment", "Academics", FUTURE)

    assert scheduled.at == FUTURE
    pending = notifier.pending()
    assert len(pending) == 1
    assert pending[0].id == 1
    assert pending[0].title == "Submit assignment"
    assert pending[0].body == "Academics"
    assert pending[0].at == FUTURE


def test_rescheduling_replaces_pending_alert(notifier):
    notifier.schedule(1, "Old title", "", FUTURE)
    notifier.schedule(1, "New title", "", FUTURE + timedelta(days=1))

    pending = notifier.pending()
    assert len(pending) == 1
    assert pending[0].title == "New title"
    assert pending[0].at == FUTURE + timedelta(days=1)


def test_pending_sorted_by_time(notifier):
    notifier.schedule(1, "later", "", FUTURE + timedelta(hours=2))
    notifier.schedule(2, "sooner", "", FUTURE)

    assert [p.id for p in notifier.pending()] == [2, 1]


def test_cancel_is_idempotent(notifier):
    notifier.schedule(1, "Drink water", "", FUTURE)
    notifier.schedule(2, "Stretch", "", FUTURE)

    notifier.cancel(1)
    notifier.cancel(1)
    notifier.cancel(999)

    assert [p.id for p in notifier.pending()] == [2]
    assert notifier.get_pending(1) is None


def test_cancel_all(notifier):
    for reminder_id in range(1, 4):
        notifier.schedule(reminder_id, f"Reminder {reminder_id}", "", FUTURE)

    notifier.cancel_all()

    assert notifier.pending() == []


def test_naive_time_uses_configured_timezone(channel):
    notifier = Notifier(channel=channel, timezone="Asia/Kolkata", enabled=True)
    notifier.initialize()
    try:
        notifier.schedule(1, "Take vitamins", "", datetime(2099, 1, 1, 9, 0, 0))
        at = notifier.get_pending(1).at
    finally:
        notifier.shutdown()

    assert at == datetime(2099, 1, 1, 9, 0, 0, tzinfo=ZoneInfo("Asia/Kolkata"))
    assert at.utcoffset() == timedelta(hours=5, minutes=30)


def test_past_time_is_delivered_immediately(notifier, channel):
    due = datetime(2000, 1, 1, tzinfo=timezone.utc)
    scheduled = notifier.schedule(5, "Overdue", "Health", due)
    assert scheduled.at == due

    assert channel.delivered.wait(5)
    notification = channel.sent[0]
    assert notification.id == 5
    assert notification.title == "Overdue"
    assert notification.body == "Health"
    assert notification.channel_id == "reminder_channel"
    assert notification.scheduled_for == due
    assert wait_until(lambda: notifier.get_pending(5) is None)


def test_initialize_is_idempotent(notifier):
    scheduler = notifier._scheduler
    notifier.initialize()
    assert notifier._scheduler is scheduler


def test_schedule_before_initialize_fails(channel):
    notifier = Notifier(channel=channel, timezone="UTC")

    with pytest.raises(SchedulingError):
        notifier.schedule(1, "Too early", "", FUTURE)
    with pytest.raises(SchedulingError):
        notifier.cancel(1)


def test_schedule_without_permission_fails(notifier):
    notifier.enabled = False

    with pytest.raises(SchedulingError):
        notifier.schedule(1, "Denied", "", FUTURE)
    assert notifier.pending() == []


def test_schedule_with_unavailable_channel_fails(notifier, channel):
    channel.is_available = False

    with pytest.raises(SchedulingError):
        notifier.schedule(1, "No channel", "", FUTURE)


def test_initialize_with_unavailable_channel_fails():
    notifier = Notifier(channel=HttpChannel(""), timezone="UTC")

    with pytest.raises(SchedulingError):
        notifier.initialize()
    assert not notifier.initialized


def test_delivery_failure_does_not_stop_notifier():
    attempted = threading.Event()

    class FailingChannel(NotificationChannel):
        name = "failing"

        def send(self, notification):
            attempted.set()
            raise DeliveryError("push endpoint down")

    notifier = Notifier(channel=FailingChannel(), timezone="UTC", enabled=True)
    notifier.initialize()
    try:
        notifier.schedule(1, "Lost", "", datetime(2000, 1, 1, tzinfo=timezone.utc))
        assert attempted.wait(5)

        notifier.schedule(2, "Next", "", FUTURE)
        assert notifier.get_pending(2) is not None
    finally:
        notifier.shutdown()


def make_notification():
    return Notification(
        id=1,
        title="Submit assignment",
        body="Academics",
        scheduled_for=datetime(2025, 1, 10, 9, 0, 0, tzinfo=timezone.utc),
        channel_id="reminder_channel",
        channel_name="Reminders",
        importance="max"
    )


def test_http_channel_posts_notification():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"status": "queued"})

    channel = HttpChannel("http://push.local/notify", transport=httpx.MockTransport(handler))
    channel.send(make_notification())

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "http://push.local/notify"
    payload = json.loads(requests[0].content)
    assert payload["id"] == 1
    assert payload["title"] == "Submit assignment"
    assert payload["importance"] == "max"
    assert payload["scheduled_for"].startswith("2025-01-10T09:00:00")


def test_http_channel_error_status_raises_delivery_error():
    channel = HttpChannel(
        "http://push.local/notify",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    )

    with pytest.raises(DeliveryError, match="503"):
        channel.send(make_notification())


def test_http_channel_network_error_raises_delivery_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    channel = HttpChannel("http://push.local/notify", transport=httpx.MockTransport(handler))

    with pytest.raises(DeliveryError):
        channel.send(make_notification())


def test_build_channel_from_settings():
    assert isinstance(build_channel(Settings(NOTIFY_API_URL=None)), LoggingChannel)

    channel = build_channel(Settings(NOTIFY_API_URL="http://push.local/notify", NOTIFY_TIMEOUT=5.0))
    assert isinstance(channel, HttpChannel)
    assert channel.url == "http://push.local/notify"
    assert channel.timeout == 5.0
