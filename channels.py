"""Delivery channels for Health Reminders.

A channel receives a Notification when its alert fires and hands it to
whatever shows it to the user. LoggingChannel only logs it; HttpChannel
POSTs it as JSON to a push endpoint.
"""

from typing import Optional

import httpx

from config import Settings, settings as default_settings
from errors import DeliveryError
from logger_config import setup_logger
from schemas import Notification

logger = setup_logger(__name__, 'channels.log')


class NotificationChannel:
    """Base class for delivery channels."""

    name = "base"

    def available(self) -> bool:
        """Whether the channel can currently deliver alerts."""
        return True

    def send(self, notification: Notification) -> None:
        raise NotImplementedError


class LoggingChannel(NotificationChannel):
    """Writes each alert to the log."""

    name = "log"

    def send(self, notification: Notification) -> None:
        logger.info(
            f"🔔 [{notification.channel_id}/{notification.importance}] "
            f"Reminder {notification.id}: {notification.title} - {notification.body}"
        )


class HttpChannel(NotificationChannel):
    """POSTs each alert to a push endpoint.

    Args:
        url: Endpoint receiving the JSON payload
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    name = "http"

    def __init__(self, url: str, timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def available(self) -> bool:
        return bool(self.url)

    def send(self, notification: Notification) -> None:
        payload = notification.model_dump(mode="json")
        logger.info(f"Delivering reminder {notification.id} to {self.url}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Timeout while delivering reminder {notification.id}") from e
        except httpx.RequestError as e:
            raise DeliveryError(f"Network error while delivering reminder {notification.id}: {str(e)}") from e

        if not response.is_success:
            raise DeliveryError(
                f"Failed to deliver reminder {notification.id}. "
                f"Status: {response.status_code}, Response: {response.text}"
            )


def build_channel(config: Optional[Settings] = None) -> NotificationChannel:
    """Pick the delivery channel from configuration."""
    config = config or default_settings
    if config.NOTIFY_API_URL:
        return HttpChannel(config.NOTIFY_API_URL, timeout=config.NOTIFY_TIMEOUT)
    return LoggingChannel()
