"""Notifier: one-shot local alerts keyed by reminder id.

Alerts are jobs on an APScheduler BackgroundScheduler. The job id is the
reminder id, so scheduling the same id again replaces the pending alert
and there is at most one alert per reminder. When a job fires the alert is
handed to the delivery channel and the job is gone (delivered).

Alerts live in memory: after a restart, pending alerts are rebuilt from the
store with ReminderService.restore_schedules().
"""

from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from channels import NotificationChannel, build_channel
from config import Settings, settings as default_settings
from errors import DeliveryError, SchedulingError
from logger_config import setup_logger
from schemas import Notification, ScheduledNotification

logger = setup_logger(__name__, 'notifier.log')


class Notifier:
    """Schedules, cancels and delivers reminder alerts.

    Args:
        channel: Delivery channel (default: picked from configuration)
        timezone: Zone for naive timestamps (default: settings.TIMEZONE)
        enabled: Notification permission (default: settings.NOTIFICATIONS_ENABLED)
        config: Settings to read defaults from
    """

    def __init__(
        self,
        channel: Optional[NotificationChannel] = None,
        timezone: Optional[str] = None,
        enabled: Optional[bool] = None,
        config: Optional[Settings] = None
    ):
        self.config = config or default_settings
        self.channel = channel or build_channel(self.config)
        self.tz = ZoneInfo(timezone or self.config.TIMEZONE)
        self.enabled = self.config.NOTIFICATIONS_ENABLED if enabled is None else enabled
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def initialized(self) -> bool:
        return self._scheduler is not None

    def initialize(self) -> None:
        """Start the timer. Calling it again does nothing.

        Raises:
            SchedulingError: delivery channel is unavailable
        """
        if self._scheduler is not None:
            return

        if not self.channel.available():
            raise SchedulingError(f"Delivery channel '{self.channel.name}' is unavailable")

        scheduler = BackgroundScheduler(timezone=self.tz)
        scheduler.add_listener(self._on_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED)
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            f"Notifier initialized: channel={self.channel.name}, "
            f"id={self.config.NOTIFICATION_CHANNEL_ID}, timezone={self.tz.key}"
        )

    def shutdown(self) -> None:
        """Stop the timer and drop every pending alert."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Notifier shut down")

    def _require_scheduler(self) -> BackgroundScheduler:
        if self._scheduler is None or not self._scheduler.running:
            raise SchedulingError("Notifier is not initialized")
        return self._scheduler

    def localize(self, at: datetime) -> datetime:
        """Attach the configured zone to a naive time, or convert an aware one."""
        if at.tzinfo is None:
            return at.replace(tzinfo=self.tz)
        return at.astimezone(self.tz)

    def schedule(self, reminder_id: int, title: str, body: str, at: datetime) -> ScheduledNotification:
        """Register a one-shot alert, replacing any pending alert for the id.

        A time already in the past fires immediately.

        Raises:
            SchedulingError: not initialized, permission denied, channel
                unavailable, or the timer rejected the job
        """
        scheduler = self._require_scheduler()

        if not self.enabled:
            raise SchedulingError(f"Notifications are disabled, reminder {reminder_id} not scheduled")
        if not self.channel.available():
            raise SchedulingError(f"Delivery channel '{self.channel.name}' is unavailable")

        due_at = self.localize(at)
        now = datetime.now(self.tz)
        run_at = due_at
        if due_at < now:
            logger.warning(
                f"Reminder {reminder_id} time {due_at.isoformat()} is in the past, delivering now"
            )
            run_at = now

        try:
            scheduler.add_job(
                self._deliver,
                DateTrigger(run_date=run_at, timezone=self.tz),
                id=str(reminder_id),
                name=title,
                kwargs={"reminder_id": reminder_id, "title": title, "body": body, "at": due_at},
                replace_existing=True,
                misfire_grace_time=None
            )
        except Exception as e:
            raise SchedulingError(f"Failed to schedule reminder {reminder_id}: {str(e)}") from e

        logger.info(f"Reminder {reminder_id} scheduled for {run_at.isoformat()}")
        return ScheduledNotification(id=reminder_id, title=title, body=body, at=due_at)

    def cancel(self, reminder_id: int) -> None:
        """Remove the pending alert for the id, if there is one."""
        scheduler = self._require_scheduler()
        try:
            scheduler.remove_job(str(reminder_id))
        except JobLookupError:
            return
        logger.info(f"Reminder {reminder_id} alert cancelled")

    def cancel_all(self) -> None:
        scheduler = self._require_scheduler()
        scheduler.remove_all_jobs()
        logger.info("All pending alerts cancelled")

    def pending(self) -> List[ScheduledNotification]:
        """Pending alerts, soonest first."""
        scheduler = self._require_scheduler()
        alerts = [self._to_scheduled(job) for job in scheduler.get_jobs()]
        return sorted(alerts, key=lambda alert: alert.at)

    def get_pending(self, reminder_id: int) -> Optional[ScheduledNotification]:
        scheduler = self._require_scheduler()
        job = scheduler.get_job(str(reminder_id))
        return self._to_scheduled(job) if job else None

    @staticmethod
    def _to_scheduled(job) -> ScheduledNotification:
        return ScheduledNotification(
            id=job.kwargs["reminder_id"],
            title=job.kwargs["title"],
            body=job.kwargs["body"],
            at=job.kwargs["at"]
        )

    def _deliver(self, reminder_id: int, title: str, body: str, at: datetime) -> None:
        """Runs on the timer thread when an alert fires."""
        notification = Notification(
            id=reminder_id,
            title=title,
            body=body,
            scheduled_for=at,
            channel_id=self.config.NOTIFICATION_CHANNEL_ID,
            channel_name=self.config.NOTIFICATION_CHANNEL_NAME,
            importance=self.config.NOTIFICATION_IMPORTANCE
        )
        try:
            self.channel.send(notification)
        except DeliveryError as e:
            logger.error(f"Delivery failed for reminder {reminder_id}: {str(e)}")
            return
        logger.info(f"Reminder {reminder_id} delivered")

    def _on_job_event(self, event) -> None:
        if event.code == EVENT_JOB_MISSED:
            logger.warning(f"Alert {event.job_id} missed its run time")
        else:
            logger.error(f"Alert {event.job_id} raised: {event.exception}", exc_info=event.exception)
