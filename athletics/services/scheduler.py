"""
Hourly reminder scheduler.

Runs a notification pass every hour at HH:15 (reference timezone), except
during quiet hours (12am-5am by default). Manual passes triggered by an
administrator are not subject to quiet hours.

The scheduler is an ordinary object owned by the application lifespan;
start() and stop() manage its single background task.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from athletics.schemas.notification import NotificationPassResult
from athletics.services.notifier import NotificationService
from athletics.utils.clock import Clock, utc_now, local_time

logger = logging.getLogger(__name__)


def is_quiet_hours(now: datetime, tz: ZoneInfo, start_hour: int = 0, end_hour: int = 5) -> bool:
    """True when the local hour is in [start_hour, end_hour)."""
    hour = local_time(now, tz).hour
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    # Window wraps midnight, e.g. 22 -> 5
    return hour >= start_hour or hour < end_hour


def seconds_until_next_run(now: datetime, run_minute: int) -> float:
    """Seconds until the next HH:run_minute:00."""
    next_run = now.replace(minute=run_minute, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(hours=1)
    return (next_run - now).total_seconds()


class NotificationScheduler:
    def __init__(
        self,
        service: NotificationService,
        tz: ZoneInfo,
        run_minute: int = 15,
        quiet_hours_start: int = 0,
        quiet_hours_end: int = 5,
        clock: Clock = utc_now,
    ):
        self.service = service
        self.tz = tz
        self.run_minute = run_minute
        self.quiet_hours_start = quiet_hours_start
        self.quiet_hours_end = quiet_hours_end
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def in_quiet_hours(self) -> bool:
        return is_quiet_hours(self.clock(), self.tz, self.quiet_hours_start, self.quiet_hours_end)

    async def run_scheduled_pass(self) -> Optional[NotificationPassResult]:
        """Scheduled pass. Returns None when skipped for quiet hours."""
        if self.in_quiet_hours():
            logger.info(
                f"Skipping notification check - quiet hours "
                f"({self.quiet_hours_start}:00-{self.quiet_hours_end}:00 {self.tz.key})"
            )
            return None

        logger.info("Starting scheduled notification check...")
        result = await self.service.run_notification_pass()
        logger.info(f"Notification check complete: {result.delivered} reminders delivered")
        return result

    async def trigger_manual(self) -> NotificationPassResult:
        """Admin-triggered pass; ignores quiet hours."""
        logger.info("Manual notification check triggered...")
        result = await self.service.run_notification_pass()
        logger.info(
            f"Manual notification check complete: {result.delivered} delivered, "
            f"{result.duplicates_skipped} skipped"
        )
        return result

    async def _loop(self):
        logger.info(f"Starting reminder scheduler (hourly at :{self.run_minute:02d})")

        while True:
            delay = seconds_until_next_run(local_time(self.clock(), self.tz), self.run_minute)
            await asyncio.sleep(delay)
            try:
                await self.run_scheduled_pass()
            except Exception as e:
                logger.error(f"Notification check failed: {e}")

    def start(self):
        """Start the hourly task (no-op if already running)."""
        if self.running:
            logger.info("Reminder scheduler already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Reminder scheduler task started")

    def stop(self):
        """Stop the hourly task."""
        if self.running:
            self._task.cancel()
            logger.info("Reminder scheduler task stopped")
        self._task = None
