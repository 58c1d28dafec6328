"""
Run one game reminder pass against the configured database.
Usage: python scripts/run_notifications.py [--respect-quiet-hours]

Without the flag this behaves like the admin trigger and ignores quiet hours.
"""
import asyncio
import logging
import sys
from zoneinfo import ZoneInfo

# Add parent directory to path
sys.path.insert(0, ".")

from athletics.config import get_settings
from athletics.database import init_db
from athletics.services.notifier import build_notification_service
from athletics.services.scheduler import NotificationScheduler


async def run(respect_quiet_hours: bool):
    await init_db()

    settings = get_settings()
    scheduler = NotificationScheduler(
        build_notification_service(),
        tz=ZoneInfo(settings.reference_timezone),
        run_minute=settings.notification_run_minute,
        quiet_hours_start=settings.quiet_hours_start,
        quiet_hours_end=settings.quiet_hours_end,
    )

    if respect_quiet_hours:
        result = await scheduler.run_scheduled_pass()
        if result is None:
            print("Quiet hours - no reminders sent.")
            return
    else:
        result = await scheduler.trigger_manual()

    print(
        f"24-hour games: {result.games_in_24_hour_window}, game day games: {result.games_in_game_day_window}\n"
        f"Delivered: {result.delivered} ({result.emails_sent} email, {result.pushes_sent} push), "
        f"duplicates skipped: {result.duplicates_skipped}"
    )
    for error in result.errors:
        print(f"  error: {error}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(run("--respect-quiet-hours" in sys.argv[1:]))
