"""APScheduler integration for the periodic reminder sweep."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone="UTC")
_JOB_ID = "reminder_sweep"


def init_app(app) -> None:
    """Start the scheduler and apply the current reminder schedule."""
    if not _scheduler.running:
        _scheduler.start()
    apply_schedule(app)


def apply_schedule(app) -> None:
    """Update the reminder job to match the current settings."""
    with app.app_context():
        from petitions.models import Settings
        schedule = Settings.get_reminder_config()["schedule"]

    if _scheduler.get_job(_JOB_ID):
        _scheduler.remove_job(_JOB_ID)

    trigger = make_trigger(schedule)
    if trigger:
        _scheduler.add_job(
            _run_reminder_sweep,
            trigger=trigger,
            id=_JOB_ID,
            args=[app],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Reminder sweep scheduled: %s", schedule)
    else:
        logger.info("Reminder sweep disabled.")


def make_trigger(schedule: str):
    if schedule == "hourly":
        return CronTrigger(minute=0)
    elif schedule == "daily":
        return CronTrigger(hour=9, minute=0)
    elif schedule == "weekly":
        return CronTrigger(day_of_week="mon", hour=9, minute=0)
    return None


def _run_reminder_sweep(app) -> None:
    from petitions.services.reminders import ReminderCoordinator
    with app.app_context():
        try:
            ReminderCoordinator().run_sweep()
        except Exception:
            logger.exception("Reminder sweep failed")
