"""Periodic reminder checks."""

import logging

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .adapters.json_snapshot import SnapshotError
from .config import Config, load_config
from .workflows import check_reminders, get_zone

logger = logging.getLogger(__name__)


def run_reminder_check(config: Config) -> None:
    """One scheduled pass. Errors are logged so the loop keeps running."""
    try:
        due = check_reminders(config)
    except SnapshotError as e:
        logger.error(f"Could not read snapshot: {e}")
        return

    for reminder in due:
        click.echo(f"[{reminder.notify_at.strftime('%H:%M')}] {reminder.message()}")


def setup_scheduler(config: Config | None = None) -> BlockingScheduler:
    """Set up the every-minute reminder job."""
    if config is None:
        config = load_config()

    scheduler = BlockingScheduler(timezone=get_zone(config))
    scheduler.add_job(
        run_reminder_check,
        CronTrigger(minute="*"),
        args=[config],
        id="reminders",
    )
    logger.info(f"Scheduled reminder check every minute ({config.timezone})")
    return scheduler
