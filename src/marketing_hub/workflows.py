"""Shared workflow layer between CLI and scheduler.

Each function loads the snapshot, runs the pure core over it and, for
mutations, saves the result back.
"""

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .adapters.json_snapshot import JsonSnapshotStore
from .config import Config
from .core.filters import filter_events, known_assignees, known_tags
from .core.metrics import Metrics, MonthRange, compute_metrics
from .core.models import Creator, Event, Project
from .core.recurrence import expand, expand_year
from .core.reminders import Reminder, due_reminders, reminder_horizon
from .core.state import HubState, StateUpdate, apply_update, toggle_project_item
from .ports.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> SnapshotStore:
    """Resolve the snapshot store from config."""
    return JsonSnapshotStore(config.snapshot_path)


def get_zone(config: Config) -> ZoneInfo:
    """Zone in which naive stored dates are read."""
    try:
        return ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {config.timezone!r}, using UTC")
        return ZoneInfo("UTC")


def localize(moment: datetime, config: Config) -> datetime:
    """Attach the configured zone to a naive datetime."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=get_zone(config))
    return moment


def expand_window(
    config: Config,
    start: datetime,
    end: datetime,
    tags: list[str] | None = None,
    assignees: list[str] | None = None,
) -> list[Event]:
    """Expanded, filtered and sorted instances for a window."""
    state = get_store(config).load()
    instances = expand(state.events, localize(start, config), localize(end, config))
    return filter_events(instances, state.projects, tags, assignees)


def known_labels(config: Config) -> tuple[list[str], list[str]]:
    """Stored tags and assignees, for building filter selections."""
    state = get_store(config).load()
    return known_tags(state.events, state.projects), known_assignees(state.events, state.projects)


def compute_year_metrics(
    config: Config,
    year: int,
    months: MonthRange | None = None,
    tags: list[str] | None = None,
    assignees: list[str] | None = None,
    as_of: datetime | None = None,
) -> Metrics:
    """Metrics for a year and month range over the stored snapshot."""
    state = get_store(config).load()
    zone = get_zone(config)
    instances = expand_year(state.events, year, zone)
    return compute_metrics(
        instances,
        state.projects,
        state.budget,
        year,
        months=months,
        tags=tags,
        assignees=assignees,
        as_of=localize(as_of, config) if as_of else datetime.now(zone),
        market_rate=config.market_rate,
        default_hourly_rate=config.default_hourly_rate,
        annual_keywords=config.annual_keywords,
        recompute_real=config.recompute_real_costs,
    )


def apply_patch(config: Config, patch: dict, creator: Creator | None = None) -> HubState:
    """Apply an assistant patch to the stored snapshot and save it."""
    store = get_store(config)
    update = StateUpdate.from_dict(patch)
    if update.is_empty:
        logger.info("Patch has no changes")
        return store.load()

    state = apply_update(store.load(), update, creator=creator, now=datetime.now(get_zone(config)))
    store.save(state)
    if update.message:
        logger.info(f"Applied patch: {update.message}")
    return state


def toggle_item(config: Config, project_id: str, item_id: str) -> Project | None:
    """Flip a project checklist item and save. Returns the updated project."""
    store = get_store(config)
    state = toggle_project_item(store.load(), project_id, item_id)
    store.save(state)
    return next((p for p in state.projects if p.id == project_id), None)


def check_reminders(config: Config, now: datetime | None = None, mark_sent: bool = True) -> list[Reminder]:
    """
    Find reminders due now and optionally record them as sent.

    Delivery is left to the caller; this only decides what is due.
    """
    store = get_store(config)
    state = store.load()
    now = localize(now, config) if now else datetime.now(get_zone(config))

    window = timedelta(minutes=config.reminder_window_minutes)
    instances = expand(state.events, now - window, now + reminder_horizon(state.events))
    due = due_reminders(instances, now, state.sent_notifications, config.reminder_window_minutes)

    for reminder in due:
        logger.info(f"Reminder due: {reminder.message()} ({reminder.key})")

    if due and mark_sent:
        sent = dict(state.sent_notifications)
        sent.update({r.key: True for r in due})
        state.sent_notifications = sent
        store.save(state)

    return due
