"""Due notification computation - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import Event, Notification
from .timeutil import align, format_instant


@dataclass
class Reminder:
    """A notification that should be delivered now."""

    key: str
    event: Event
    notification: Notification
    notify_at: datetime

    def message(self) -> str:
        return f"{self.event.title}: starts in {self.notification.time_before} {self.notification.unit}"


def notify_at(event: Event, notification: Notification) -> datetime:
    """When a notification for event should fire."""
    return event.date - notification.lead_time()


def reminder_key(event: Event, notification: Notification) -> str:
    """Stable key recording that a notification was sent for one occurrence."""
    return f"{event.id}_{notification.id}_{format_instant(event.date)}"


def reminder_horizon(events: list[Event]) -> timedelta:
    """Longest lead time among all notifications."""
    leads = [n.lead_time() for e in events for n in e.notifications]
    return max(leads, default=timedelta(0))


def due_reminders(
    events: list[Event],
    now: datetime,
    sent: dict[str, bool] | None = None,
    window_minutes: int = 15,
) -> list[Reminder]:
    """
    Notifications whose fire time is within the last window_minutes.

    Pure function - no I/O. Already-sent keys are skipped.
    """
    sent = sent or {}
    window = timedelta(minutes=window_minutes)
    due = []

    for event in events:
        for notification in event.notifications:
            key = reminder_key(event, notification)
            if sent.get(key):
                continue
            fire = align(notify_at(event, notification), now)
            if timedelta(0) <= now - fire < window:
                due.append(Reminder(key=key, event=event, notification=notification, notify_at=fire))

    return sorted(due, key=lambda r: r.notify_at)
