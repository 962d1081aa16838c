"""Pure hub data model - no I/O dependencies.

Records mirror the camelCase JSON documents exchanged with the UI and the
assistant; ``from_dict`` is lenient (missing fields default, unknown keys are
ignored) and ``to_dict`` emits the same shape back.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from .timeutil import format_instant, parse_instant


class EventKind(Enum):
    """What an event represents on the calendar."""

    EVENT = "event"  # Ordinary work session
    CAMPAIGN = "campaign"  # Multi-day campaign with an end date
    HOLIDAY = "holiday"  # Calendar marker

    @classmethod
    def parse(cls, value: str | None) -> "EventKind":
        try:
            return cls(value)
        except ValueError:
            return cls.EVENT


class Frequency(Enum):
    """Recurrence frequency."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ProjectStatus(Enum):
    """Project lifecycle status."""

    TEMPLATE = "template"  # Reusable blueprint, not scheduled
    ONGOING = "ongoing"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | None) -> "ProjectStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.ONGOING


def _number(value: Any) -> float | None:
    """Optional numeric field. Booleans and junk count as unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _strings(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and v != ""]


def _put(data: dict, key: str, value: Any) -> None:
    """Set key only when value is present, keeping documents sparse."""
    if value is not None:
        data[key] = value


@dataclass
class ChecklistItem:
    """A sub-task of an event or a checklist entry of a project."""

    id: str
    label: str
    done: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ChecklistItem":
        return cls(
            id=str(data.get("id", "")),
            label=data.get("label", "") or "",
            done=bool(data.get("done", False)),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "done": self.done}


@dataclass
class Creator:
    """Who created a record."""

    uid: str
    display_name: str
    photo_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "Creator | None":
        if not data:
            return None
        return cls(
            uid=str(data.get("uid", "")),
            display_name=data.get("displayName", "") or "",
            photo_url=data.get("photoURL"),
        )

    def to_dict(self) -> dict:
        data = {"uid": self.uid, "displayName": self.display_name}
        _put(data, "photoURL", self.photo_url)
        return data


@dataclass
class Notification:
    """A reminder attached to an event, fired time_before units ahead of it."""

    id: str
    time_before: int
    unit: str = "minutes"  # minutes | hours | days
    sent: bool = False

    def lead_time(self) -> timedelta:
        """How long before the event this notification fires."""
        match self.unit:
            case "hours":
                return timedelta(hours=self.time_before)
            case "days":
                return timedelta(days=self.time_before)
            case _:
                return timedelta(minutes=self.time_before)

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(
            id=str(data.get("id", "")),
            time_before=int(_number(data.get("timeBefore")) or 0),
            unit=data.get("unit", "minutes") or "minutes",
            sent=bool(data.get("sent", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timeBefore": self.time_before,
            "unit": self.unit,
            "sent": self.sent,
        }


@dataclass
class Recurrence:
    """Repeat rule for an event template."""

    frequency: Frequency
    interval: int = 1
    end_date: datetime | None = None
    days_of_week: list[int] = field(default_factory=list)  # 0=Sunday .. 6=Saturday

    def __post_init__(self):
        if not isinstance(self.interval, int) or self.interval < 1:
            self.interval = 1

    @property
    def has_weekdays(self) -> bool:
        """Weekly rule with an explicit weekday set."""
        return self.frequency is Frequency.WEEKLY and bool(self.days_of_week)

    @classmethod
    def from_dict(cls, data: dict | None) -> "Recurrence | None":
        if not data:
            return None
        try:
            frequency = Frequency(data.get("frequency"))
        except ValueError:
            return None

        interval = _number(data.get("interval"))
        days = []
        for d in data.get("daysOfWeek") or []:
            if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6:
                days.append(d)

        return cls(
            frequency=frequency,
            interval=int(interval) if interval and interval >= 1 else 1,
            end_date=parse_instant(data.get("endDate")),
            days_of_week=days,
        )

    def to_dict(self) -> dict:
        data: dict = {"frequency": self.frequency.value, "interval": self.interval}
        _put(data, "endDate", format_instant(self.end_date))
        if self.days_of_week:
            data["daysOfWeek"] = list(self.days_of_week)
        return data


@dataclass
class Event:
    """
    A schedulable unit of work or a calendar marker.

    The same record type serves as a stored template and as an expanded
    instance; instances carry master_id pointing back at their template.
    """

    id: str
    title: str
    date: datetime
    end_date: datetime | None = None
    kind: EventKind = EventKind.EVENT
    duration: str | None = None
    tags: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    description: str = ""
    completed: bool = False
    tasks: list[ChecklistItem] = field(default_factory=list)
    budgeted_value: float | None = None
    budgeted_cost: float | None = None
    real_value: float | None = None
    real_cost: float | None = None
    real_production_cost: float | None = None
    real_time_cost: float | None = None
    project_id: str | None = None
    recurrence: Recurrence | None = None
    master_id: str | None = None
    notifications: list[Notification] = field(default_factory=list)
    created_by: Creator | None = None
    created_at: datetime | None = None

    @property
    def effective_end(self) -> datetime:
        """End of the span; point events end where they start."""
        return self.end_date or self.date

    @property
    def span(self) -> timedelta:
        """Length of the first occurrence, zero without an end date."""
        if self.end_date is None:
            return timedelta(0)
        return self.end_date - self.date

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def people(self) -> int:
        """Head count used as cost multiplier."""
        return len(self.assignees) or 1

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """Create an Event from its JSON document. Requires id and a parseable date."""
        start = parse_instant(data.get("date"))
        if start is None:
            raise ValueError(f"Event {data.get('id')!r} has no valid date")
        return cls(
            id=str(data["id"]),
            title=data.get("title", "") or "",
            date=start,
            end_date=parse_instant(data.get("endDate")),
            kind=EventKind.parse(data.get("type")),
            duration=data.get("duration") or None,
            tags=_strings(data.get("tags")),
            assignees=_strings(data.get("assignees")),
            description=data.get("description", "") or "",
            completed=bool(data.get("completed", False)),
            tasks=[ChecklistItem.from_dict(t) for t in data.get("tasks") or []],
            budgeted_value=_number(data.get("budgetedValue")),
            budgeted_cost=_number(data.get("budgetedCost")),
            real_value=_number(data.get("realValue")),
            real_cost=_number(data.get("realCost")),
            real_production_cost=_number(data.get("realProductionCost")),
            real_time_cost=_number(data.get("realTimeCost")),
            project_id=data.get("projectId") or None,
            recurrence=Recurrence.from_dict(data.get("recurrence")),
            master_id=data.get("masterId") or None,
            notifications=[Notification.from_dict(n) for n in data.get("notifications") or []],
            created_by=Creator.from_dict(data.get("createdBy")),
            created_at=parse_instant(data.get("createdAt")),
        )

    def to_dict(self) -> dict:
        data: dict = {
            "id": self.id,
            "title": self.title,
            "date": format_instant(self.date),
            "type": self.kind.value,
            "tags": list(self.tags),
            "description": self.description,
            "completed": self.completed,
        }
        _put(data, "endDate", format_instant(self.end_date))
        _put(data, "duration", self.duration)
        if self.assignees:
            data["assignees"] = list(self.assignees)
        if self.tasks:
            data["tasks"] = [t.to_dict() for t in self.tasks]
        _put(data, "budgetedValue", self.budgeted_value)
        _put(data, "budgetedCost", self.budgeted_cost)
        _put(data, "realValue", self.real_value)
        _put(data, "realCost", self.real_cost)
        _put(data, "realProductionCost", self.real_production_cost)
        _put(data, "realTimeCost", self.real_time_cost)
        _put(data, "projectId", self.project_id)
        if self.recurrence:
            data["recurrence"] = self.recurrence.to_dict()
        _put(data, "masterId", self.master_id)
        if self.notifications:
            data["notifications"] = [n.to_dict() for n in self.notifications]
        if self.created_by:
            data["createdBy"] = self.created_by.to_dict()
        _put(data, "createdAt", format_instant(self.created_at))
        return data


@dataclass
class Project:
    """A larger unit of work grouping several events."""

    id: str
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.ONGOING
    deadline: datetime | None = None
    budgeted_value: float | None = None
    budgeted_cost: float | None = None
    budgeted_hours: float | None = None
    real_value: float | None = None
    real_cost: float | None = None
    real_production_cost: float | None = None
    real_time_cost: float | None = None
    checklist: list[ChecklistItem] = field(default_factory=list)
    created_by: Creator | None = None
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Ongoing or completed - the statuses that accrue real costs."""
        return self.status in (ProjectStatus.ONGOING, ProjectStatus.COMPLETED)

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        budgeted_value = _number(data.get("budgetedValue"))
        if not budgeted_value:
            # Older documents only carry globalValue
            budgeted_value = _number(data.get("globalValue")) or budgeted_value
        return cls(
            id=str(data["id"]),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            tags=_strings(data.get("tags")),
            assignees=_strings(data.get("assignees")),
            status=ProjectStatus.parse(data.get("status")),
            deadline=parse_instant(data.get("deadline")),
            budgeted_value=budgeted_value,
            budgeted_cost=_number(data.get("budgetedCost")),
            budgeted_hours=_number(data.get("budgetedHours")),
            real_value=_number(data.get("realValue")),
            real_cost=_number(data.get("realCost")),
            real_production_cost=_number(data.get("realProductionCost")),
            real_time_cost=_number(data.get("realTimeCost")),
            checklist=[ChecklistItem.from_dict(c) for c in data.get("checklist") or []],
            created_by=Creator.from_dict(data.get("createdBy")),
            created_at=parse_instant(data.get("createdAt")),
        )

    def to_dict(self) -> dict:
        data: dict = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "status": self.status.value,
            "checklist": [c.to_dict() for c in self.checklist],
        }
        if self.assignees:
            data["assignees"] = list(self.assignees)
        _put(data, "deadline", format_instant(self.deadline))
        _put(data, "budgetedValue", self.budgeted_value)
        _put(data, "budgetedCost", self.budgeted_cost)
        _put(data, "budgetedHours", self.budgeted_hours)
        _put(data, "realValue", self.real_value)
        _put(data, "realCost", self.real_cost)
        _put(data, "realProductionCost", self.real_production_cost)
        _put(data, "realTimeCost", self.real_time_cost)
        if self.created_by:
            data["createdBy"] = self.created_by.to_dict()
        _put(data, "createdAt", format_instant(self.created_at))
        return data


@dataclass
class Expense:
    """A named fixed annual expense."""

    id: str
    title: str
    amount: float = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", "") or "",
            amount=_number(data.get("amount")) or 0,
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "amount": self.amount}


@dataclass
class Budget:
    """Hourly rate and fixed expenses feeding cost computations."""

    assigned: float = 0
    estimated: float = 0
    hourly_rate: float | None = None
    expenses: list[Expense] = field(default_factory=list)

    @property
    def annual_expenses(self) -> float:
        return sum(e.amount for e in self.expenses)

    def rate_or(self, default: float) -> float:
        """The internal hourly rate, or default when unset or zero."""
        return self.hourly_rate or default

    @classmethod
    def from_dict(cls, data: dict | None) -> "Budget":
        data = data or {}
        return cls(
            assigned=_number(data.get("assigned")) or 0,
            estimated=_number(data.get("estimated")) or 0,
            hourly_rate=_number(data.get("hourlyRate")),
            expenses=[Expense.from_dict(e) for e in data.get("expenses") or []],
        )

    def to_dict(self) -> dict:
        data: dict = {
            "assigned": self.assigned,
            "estimated": self.estimated,
            "expenses": [e.to_dict() for e in self.expenses],
        }
        _put(data, "hourlyRate", self.hourly_rate)
        return data
