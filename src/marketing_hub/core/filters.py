"""Tag, assignee and period filtering - no I/O dependencies."""

from datetime import datetime

from .models import Event, EventKind, Project
from .recurrence import sort_by_start

# Derived from the event kind at filter time, never stored on the event
SYNTHETIC_TAGS = {
    EventKind.HOLIDAY: "Festivo",
    EventKind.CAMPAIGN: "Campaña",
}


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def projects_by_id(projects: list[Project]) -> dict[str, Project]:
    return {p.id: p for p in projects}


def event_tags(event: Event, projects: dict[str, Project]) -> list[str]:
    """Own tags, linked project tags and the synthetic kind tag."""
    tags = list(event.tags)
    project = projects.get(event.project_id) if event.project_id else None
    if project:
        tags.extend(project.tags)
    synthetic = SYNTHETIC_TAGS.get(event.kind)
    if synthetic:
        tags.append(synthetic)
    return _dedupe(tags)


def event_assignees(event: Event, projects: dict[str, Project]) -> list[str]:
    """Own assignees plus those of the linked project."""
    assignees = list(event.assignees)
    project = projects.get(event.project_id) if event.project_id else None
    if project:
        assignees.extend(project.assignees)
    return _dedupe(assignees)


def matches_any(values: list[str], selected: list[str] | None) -> bool:
    """An empty selection matches everything."""
    if not selected:
        return True
    return any(v in selected for v in values)


def filter_events(
    events: list[Event],
    projects: list[Project],
    tags: list[str] | None = None,
    assignees: list[str] | None = None,
) -> list[Event]:
    """
    Filter events by tag and assignee selection.

    Pure function - no I/O. Linked projects contribute their tags and
    assignees. Result is sorted by start.
    """
    lookup = projects_by_id(projects)
    matched = [
        e
        for e in events
        if matches_any(event_tags(e, lookup), tags)
        and matches_any(event_assignees(e, lookup), assignees)
    ]
    return sort_by_start(matched)


def filter_projects(
    projects: list[Project],
    tags: list[str] | None = None,
    assignees: list[str] | None = None,
) -> list[Project]:
    """Filter projects by their own tags and assignees."""
    return [p for p in projects if matches_any(p.tags, tags) and matches_any(p.assignees, assignees)]


def in_months(moment: datetime, year: int, start_month: int, end_month: int) -> bool:
    """Whether moment falls in year between 0-based months start and end inclusive."""
    return moment.year == year and start_month <= moment.month - 1 <= end_month


def known_tags(events: list[Event], projects: list[Project]) -> list[str]:
    """All stored tags, sorted."""
    found = {t for e in events for t in e.tags}
    found.update(t for p in projects for t in p.tags)
    return sorted(found)


def known_assignees(events: list[Event], projects: list[Project]) -> list[str]:
    """All assignees, sorted."""
    found = {a for e in events for a in e.assignees}
    found.update(a for p in projects for a in p.assignees)
    return sorted(found)
