"""Hub snapshot and mutation patches - no I/O dependencies.

Every function returns a new HubState; callers own persistence.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from .models import Budget, ChecklistItem, Creator, Event, Project, ProjectStatus

logger = logging.getLogger(__name__)


@dataclass
class HubState:
    """Consistent snapshot of everything the core computes over."""

    events: list[Event] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    budget: Budget = field(default_factory=Budget)
    sent_notifications: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "HubState":
        return cls(
            events=[Event.from_dict(e) for e in data.get("events") or []],
            projects=[Project.from_dict(p) for p in data.get("projects") or []],
            budget=Budget.from_dict(data.get("budget")),
            sent_notifications=dict(data.get("sentNotifications") or {}),
        )

    def to_dict(self) -> dict:
        return {
            "events": [e.to_dict() for e in self.events],
            "projects": [p.to_dict() for p in self.projects],
            "budget": self.budget.to_dict(),
            "sentNotifications": dict(self.sent_notifications),
        }


@dataclass
class StateUpdate:
    """
    A patch proposed by the assistant.

    Updated records are partial documents keyed by id; their fields are merged
    over the stored record.
    """

    message: str = ""
    new_events: list[dict] = field(default_factory=list)
    updated_events: list[dict] = field(default_factory=list)
    deleted_events: list[str] = field(default_factory=list)
    new_projects: list[dict] = field(default_factory=list)
    updated_projects: list[dict] = field(default_factory=list)
    deleted_projects: list[str] = field(default_factory=list)
    budget_update: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "StateUpdate":
        return cls(
            message=data.get("message", "") or "",
            new_events=list(data.get("newEvents") or []),
            updated_events=list(data.get("updatedEvents") or []),
            deleted_events=[str(i) for i in data.get("deletedEvents") or []],
            new_projects=list(data.get("newProjects") or []),
            updated_projects=list(data.get("updatedProjects") or []),
            deleted_projects=[str(i) for i in data.get("deletedProjects") or []],
            budget_update=dict(data.get("budgetUpdate") or {}),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.new_events
            or self.updated_events
            or self.deleted_events
            or self.new_projects
            or self.updated_projects
            or self.deleted_projects
            or self.budget_update
        )


def _parse_all(docs: list, parse, kind: str) -> list:
    """Parse new records, skipping documents that cannot form one."""
    records = []
    for doc in docs:
        try:
            records.append(parse(doc))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Skipping malformed new {kind}: {e!r}")
    return records


def _merge(records: list, patches: list[dict], parse) -> list:
    """Shallow-merge partial documents over records with the same id."""
    by_id = {}
    for patch in patches:
        if isinstance(patch, dict) and "id" in patch:
            by_id[str(patch["id"])] = patch

    merged = []
    for record in records:
        patch = by_id.pop(record.id, None)
        if not patch:
            merged.append(record)
            continue
        try:
            merged.append(parse({**record.to_dict(), **patch}))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Keeping {record.id} unchanged, malformed update: {e!r}")
            merged.append(record)

    for unknown in by_id:
        logger.debug(f"Ignoring update for unknown id {unknown}")
    return merged


def _drop(records: list, ids: list[str]) -> list:
    doomed = set(ids)
    return [r for r in records if r.id not in doomed]


def apply_update(
    state: HubState,
    update: StateUpdate,
    creator: Creator | None = None,
    now: datetime | None = None,
) -> HubState:
    """
    Apply an assistant patch to a snapshot.

    New events without provenance are stamped with creator and now when a
    creator is given. The budget is shallow-merged, so an expenses list in
    the patch replaces the stored one. Records or budget fields that cannot
    be parsed are skipped and the stored values kept.
    """
    new_events = _parse_all(update.new_events, Event.from_dict, "event")
    if creator is not None:
        stamp = now or datetime.now()
        new_events = [
            e if e.created_by else replace(e, created_by=creator, created_at=stamp)
            for e in new_events
        ]

    events = state.events + new_events
    events = _merge(events, update.updated_events, Event.from_dict)
    events = _drop(events, update.deleted_events)

    projects = state.projects + _parse_all(update.new_projects, Project.from_dict, "project")
    projects = _merge(projects, update.updated_projects, Project.from_dict)
    projects = _drop(projects, update.deleted_projects)

    budget = state.budget
    if update.budget_update:
        try:
            budget = Budget.from_dict({**state.budget.to_dict(), **update.budget_update})
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Keeping budget unchanged, malformed update: {e!r}")

    return replace(state, events=events, projects=projects, budget=budget)


def delete_project(state: HubState, project_id: str) -> HubState:
    """Remove a project and unlink the events that pointed at it."""
    events = [replace(e, project_id=None) if e.project_id == project_id else e for e in state.events]
    projects = [p for p in state.projects if p.id != project_id]
    return replace(state, events=events, projects=projects)


def _toggle(items: list[ChecklistItem], item_id: str) -> list[ChecklistItem]:
    return [replace(i, done=not i.done) if i.id == item_id else i for i in items]


def _all_done(items: list[ChecklistItem]) -> bool:
    return bool(items) and all(i.done for i in items)


def toggle_project_item(state: HubState, project_id: str, item_id: str) -> HubState:
    """
    Flip a project checklist item.

    A project whose checklist becomes fully done is completed; a completed
    project with an open item goes back to ongoing.
    """
    projects = []
    for p in state.projects:
        if p.id != project_id:
            projects.append(p)
            continue
        checklist = _toggle(p.checklist, item_id)
        if _all_done(checklist):
            status = ProjectStatus.COMPLETED
        elif p.status is ProjectStatus.COMPLETED:
            status = ProjectStatus.ONGOING
        else:
            status = p.status
        projects.append(replace(p, checklist=checklist, status=status))
    return replace(state, projects=projects)


def toggle_event_task(state: HubState, event_id: str, task_id: str) -> HubState:
    """Flip an event sub-task; the event is completed when all are done."""
    events = []
    for e in state.events:
        if e.id != event_id:
            events.append(e)
            continue
        tasks = _toggle(e.tasks, task_id)
        events.append(replace(e, tasks=tasks, completed=_all_done(tasks)))
    return replace(state, events=events)
