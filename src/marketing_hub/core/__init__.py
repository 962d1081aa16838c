"""Functional core - pure business logic with no I/O."""

from .models import Budget, Event, EventKind, Frequency, Project, ProjectStatus, Recurrence
from .recurrence import expand, expand_year, sort_by_start
from .cost import (
    calculate_cost,
    format_duration,
    mix_color,
    parse_duration_to_hours,
    parse_duration_to_minutes,
)
from .filters import filter_events, filter_projects
from .metrics import Metrics, MonthRange, compute_metrics, project_factor
from .state import HubState, StateUpdate, apply_update
from .reminders import Reminder, due_reminders

__all__ = [
    # Models
    "Budget",
    "Event",
    "EventKind",
    "Frequency",
    "Project",
    "ProjectStatus",
    "Recurrence",
    # Recurrence
    "expand",
    "expand_year",
    "sort_by_start",
    # Cost
    "calculate_cost",
    "format_duration",
    "mix_color",
    "parse_duration_to_hours",
    "parse_duration_to_minutes",
    # Filters
    "filter_events",
    "filter_projects",
    # Metrics
    "Metrics",
    "MonthRange",
    "compute_metrics",
    "project_factor",
    # State
    "HubState",
    "StateUpdate",
    "apply_update",
    # Reminders
    "Reminder",
    "due_reminders",
]
