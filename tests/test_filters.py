"""Tests for tag, assignee and period filtering."""

from datetime import datetime

import pytest

from marketing_hub.core.filters import (
    event_assignees,
    event_tags,
    filter_events,
    filter_projects,
    in_months,
    known_assignees,
    known_tags,
    matches_any,
    projects_by_id,
)
from marketing_hub.core.models import Event, EventKind, Project


@pytest.fixture
def projects():
    return [
        Project(id="p1", title="Web relaunch", tags=["Web"], assignees=["Marta"]),
        Project(id="p2", title="Newsletter", tags=["Email", "Web"]),
    ]


@pytest.fixture
def events():
    return [
        Event(id="b", title="Banner", date=datetime(2024, 3, 2), tags=["Diseño"], assignees=["Luis"]),
        Event(id="a", title="Kickoff", date=datetime(2024, 3, 1), project_id="p1"),
        Event(id="h", title="Navidad", date=datetime(2024, 12, 25), kind=EventKind.HOLIDAY),
        Event(
            id="c",
            title="Rebajas",
            date=datetime(2024, 7, 1),
            end_date=datetime(2024, 7, 31),
            kind=EventKind.CAMPAIGN,
            tags=["Ventas"],
        ),
    ]


class TestEventTags:
    def test_includes_project_tags(self, events, projects):
        assert event_tags(events[1], projects_by_id(projects)) == ["Web"]

    def test_synthetic_kind_tags(self, events, projects):
        lookup = projects_by_id(projects)
        assert event_tags(events[2], lookup) == ["Festivo"]
        assert event_tags(events[3], lookup) == ["Ventas", "Campaña"]

    def test_deduplicates(self, projects):
        event = Event(id="x", title="x", date=datetime(2024, 1, 1), tags=["Web"], project_id="p2")
        assert event_tags(event, projects_by_id(projects)) == ["Web", "Email"]

    def test_unknown_project_is_ignored(self):
        event = Event(id="x", title="x", date=datetime(2024, 1, 1), tags=["A"], project_id="gone")
        assert event_tags(event, {}) == ["A"]


class TestEventAssignees:
    def test_union_with_project(self, events, projects):
        event = Event(id="x", title="x", date=datetime(2024, 1, 1), assignees=["Luis"], project_id="p1")
        assert event_assignees(event, projects_by_id(projects)) == ["Luis", "Marta"]


class TestFilterEvents:
    def test_empty_selection_keeps_all_sorted(self, events, projects):
        result = filter_events(events, projects)
        assert [e.id for e in result] == ["a", "b", "c", "h"]

    def test_by_project_tag(self, events, projects):
        assert [e.id for e in filter_events(events, projects, tags=["Web"])] == ["a"]

    def test_by_synthetic_tag(self, events, projects):
        assert [e.id for e in filter_events(events, projects, tags=["Festivo"])] == ["h"]
        assert [e.id for e in filter_events(events, projects, tags=["Campaña"])] == ["c"]

    def test_by_assignee_through_project(self, events, projects):
        assert [e.id for e in filter_events(events, projects, assignees=["Marta"])] == ["a"]

    def test_tag_and_assignee_combined(self, events, projects):
        assert filter_events(events, projects, tags=["Diseño"], assignees=["Marta"]) == []

    def test_same_start_ordered_by_id(self, projects):
        same = datetime(2024, 5, 1, 9)
        events = [Event(id=i, title=i, date=same) for i in ("z", "m", "a")]
        assert [e.id for e in filter_events(events, projects)] == ["a", "m", "z"]


class TestFilterProjects:
    def test_by_tag(self, projects):
        assert [p.id for p in filter_projects(projects, tags=["Email"])] == ["p2"]

    def test_by_assignee(self, projects):
        assert [p.id for p in filter_projects(projects, assignees=["Marta"])] == ["p1"]

    def test_no_selection(self, projects):
        assert len(filter_projects(projects)) == 2


class TestHelpers:
    def test_matches_any(self):
        assert matches_any([], None) is True
        assert matches_any(["a"], ["b"]) is False
        assert matches_any(["a", "b"], ["b"]) is True

    def test_in_months_is_zero_based(self):
        march = datetime(2024, 3, 15)
        assert in_months(march, 2024, 2, 2) is True
        assert in_months(march, 2024, 0, 1) is False
        assert in_months(march, 2023, 0, 11) is False

    def test_known_tags_and_assignees(self, events, projects):
        assert known_tags(events, projects) == ["Diseño", "Email", "Ventas", "Web"]
        assert known_assignees(events, projects) == ["Luis", "Marta"]
