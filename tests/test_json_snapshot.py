"""Tests for the JSON snapshot store."""

import json
from datetime import datetime

import pytest

from marketing_hub.adapters.json_snapshot import JsonSnapshotStore, SnapshotError
from marketing_hub.core.models import Budget, Event, Project
from marketing_hub.core.state import HubState


@pytest.fixture
def store(tmp_path):
    return JsonSnapshotStore(tmp_path / "data" / "state.json")


class TestLoad:
    def test_missing_file_is_empty_state(self, store):
        assert store.load() == HubState()

    def test_reads_ui_document(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({
            "events": [{"id": "e1", "title": "Kickoff", "date": "2024-01-01T10:00:00.000Z"}],
            "projects": [{"id": "p1", "title": "Web", "status": "completed"}],
            "budget": {"hourlyRate": 25},
        }))
        state = store.load()
        assert state.events[0].title == "Kickoff"
        assert state.projects[0].status.value == "completed"
        assert state.budget.hourly_rate == 25

    def test_invalid_json(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        with pytest.raises(SnapshotError, match="Invalid JSON"):
            store.load()

    def test_non_object(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[]")
        with pytest.raises(SnapshotError):
            store.load()

    def test_event_without_date(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"events": [{"id": "e1", "title": "?"}]}))
        with pytest.raises(SnapshotError, match="Malformed"):
            store.load()


class TestSave:
    def test_creates_parents_and_reloads(self, store):
        state = HubState(
            events=[Event(id="e1", title="Sesión", date=datetime(2024, 2, 1, 9))],
            projects=[Project(id="p1", title="Web")],
            budget=Budget(hourly_rate=30),
            sent_notifications={"e1_n1_2024-02-01T09:00:00": True},
        )
        store.save(state)

        assert "Sesión" in store.path.read_text()
        assert store.load() == state
