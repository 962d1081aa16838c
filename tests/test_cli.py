"""Tests for the hub command line."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from marketing_hub.cli import main
from marketing_hub.config import Config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config(tmp_path):
    config = Config(snapshot_file=str(tmp_path / "state.json"), timezone="UTC")
    with patch("marketing_hub.cli.load_config", return_value=config):
        yield config


@pytest.fixture
def stored(config):
    config.snapshot_path.write_text(json.dumps({
        "events": [
            {
                "id": "e1",
                "title": "Stand-up",
                "date": "2024-01-01T10:00:00",
                "duration": "15m",
                "recurrence": {"frequency": "weekly", "daysOfWeek": [1, 3]},
            },
            {"id": "e2", "title": "Shooting", "date": "2024-03-10T10:00:00", "duration": "2h", "tags": ["Foto"]},
        ],
        "projects": [
            {
                "id": "p1",
                "title": "Web",
                "checklist": [{"id": "c1", "label": "Diseño"}, {"id": "c2", "label": "Copy"}],
            },
        ],
    }))
    return config


class TestTags:
    def test_lists_known_labels(self, runner, stored):
        result = runner.invoke(main, ["tags"])
        assert result.output.splitlines() == ["Tags: Foto", "Assignees: -"]

    def test_json(self, runner, stored):
        data = json.loads(runner.invoke(main, ["tags", "--json"]).output)
        assert data == {"tags": ["Foto"], "assignees": []}


class TestDuration:
    def test_normalizes(self, runner):
        result = runner.invoke(main, ["duration", "1h 30m"])
        assert result.exit_code == 0
        assert result.output.strip() == "1h 30m (1.5h, 90 min)"


class TestCost:
    def test_head_count(self, runner, config):
        result = runner.invoke(main, ["cost", "2h", "--people", "2"])
        assert result.output.strip() == "320"

    def test_manual_and_force(self, runner, config):
        assert runner.invoke(main, ["cost", "2h", "--manual", "100"]).output.strip() == "100"
        assert runner.invoke(main, ["cost", "2h", "--manual", "100", "--force", "-r", "10"]).output.strip() == "20"


class TestMix:
    def test_mixes(self, runner, config):
        assert runner.invoke(main, ["mix", "#ff0000", "#0000ff"]).output.strip() == "#800080"

    def test_fallback(self, runner, config):
        assert runner.invoke(main, ["mix"]).output.strip() == config.fallback_color


class TestExpand:
    def test_groups_by_day(self, runner, stored):
        result = runner.invoke(main, ["expand", "--from", "2024-01-01", "--to", "2024-01-03"])
        assert result.exit_code == 0
        assert "### Monday, January 01" in result.output
        assert "### Wednesday, January 03" in result.output
        assert "10:00 Stand-up (15m)" in result.output

    def test_json(self, runner, stored):
        result = runner.invoke(main, ["expand", "--from", "2024-01-01", "--to", "2024-01-14", "--json"])
        data = json.loads(result.output)
        assert [e["id"] for e in data][:2] == ["e1_1704103200000", "e1_1704276000000"]
        assert len(data) == 4

    def test_empty_window(self, runner, stored):
        result = runner.invoke(main, ["expand", "--from", "2024-02-01", "--to", "2024-02-01", "--tag", "Foto"])
        assert "No events in this window." in result.output

    def test_broken_snapshot(self, runner, config):
        config.snapshot_path.write_text("{")
        result = runner.invoke(main, ["expand", "--from", "2024-01-01"])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestMetrics:
    def test_json(self, runner, stored):
        result = runner.invoke(main, ["metrics", "-y", "2024", "-m", "2-2", "--tag", "Foto", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["months_selected"] == 1
        assert data["estimated_cost"] == 160
        assert list(data["by_tag"]) == ["Foto"]

    def test_text(self, runner, stored):
        result = runner.invoke(main, ["metrics", "--year", "2024"])
        assert "Estimated cost:" in result.output
        assert "### By tag" in result.output

    def test_bad_month_range(self, runner, stored):
        result = runner.invoke(main, ["metrics", "-m", "5-2"])
        assert result.exit_code == 2


class TestApply:
    def test_applies_patch_file(self, runner, stored, tmp_path):
        patch_file = tmp_path / "patch.json"
        patch_file.write_text(json.dumps({"deletedEvents": ["e2"], "newProjects": [{"id": "p2", "title": "Blog"}]}))

        result = runner.invoke(main, ["apply", str(patch_file)])

        assert result.exit_code == 0
        assert result.output.strip() == "1 events, 2 projects."

    @pytest.mark.parametrize(
        "patch_doc",
        [
            {"newEvents": [{"id": "x", "title": "no date"}]},
            {"newProjects": [{"title": "no id"}]},
            {"updatedEvents": [{"id": "e1", "date": "whenever"}]},
        ],
    )
    def test_malformed_records_are_skipped(self, runner, stored, tmp_path, patch_doc):
        patch_file = tmp_path / "patch.json"
        patch_file.write_text(json.dumps(patch_doc))

        result = runner.invoke(main, ["apply", str(patch_file)])

        assert result.exception is None
        assert result.exit_code == 0
        assert result.output.strip() == "2 events, 1 projects."

    def test_malformed_patch_shape_fails_cleanly(self, runner, stored, tmp_path):
        patch_file = tmp_path / "patch.json"
        patch_file.write_text(json.dumps({"budgetUpdate": "cheaper"}))

        result = runner.invoke(main, ["apply", str(patch_file)])

        assert result.exit_code == 1
        assert "malformed patch" in result.output

    def test_rejects_non_object(self, runner, config, tmp_path):
        patch_file = tmp_path / "patch.json"
        patch_file.write_text("[]")
        result = runner.invoke(main, ["apply", str(patch_file)])
        assert result.exit_code == 1


class TestCheck:
    def test_toggles(self, runner, stored):
        result = runner.invoke(main, ["check", "p1", "c1"])
        assert result.output.strip() == "Web: 1/2 done (ongoing)"

        result = runner.invoke(main, ["check", "p1", "c2"])
        assert result.output.strip() == "Web: 2/2 done (completed)"

    def test_unknown_project(self, runner, stored):
        result = runner.invoke(main, ["check", "nope", "c1"])
        assert result.exit_code == 1


class TestRemind:
    def test_nothing_due(self, runner, config):
        result = runner.invoke(main, ["remind", "--dry-run"])
        assert result.output.strip() == "No reminders due."
