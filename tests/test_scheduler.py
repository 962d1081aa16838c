"""Tests for the reminder scheduler."""

from datetime import datetime
from unittest.mock import MagicMock, patch

from marketing_hub.adapters.json_snapshot import SnapshotError
from marketing_hub.config import Config
from marketing_hub.scheduler import run_reminder_check, setup_scheduler


class TestSetupScheduler:
    def test_adds_minute_job(self):
        scheduler = setup_scheduler(Config(timezone="UTC"))
        job = scheduler.get_job("reminders")
        assert job is not None
        assert job.func is run_reminder_check


class TestRunReminderCheck:
    @patch("marketing_hub.scheduler.check_reminders")
    def test_echoes_due(self, mock_check, capsys):
        reminder = MagicMock()
        reminder.notify_at = datetime(2024, 5, 10, 9, 30)
        reminder.message.return_value = "Webinar: starts in 30 minutes"
        mock_check.return_value = [reminder]

        run_reminder_check(Config())

        assert "[09:30] Webinar: starts in 30 minutes" in capsys.readouterr().out

    @patch("marketing_hub.scheduler.check_reminders", side_effect=SnapshotError("bad"))
    def test_snapshot_errors_are_logged(self, mock_check, caplog):
        run_reminder_check(Config())
        assert "Could not read snapshot" in caplog.text
