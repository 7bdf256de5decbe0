import json

from cli import main


def test_prints_viewmodel(tmp_path, capsys):
    prefs = str(tmp_path / "prefs.json")
    code = main(["--lat", "21.3891", "--lon", "39.8579", "--tz", "Asia/Riyadh", "--date", "2024-03-15", "--prefs", prefs])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["hijri"]["formatted"] == "5 Ramadan 1445 AH"
    assert json.loads((tmp_path / "prefs.json").read_text())["last_prayer_times"]["date"] == "2024-03-15"


def test_saved_method_and_location_are_used(tmp_path, capsys):
    prefs = str(tmp_path / "prefs.json")
    assert main(["--set-method", "karachi", "--prefs", prefs]) == 0
    assert main(["--set-location", "--lat", "24.8607", "--lon", "67.0011", "--label", "Karachi", "--prefs", prefs]) == 0
    capsys.readouterr()
    assert main(["--tz", "Asia/Karachi", "--date", "2024-03-15", "--prefs", prefs]) == 0
    header = json.loads(capsys.readouterr().out)["header"]
    assert header["method"] == "Karachi"
    assert header["place"]["label"] == "Karachi"


def test_rejects_unknown_method(tmp_path, capsys):
    assert main(["--set-method", "Atlantis", "--prefs", str(tmp_path / "p.json")]) == 2
    assert "Unknown calculation method" in capsys.readouterr().err


class RecordingScheduler:
    scheduled = []

    def __init__(self, callback):
        self.callback = callback

    def schedule(self, reminders):
        RecordingScheduler.scheduled = list(reminders)
        return [str(i) for i in range(len(reminders))]

    def cancel_all(self):
        pass

    def pending(self):
        return []


def test_schedule_reminders_uses_saved_lead_time(tmp_path, capsys, monkeypatch):
    import cli

    prefs = str(tmp_path / "prefs.json")
    assert main(["--set-reminder-minutes", "25", "--prefs", prefs]) == 0
    monkeypatch.setattr(cli, "ThreadedReminderScheduler", RecordingScheduler)
    code = main([
        "--lat", "21.3891", "--lon", "39.8579", "--tz", "Asia/Riyadh",
        "--date", "2099-01-01", "--schedule-reminders", "--prefs", prefs,
    ])
    assert code == 0
    assert "Scheduled 10 reminders" in capsys.readouterr().out
    leads = [r.body for r in RecordingScheduler.scheduled if r.data["type"] == "prayer_reminder"]
    assert len(leads) == 5
    assert all(body.endswith("is in 25 minutes") for body in leads)


def test_rejects_negative_reminder_minutes(tmp_path, capsys):
    assert main(["--set-reminder-minutes", "-5", "--prefs", str(tmp_path / "p.json")]) == 2
    assert "--set-reminder-minutes" in capsys.readouterr().err
