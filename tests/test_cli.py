from datetime import datetime

import pytest
from typer.testing import CliRunner

from conftest import UTC, outage
from outage_monitor import cli
from outage_monitor.ledger import OutageLedger

runner = CliRunner()
ENV = {"COLUMNS": "200"}


@pytest.fixture
def db(tmp_path):
    path = tmp_path / "outages.db"
    with OutageLedger(path) as led:
        led.initialize()
        led.append(outage(datetime(2024, 1, 1, tzinfo=UTC), 300))
    return path


def invoke(db, *args):
    return runner.invoke(cli.cli_app, ["--db", str(db), *args], env=ENV)


def test_export_to_stdout(db):
    result = invoke(db, "export")
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "Start Time,End Time,Duration (seconds)",
        "2024-01-01T00:00:00+00:00,2024-01-01T00:05:00+00:00,300",
    ]


def test_export_to_file(db, tmp_path):
    out = tmp_path / "outages.csv"
    result = invoke(db, "export", str(out))
    assert result.exit_code == 0, result.output
    assert "Data exported to" in result.stdout
    assert out.read_text().startswith("Start Time,End Time,Duration (seconds)\n")


def test_stats(db):
    result = invoke(db, "stats")
    assert result.exit_code == 0, result.output
    assert "Total number of outages" in result.stdout
    assert "300 seconds" in result.stdout
    assert "300.00 seconds" in result.stdout


def test_stats_on_fresh_database(tmp_path):
    result = invoke(tmp_path / "new.db", "stats")
    assert result.exit_code == 0, result.output
    assert "Total number of outages" in result.stdout
    assert (tmp_path / "new.db").exists()


def test_recent(db):
    result = invoke(db, "recent", "--limit", "3")
    assert result.exit_code == 0, result.output
    assert "Duration (seconds)" in result.stdout
    assert "300" in result.stdout


def test_recent_bad_limit_falls_back(db):
    result = invoke(db, "recent", "-l", "lots")
    assert result.exit_code == 0, result.output
    assert "300" in result.stdout


def test_recent_zero_limit(db):
    result = invoke(db, "recent", "-l", "0")
    assert result.exit_code == 0, result.output
    assert "No outages recorded yet." in result.stdout


def test_cost_report(db):
    result = invoke(db, "cost", "310", "--currency", "$")
    assert result.exit_code == 0, result.output
    # 300s of a 31 day month at 310/month
    assert "January" in result.stdout
    assert "00:05:00" in result.stdout
    assert "$0.035" in result.stdout
    assert "$0.417/h" in result.stdout
    assert "Total cost of outages" in result.stdout


def test_cost_with_no_outages(tmp_path):
    result = invoke(tmp_path / "new.db", "cost", "50")
    assert result.exit_code == 0, result.output
    assert "No outages recorded yet." in result.stdout


def test_cost_requires_rate(db):
    result = invoke(db, "cost")
    assert result.exit_code != 0


def test_cost_rejects_negative_rate(db):
    result = invoke(db, "cost", "--", "-5")
    assert result.exit_code == 1
    assert "Monthly rate" in result.output


def test_malformed_row_exits_nonzero(db):
    with OutageLedger(db) as led:
        with led._conn:
            led._conn.execute(
                "INSERT INTO outages (start_time, end_time, duration_seconds) "
                "VALUES ('2024-02-01 10:00', '2024-02-01T10:01:00+00:00', 60)"
            )
    result = invoke(db, "export")
    assert result.exit_code == 1
    assert "Error" in result.output


def test_unopenable_database_exits_nonzero(tmp_path):
    result = invoke(tmp_path / "missing" / "outages.db", "stats")
    assert result.exit_code == 1
    assert "Failed to open database" in result.output


def test_monitor_passes_options(db, monkeypatch):
    calls = []

    def fake_run_monitor(ledger, host, port, interval, timeout, console=None):
        calls.append((host, port, interval, timeout))

    monkeypatch.setattr(cli, "run_monitor", fake_run_monitor)
    result = invoke(db, "monitor", "-i", "1.1.1.1", "-p", "443", "-I", "2", "--log-file", "")
    assert result.exit_code == 0, result.output
    assert calls == [("1.1.1.1", 443, 2.0, 1.0)]

    result = invoke(db, "watch", "--log-file", "")
    assert result.exit_code == 0, result.output
    assert calls[-1] == ("8.8.8.8", 53, 5.0, 1.0)


def test_monitor_rejects_bad_interval(db, monkeypatch):
    monkeypatch.setattr(cli, "run_monitor", lambda *a, **k: None)
    result = invoke(db, "monitor", "-I", "0", "--log-file", "")
    assert result.exit_code == 1
    assert "Interval must be positive" in result.output
