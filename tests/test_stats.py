"""Tests for focuscycle/stats.py: archive statistics."""

from datetime import datetime, timedelta, timezone

from conftest import NOW
from focuscycle.fileio import append_jsonl
from focuscycle.stats import break_compliance, stats_month, stats_today, stats_week
from focuscycle.work import start_work, stop_work


def _session(workspace, start, minutes):
    start_work(root=workspace, now=start)
    stop_work(root=workspace, now=start + timedelta(minutes=minutes), auto_break=False)


def test_empty(workspace):
    stats = stats_today(workspace, now=NOW)
    assert stats.sessions == 0
    assert stats.total_duration_seconds == 0
    assert stats.pomodoros == 0


def test_today_week_month(workspace):
    # NOW is Wednesday 2026-10-14.
    _session(workspace, datetime(2026, 10, 1, 9, tzinfo=timezone.utc), 25)
    _session(workspace, datetime(2026, 10, 12, 9, tzinfo=timezone.utc), 25)
    _session(workspace, NOW - timedelta(hours=2), 25)
    _session(workspace, NOW - timedelta(hours=1), 20)

    today = stats_today(workspace, now=NOW)
    assert today.sessions == 2
    assert today.total_duration_seconds == 45 * 60
    assert today.pomodoros == 4

    week = stats_week(workspace, now=NOW)
    assert week.start_date == "2026-10-12"
    assert week.sessions == 3

    month = stats_month(workspace, now=NOW)
    assert month.sessions == 4
    assert month.average_per_day_seconds == (95 * 60) // 14


def test_week_spans_months(workspace):
    now = datetime(2026, 10, 2, 12, tzinfo=timezone.utc)  # Friday
    _session(workspace, datetime(2026, 9, 29, 9, tzinfo=timezone.utc), 25)
    _session(workspace, datetime(2026, 10, 1, 9, tzinfo=timezone.utc), 25)
    assert stats_week(workspace, now=now).sessions == 2
    assert stats_month(workspace, now=now).sessions == 1


def test_break_compliance(workspace):
    for i in range(4):
        _session(workspace, NOW + timedelta(hours=i), 25)
    path = workspace / "archive" / "breaks_2026-10.jsonl"
    append_jsonl(path, {"duration_seconds": 300, "planned_duration_seconds": 300, "completed_fully": True})
    append_jsonl(path, {"duration_seconds": 100, "planned_duration_seconds": 300, "completed_fully": False})

    report = break_compliance(workspace, now=NOW)
    assert report["work_sessions"] == 4
    assert report["breaks_taken"] == 2
    assert report["breaks_completed_fully"] == 1
    assert report["completion_rate_percent"] == 50
    assert report["compliance_rate_percent"] == 50
    assert report["avg_break_duration_seconds"] == 200
    assert report["avg_planned_duration_seconds"] == 300


def test_break_compliance_empty(workspace):
    report = break_compliance(workspace, now=NOW)
    assert report["breaks_taken"] == 0
    assert report["compliance_rate_percent"] == 0


def test_bad_archive_records_are_skipped(workspace):
    _session(workspace, NOW - timedelta(hours=1), 25)
    append_jsonl(
        workspace / "archive" / "sessions_2026-10.jsonl",
        {"start_time": "2026-10-14T10:00:00Z", "duration_seconds": "x"},
    )
    append_jsonl(workspace / "archive" / "breaks_2026-10.jsonl", {"planned_duration_seconds": "lots"})

    today = stats_today(workspace, now=NOW)
    assert today.sessions == 1
    assert today.total_duration_seconds == 25 * 60

    report = break_compliance(workspace, now=NOW)
    assert report["work_sessions"] == 1
    assert report["breaks_taken"] == 0
