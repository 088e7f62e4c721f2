"""Tests for focuscycle/breaks.py: break session lifecycle."""

import json
from datetime import timedelta

import pytest

from conftest import NOW
from focuscycle.breaks import (
    break_status,
    can_skip,
    completed_fully,
    mark_auto_completed,
    start_break,
    stop_break,
)
from focuscycle.errors import AlreadyActiveError, InvalidArgumentError, NoActiveSessionError
from focuscycle.fileio import read_jsonl
from focuscycle.models import BreakType, SkipMode


def _state(workspace):
    return json.loads((workspace / "current_break.json").read_text(encoding="utf-8"))


def test_completed_fully_threshold():
    assert completed_fully(240, 300) is True
    assert completed_fully(239, 300) is False
    assert completed_fully(400, 300) is True


def test_background_break_spawns_timer(workspace, launched):
    result = start_break(300, BreakType.SHORT, blocking=False, root=workspace, now=NOW)
    assert result.blocking is False
    assert _state(workspace)["blocking_mode"] is False
    assert launched[-1][4] == "break_complete"
    argv = launched[-1]
    assert argv[argv.index("--delay") + 1] == "300"
    assert (workspace / "break_timer.pid").exists()


def test_auto_select_from_count(workspace):
    (workspace / "pomodoro_count").write_text("8\n", encoding="utf-8")
    result = start_break(blocking=False, root=workspace, now=NOW)
    assert result.session.type is BreakType.LONG
    assert result.session.duration_seconds == 900


def test_auto_select_short(workspace):
    (workspace / "pomodoro_count").write_text("1\n", encoding="utf-8")
    result = start_break(blocking=False, root=workspace, now=NOW)
    assert result.session.type is BreakType.SHORT
    assert result.session.duration_seconds == 300


def test_duration_without_type_is_custom(workspace):
    result = start_break(120, blocking=False, root=workspace, now=NOW)
    assert result.session.type is BreakType.CUSTOM
    assert _state(workspace)["type"] == "custom"


def test_type_without_duration(workspace):
    result = start_break(break_type="long", blocking=False, root=workspace, now=NOW)
    assert result.session.duration_seconds == 900


@pytest.mark.parametrize("duration", [0, -5])
def test_invalid_duration(workspace, duration):
    with pytest.raises(InvalidArgumentError):
        start_break(duration, blocking=False, root=workspace)
    assert not (workspace / "current_break.json").exists()


def test_invalid_type(workspace):
    with pytest.raises(InvalidArgumentError):
        start_break(60, "nap", blocking=False, root=workspace)


def test_already_active(workspace):
    start_break(300, blocking=False, root=workspace, now=NOW)
    before = _state(workspace)
    with pytest.raises(AlreadyActiveError):
        start_break(60, blocking=False, root=workspace, now=NOW)
    assert _state(workspace) == before


def test_blocking_without_tty_falls_back(workspace, launched):
    ran = []
    result = start_break(
        300, BreakType.SHORT, blocking=True, root=workspace, now=NOW,
        countdown=lambda *args: ran.append(args) or True, interactive=False,
    )
    assert ran == []
    assert result.blocking is False
    assert launched[-1][4] == "break_complete"


def test_blocking_without_countdown_falls_back(workspace):
    result = start_break(300, blocking=True, root=workspace, now=NOW, interactive=True)
    assert result.blocking is False


def test_blocking_countdown_stops_break(workspace, launched):
    seen = []

    def countdown(duration, break_type, skip_mode):
        seen.append((duration, break_type, skip_mode))
        assert (workspace / "current_break.json").exists()
        return True

    result = start_break(
        60, BreakType.SHORT, blocking=True, root=workspace, countdown=countdown, interactive=True,
    )
    assert seen == [(60, BreakType.SHORT, SkipMode.ALWAYS)]
    assert result.blocking is True
    assert result.stopped is not None
    assert not (workspace / "current_break.json").exists()
    assert launched == []


def test_blocking_countdown_interrupted(workspace):
    def countdown(duration, break_type, skip_mode):
        raise KeyboardInterrupt

    result = start_break(60, blocking=True, root=workspace, countdown=countdown, interactive=True)
    assert result.stopped is not None
    assert result.stopped.record.completed_fully is False


def test_stop_without_break(workspace):
    with pytest.raises(NoActiveSessionError):
        stop_break(root=workspace)


@pytest.mark.parametrize("seconds,expected", [(240, True), (239, False)])
def test_stop_classifies_and_tracks(workspace, configure, seconds, expected):
    configure(strict_track_breaks=True)
    start_break(300, BreakType.SHORT, blocking=False, root=workspace, now=NOW)
    result = stop_break(root=workspace, now=NOW + timedelta(seconds=seconds))

    assert result.record.completed_fully is expected
    assert not (workspace / "current_break.json").exists()
    assert not (workspace / "break_timer.pid").exists()
    records = list(read_jsonl(workspace / "archive" / "breaks_2026-10.jsonl"))
    assert records == [result.record.to_dict()]
    assert records[0]["planned_duration_seconds"] == 300


def test_stop_without_tracking_writes_nothing(workspace):
    start_break(300, blocking=False, root=workspace, now=NOW)
    stop_break(root=workspace, now=NOW + timedelta(minutes=5))
    assert not (workspace / "archive" / "breaks_2026-10.jsonl").exists()


def test_status_remaining_clamped(workspace):
    start_break(300, blocking=False, root=workspace, now=NOW)
    status = break_status(workspace, now=NOW + timedelta(seconds=100))
    assert status.elapsed_seconds == 100
    assert status.remaining_seconds == 200
    late = break_status(workspace, now=NOW + timedelta(hours=1))
    assert late.remaining_seconds == 0
    assert break_status(workspace, now=NOW - timedelta(seconds=10)).elapsed_seconds == 0


def test_auto_complete_marks_but_keeps_record(workspace, notifications):
    start_break(300, blocking=False, root=workspace, now=NOW)
    assert mark_auto_completed(workspace) is True
    assert _state(workspace)["auto_completed"] is True
    assert break_status(workspace).auto_completed is True
    assert notifications[-1][0] == "⏰ Break Complete!"


def test_auto_complete_after_stop_is_noop(workspace):
    start_break(300, blocking=False, root=workspace, now=NOW)
    stop_break(root=workspace, now=NOW + timedelta(minutes=5))
    assert mark_auto_completed(workspace) is False
    assert not (workspace / "current_break.json").exists()


def test_can_skip():
    assert can_skip(SkipMode.ALWAYS, BreakType.LONG, 0, 900)
    assert not can_skip(SkipMode.NEVER, BreakType.SHORT, 299, 300)
    assert not can_skip(SkipMode.AFTER50, BreakType.SHORT, 149, 300)
    assert can_skip(SkipMode.AFTER50, BreakType.SHORT, 150, 300)
    assert can_skip(SkipMode.TYPE_BASED, BreakType.SHORT, 0, 300)
    assert not can_skip(SkipMode.TYPE_BASED, BreakType.LONG, 100, 900)
    assert can_skip(SkipMode.TYPE_BASED, BreakType.LONG, 450, 900)
