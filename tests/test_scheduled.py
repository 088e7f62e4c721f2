"""Tests for focuscycle/scheduled.py: the scheduled break daemon."""

import json
import os

from conftest import NOW
from focuscycle.breaks import is_break_active, start_break
from focuscycle.scheduled import (
    scheduled_status,
    scheduled_tick,
    start_scheduled_daemon,
    stop_scheduled_daemon,
)
from focuscycle.work import start_work


def _mark_running(workspace):
    """Point the handle at this test process so it looks alive."""
    path = workspace / "scheduled_break.pid"
    path.write_text(json.dumps({"pid": os.getpid(), "owner": "scheduled"}), encoding="utf-8")


def test_disabled_by_default(workspace, launched):
    assert start_scheduled_daemon(workspace) is None
    assert launched == []
    assert scheduled_status(workspace).enabled is False


def test_start_spawns_loop(workspace, configure, launched):
    configure(break_scheduled_enabled=True, break_scheduled_interval=90)
    handle = start_scheduled_daemon(workspace)
    assert handle is not None
    argv = launched[0]
    assert argv[3:5] == ["repeat", "scheduled_break"]
    assert argv[argv.index("--interval") + 1] == str(90 * 60)
    assert (workspace / "scheduled_break.pid").exists()


def test_stale_handle_is_not_running(workspace, configure, launched):
    configure(break_scheduled_enabled=True)
    (workspace / "scheduled_break.pid").write_text(
        json.dumps({"pid": 2**22 + 7, "owner": "scheduled"}), encoding="utf-8"
    )
    assert scheduled_status(workspace).running is False
    assert start_scheduled_daemon(workspace) is not None
    assert len(launched) == 1


def test_already_running(workspace, configure, launched):
    configure(break_scheduled_enabled=True)
    _mark_running(workspace)
    assert start_scheduled_daemon(workspace) is None
    assert launched == []
    status = scheduled_status(workspace)
    assert status.running and status.pid == os.getpid()


def test_stop_removes_handle(workspace, configure):
    configure(break_scheduled_enabled=True)
    start_scheduled_daemon(workspace)
    stop_scheduled_daemon(workspace)
    assert not (workspace / "scheduled_break.pid").exists()
    assert stop_scheduled_daemon(workspace) is False


def test_tick_ends_without_handle(workspace):
    assert scheduled_tick(workspace) is False


def test_tick_starts_short_break(workspace, configure, notifications, launched):
    configure(break_scheduled_enabled=True, break_short=240)
    start_scheduled_daemon(workspace)

    assert scheduled_tick(workspace) is True
    assert is_break_active(workspace)
    state = json.loads((workspace / "current_break.json").read_text(encoding="utf-8"))
    assert state["type"] == "short"
    assert state["duration_seconds"] == 240
    assert state["blocking_mode"] is False
    assert notifications[0][0] == "⏰ Scheduled Break Time!"
    assert launched[-1][4] == "break_complete"


def test_tick_skips_during_work(workspace, configure, notifications):
    configure(break_scheduled_enabled=True)
    start_scheduled_daemon(workspace)
    start_work(root=workspace, now=NOW)
    notifications.clear()

    assert scheduled_tick(workspace) is True
    assert not is_break_active(workspace)
    assert notifications == []


def test_tick_skips_during_break(workspace, configure):
    configure(break_scheduled_enabled=True)
    start_scheduled_daemon(workspace)
    start_break(600, blocking=False, root=workspace, now=NOW)

    assert scheduled_tick(workspace) is True
    state = json.loads((workspace / "current_break.json").read_text(encoding="utf-8"))
    assert state["duration_seconds"] == 600
