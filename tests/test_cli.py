"""Tests for cli/app.py: command surface and exit codes."""

import json

import pytest
from click.testing import CliRunner

from cli.app import cli


@pytest.fixture
def run(workspace):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args), obj={}, catch_exceptions=False)

    return _run


def test_work_cycle(run, workspace):
    result = run("work", "start", "Write docs")
    assert result.exit_code == 0
    assert "Work session started" in result.output
    assert "Goal: Write docs" in result.output

    status = run("work", "status", "--json")
    data = json.loads(status.output)
    assert data["status"] == "active"
    assert data["goal"] == "Write docs"

    result = run("work", "stop", "--no-break")
    assert result.exit_code == 0
    assert "Pomodoros: 1" in result.output
    assert "Suggested: 5m short break" in result.output


def test_already_active_exit_code(run):
    run("work", "start")
    result = run("work", "start")
    assert result.exit_code == 1
    assert "already active" in result.output


def test_no_active_session_exit_code(run):
    assert run("work", "stop").exit_code == 1
    assert run("break", "stop").exit_code == 1


def test_corrupt_state_exit_code(run, workspace):
    (workspace / "current_session.json").write_text("{", encoding="utf-8")
    result = run("work", "status")
    assert result.exit_code == 6
    assert "Corrupted state file" in result.output


def test_invalid_duration_exit_code(run):
    result = run("break", "start", "--background", "soon")
    assert result.exit_code == 2


def test_break_background(run, workspace):
    result = run("break", "start", "--background", "2m")
    assert result.exit_code == 0
    assert "Custom break" in result.output
    state = json.loads((workspace / "current_break.json").read_text(encoding="utf-8"))
    assert state["duration_seconds"] == 120

    status = json.loads(run("break", "status", "--json").output)
    assert status["type"] == "custom"
    assert run("break", "stop").exit_code == 0


def test_blocking_break_without_tty_runs_in_background(run, workspace):
    result = run("break", "start", "5m", "short")
    assert result.exit_code == 0
    assert "background" in result.output
    assert (workspace / "break_timer.pid").exists()


def test_break_type_without_duration(run, workspace):
    result = run("break", "start", "--background", "long")
    assert result.exit_code == 0
    assert "Long break" in result.output
    state = json.loads((workspace / "current_break.json").read_text(encoding="utf-8"))
    assert state["duration_seconds"] == 900


def test_stop_auto_starts_break(run, workspace):
    run("work", "start")
    result = run("work", "stop")
    assert "Short break started" in result.output
    assert (workspace / "current_break.json").exists()


def test_stats(run):
    run("work", "start")
    run("work", "stop", "--no-break")
    data = json.loads(run("work", "stats", "today", "--json").output)
    assert data["sessions"] == 1
    assert data["pomodoros"] == 1
    assert "Sessions: 1" in run("work", "stats", "month").output


def test_set_mode_and_violations(run, workspace):
    assert run("work", "set-mode", "strict").exit_code == 0
    run("work", "start")
    run("hook", "directory-change", "/x/a", "/x/api")

    result = run("hook", "directory-change", "/x/api", "/x/blog")
    assert result.exit_code == 0
    assert "CONTEXT SWITCH DETECTED" in result.output
    assert "Project switch violation" not in result.output
    assert "Violations: 1" in run("work", "violations").output

    run("work", "reset-violations")
    assert "Violations: 0" in run("work", "violations").output


def test_blocked_switch_exits_nonzero(run):
    run("options", "set", "work_enforcement", "strict")
    run("options", "set", "strict_block_project_switch", "true")
    run("work", "start")
    run("hook", "directory-change", "/x/a", "/x/api")
    result = run("hook", "directory-change", "/x/api", "/x/blog")
    assert result.exit_code == 1
    assert "PROJECT SWITCH BLOCKED" in result.output
    assert "Project switch blocked" not in result.output


def test_break_required_blocks_start(run):
    run("work", "set-mode", "strict")
    run("options", "set", "strict_require_break", "1")
    run("work", "start")
    run("work", "stop", "--no-break")
    result = run("work", "start")
    assert result.exit_code == 1
    assert "Break required" in result.output


def test_corrupt_enforcement_exit_code(run, workspace):
    (workspace / "enforcement.json").write_text(json.dumps({"violations": "lots"}), encoding="utf-8")
    result = run("work", "violations")
    assert result.exit_code == 6
    assert "Corrupted state file" in result.output


def test_options(run):
    assert run("options", "set", "work_duration", "1800").exit_code == 0
    assert run("options", "get", "work_duration").output.strip() == "1800"
    assert run("options", "set", "work_duration", "lots").exit_code == 2
    assert "work_duration" in run("options", "list").output


def test_scheduled_disabled(run):
    result = run("scheduled", "start")
    assert "disabled" in result.output
    assert "not running" in run("scheduled", "stop").output


def test_reset_count(run, workspace):
    run("work", "start")
    run("work", "stop", "--no-break")
    run("work", "reset-count")
    assert (workspace / "pomodoro_count").read_text(encoding="utf-8").strip() == "0"
