"""Workspace root and path helpers for FocusCycle.

Every state file lives under the workspace root (``FOCUSCYCLE_HOME``,
default ``~/.focuscycle``). Individual files can be relocated with their
own environment variable.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path


def workspace_root() -> Path:
    """Get the workspace root directory holding all state files."""
    return Path(
        os.environ.get("FOCUSCYCLE_HOME", str(Path.home() / ".focuscycle"))
    ).expanduser().resolve()


def _path(env_var: str, name: str, root: Path | None) -> Path:
    override = os.environ.get(env_var)
    if override:
        return Path(override).expanduser()
    if root is None:
        root = workspace_root()
    return root / name


def _month_key(when: datetime | None) -> str:
    if when is None:
        when = datetime.now(timezone.utc)
    return when.strftime("%Y-%m")


# ── Session records ───────────────────────────────────────────

def work_state_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_WORK_STATE_FILE", "current_session.json", root)


def break_state_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_BREAK_STATE_FILE", "current_break.json", root)


def pomodoro_count_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_POMODORO_COUNT_FILE", "pomodoro_count", root)


def enforcement_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_ENFORCEMENT_FILE", "enforcement.json", root)


# ── Archives ──────────────────────────────────────────────────

def archive_dir(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_ARCHIVE_DIR", "archive", root)


def sessions_archive_path(when: datetime | None = None, root: Path | None = None) -> Path:
    """Monthly session archive, e.g. archive/sessions_2026-10.jsonl."""
    return archive_dir(root) / f"sessions_{_month_key(when)}.jsonl"


def breaks_archive_path(when: datetime | None = None, root: Path | None = None) -> Path:
    """Monthly break-compliance log, e.g. archive/breaks_2026-10.jsonl."""
    return archive_dir(root) / f"breaks_{_month_key(when)}.jsonl"


# ── Background task handles ───────────────────────────────────

def work_timer_handle_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_TIMER_PID_FILE", "timer.pid", root)


def reminder_handle_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_REMINDER_PID_FILE", "reminder.pid", root)


def break_timer_handle_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_BREAK_TIMER_PID_FILE", "break_timer.pid", root)


def scheduled_break_handle_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_SCHEDULED_BREAK_PID_FILE", "scheduled_break.pid", root)


# ── Configuration & logs ──────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_CONFIG_FILE", "config.yaml", root)


def hooks_config_path(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_HOOKS_FILE", "hooks.yaml", root)


def log_dir(root: Path | None = None) -> Path:
    return _path("FOCUSCYCLE_LOG_DIR", "logs", root)
