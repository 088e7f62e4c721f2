"""Work session lifecycle for FocusCycle.

Implements pomodoro-style work sessions: a persisted session record, a
detached completion timer and an optional repeating focus reminder. Elapsed
time is always recomputed from the stored start time, so any process can
answer status questions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from focuscycle import breaks, counter, enforcement
from focuscycle.durations import elapsed_seconds, format_timestamp, to_epoch, utc_now
from focuscycle.errors import AlreadyActiveError, NoActiveSessionError, StateCorruptionError
from focuscycle.fileio import AtomicRecord, append_jsonl
from focuscycle.hooks import run_hooks
from focuscycle.models import BreakType, SessionRecord, TimerOwner, WorkSession
from focuscycle.notify import send_notification
from focuscycle.options import OptionsStore
from focuscycle.timers import cancel_timer, spawn_repeating, spawn_timer
from focuscycle.workspace import (
    reminder_handle_path,
    sessions_archive_path,
    work_state_path,
    work_timer_handle_path,
    workspace_root,
)


logger = logging.getLogger(__name__)

EARLY_STOP_PERCENT = 80


@dataclass
class WorkStatus:
    active: bool
    start_time: str = ""
    elapsed_seconds: int = 0
    remaining_seconds: int = 0
    goal: str = ""

    def to_dict(self) -> dict[str, Any]:
        if not self.active:
            return {"status": "inactive"}
        return {
            "status": "active",
            "start_time": self.start_time,
            "elapsed_seconds": self.elapsed_seconds,
            "remaining_seconds": self.remaining_seconds,
            "goal": self.goal,
        }


@dataclass
class StopResult:
    record: SessionRecord
    break_type: BreakType
    break_seconds: int
    break_started: breaks.BreakStartResult | None = None


def _record(root: Path | None) -> AtomicRecord:
    return AtomicRecord(work_state_path(root))


def load_session(root: Path | None = None) -> WorkSession | None:
    """The active work session, or None. Corrupt records raise."""
    record = _record(root)
    data = record.load()
    if data is None:
        return None
    try:
        session = WorkSession.from_dict(data)
        session.started_at
    except (ValueError, TypeError) as e:
        raise StateCorruptionError(record.path, str(e)) from e
    return session


def is_work_active(root: Path | None = None) -> bool:
    return _record(root).exists()


def start_work(
    goal: str = "",
    root: Path | None = None,
    now: datetime | None = None,
    cwd: str | None = None,
) -> WorkSession:
    """Start a work session. Raises if one is already active."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = utc_now()

    if is_work_active(root):
        raise AlreadyActiveError("A work session is already active. Stop it first.")

    active_break = breaks.load_break(root)
    full_break = active_break is not None and breaks.completed_fully(
        elapsed_seconds(active_break.started_at, now), active_break.duration_seconds,
    )
    enforcement.check_start_allowed(cwd=cwd, root=root, break_satisfied=full_break)

    if active_break is not None:
        logger.info("Ending active break before starting work")
        breaks.stop_break(root=root, now=now)

    stamp = format_timestamp(now)
    session = WorkSession(start_time=stamp, goal=goal, last_updated=stamp)
    _record(root).save(session.to_dict())

    options = OptionsStore(root)
    work_duration = options.get("work_duration")
    logger.info("Work session started (goal=%r, duration=%ds)", goal or "none", work_duration)

    spawn_timer(work_timer_handle_path(root), TimerOwner.WORK, "work_complete", work_duration, root)
    reminder_minutes = options.get("work_reminder_interval")
    if reminder_minutes > 0:
        spawn_repeating(
            reminder_handle_path(root), TimerOwner.REMINDER, "work_reminder",
            reminder_minutes * 60, root,
        )

    run_hooks("on_work_start", {"start_time": stamp, "goal": goal, "duration_seconds": work_duration}, root)
    send_notification(
        "🍅 Work Session Started",
        f"{goal or 'Focus time'} - {work_duration // 60} minutes",
        root=root,
    )
    return session


def is_early_stop(duration_seconds: int, planned_seconds: int) -> bool:
    return duration_seconds * 100 < planned_seconds * EARLY_STOP_PERCENT


def stop_work(
    root: Path | None = None,
    now: datetime | None = None,
    reason: str = "",
    auto_break: bool | None = None,
) -> StopResult:
    """Stop the active session, archive it and suggest (or start) a break."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = utc_now()

    session = load_session(root)
    if session is None:
        raise NoActiveSessionError("No active work session to stop.")

    cancel_timer(work_timer_handle_path(root))
    cancel_timer(reminder_handle_path(root))

    options = OptionsStore(root)
    duration = max(0, to_epoch(now) - to_epoch(session.started_at) - session.paused_duration)
    early = is_early_stop(duration, options.get("work_duration"))

    count = counter.increment_count(root)
    break_type, break_seconds = counter.select_break(count, root)

    end_stamp = format_timestamp(now)
    record = SessionRecord(
        start_time=session.start_time,
        end_time=end_stamp,
        duration_seconds=duration,
        goal=session.goal,
        pomodoro_count=count,
        early_stop=early,
        termination_reason=reason if early else "",
    )
    append_jsonl(sessions_archive_path(now, root), record.to_dict())
    _record(root).delete()
    logger.info(
        "Work session stopped after %ds (pomodoro #%d, early=%s)", duration, count, early
    )

    enforcement.on_work_stopped(break_type.value, now, root)

    run_hooks("on_work_stop", record.to_dict(), root)
    send_notification(
        "✅ Work Complete!",
        f"Pomodoro #{count} done. Take a {break_seconds // 60}-minute {break_type.value} break!",
        root=root,
    )

    result = StopResult(record=record, break_type=break_type, break_seconds=break_seconds)
    if auto_break is None:
        auto_break = options.get("work_auto_start_break")
    if auto_break:
        try:
            result.break_started = breaks.start_break(
                break_seconds, break_type, blocking=False, root=root, now=now,
            )
        except AlreadyActiveError:
            logger.info("Break already active; not starting another")
    return result


def work_status(root: Path | None = None, now: datetime | None = None) -> WorkStatus:
    session = load_session(root)
    if session is None:
        return WorkStatus(active=False)
    elapsed = elapsed_seconds(session.started_at, now)
    planned = OptionsStore(root).get("work_duration")
    return WorkStatus(
        active=True,
        start_time=session.start_time,
        elapsed_seconds=elapsed,
        remaining_seconds=max(0, planned - elapsed),
        goal=session.goal,
    )


def focus_score(root: Path | None = None, now: datetime | None = None) -> int:
    """0-100 score that grows with uninterrupted time in the current session."""
    status = work_status(root, now)
    if not status.active:
        return 0
    minutes = status.elapsed_seconds // 60
    if minutes < 15:
        return minutes * 2
    if minutes < 60:
        return 30 + (minutes - 15)
    return min(100, 70 + (minutes - 60) // 6)


# ── Background completions ────────────────────────────────────


def notify_work_complete(root: Path | None = None) -> bool:
    """Timer completion: announce the end of the pomodoro if still running."""
    if not is_work_active(root):
        logger.debug("Work timer fired after the session ended")
        return False
    send_notification("🍅 Work Session Complete", "Time for a break! You've completed a pomodoro.", root=root)
    logger.info("Work timer expired")
    return True


def send_reminder(root: Path | None = None, now: datetime | None = None) -> bool:
    """Reminder tick. Returns False once the session is gone."""
    session = load_session(root)
    if session is None:
        return False
    minutes = elapsed_seconds(session.started_at, now) // 60
    send_notification("⏰ Focus Reminder", f"You've been working for {minutes} minutes. Keep going!", root=root)
    logger.info("Focus reminder sent (%dm)", minutes)
    return True
