"""Break session lifecycle for FocusCycle.

A break runs either in the foreground (blocking countdown on an interactive
terminal, stopped by the countdown itself) or in the background, where a
detached timer marks it auto_completed when the planned time is up. Only
stop_break removes the record.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from focuscycle import counter, enforcement
from focuscycle.durations import elapsed_seconds, format_timestamp, utc_now
from focuscycle.errors import (
    AlreadyActiveError,
    InvalidArgumentError,
    NoActiveSessionError,
    StateCorruptionError,
)
from focuscycle.fileio import AtomicRecord, append_jsonl
from focuscycle.hooks import run_hooks
from focuscycle.models import BreakRecord, BreakSession, BreakType, SkipMode, TimerOwner
from focuscycle.notify import send_notification
from focuscycle.options import OptionsStore
from focuscycle.timers import cancel_timer, spawn_timer
from focuscycle.workspace import (
    break_state_path,
    break_timer_handle_path,
    breaks_archive_path,
    workspace_root,
)


logger = logging.getLogger(__name__)

COMPLETION_PERCENT = 80

# countdown(duration_seconds, break_type, skip_mode) -> True if it ran to the end
Countdown = Callable[[int, BreakType, SkipMode], bool]


@dataclass
class BreakStopResult:
    record: BreakRecord
    requirement_cleared: bool = False


@dataclass
class BreakStartResult:
    session: BreakSession
    blocking: bool
    stopped: BreakStopResult | None = None


@dataclass
class BreakStatus:
    active: bool
    type: str = ""
    start_time: str = ""
    duration_seconds: int = 0
    elapsed_seconds: int = 0
    remaining_seconds: int = 0
    auto_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        if not self.active:
            return {"status": "inactive"}
        return {
            "status": "active",
            "type": self.type,
            "start_time": self.start_time,
            "duration_seconds": self.duration_seconds,
            "elapsed_seconds": self.elapsed_seconds,
            "remaining_seconds": self.remaining_seconds,
            "auto_completed": self.auto_completed,
        }


def _record(root: Path | None) -> AtomicRecord:
    return AtomicRecord(break_state_path(root))


def load_break(root: Path | None = None) -> BreakSession | None:
    record = _record(root)
    data = record.load()
    if data is None:
        return None
    try:
        session = BreakSession.from_dict(data)
        session.started_at
    except (ValueError, TypeError) as e:
        raise StateCorruptionError(record.path, str(e)) from e
    return session


def is_break_active(root: Path | None = None) -> bool:
    return _record(root).exists()


def completed_fully(elapsed: int, planned: int) -> bool:
    return elapsed * 100 >= planned * COMPLETION_PERCENT


def _stdio_is_tty() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def start_break(
    duration: int | None = None,
    break_type: BreakType | str | None = None,
    blocking: bool = True,
    root: Path | None = None,
    now: datetime | None = None,
    countdown: Countdown | None = None,
    interactive: bool | None = None,
) -> BreakStartResult:
    """Start a break.

    With no duration the length and type follow the pomodoro count. A
    duration without a type is a custom break. Blocking mode needs an
    interactive terminal and a countdown; without them the break runs in
    the background instead.
    """
    if root is None:
        root = workspace_root()
    if now is None:
        now = utc_now()

    if is_break_active(root):
        raise AlreadyActiveError("A break is already active. Stop it first.")

    if break_type is not None:
        try:
            break_type = BreakType(break_type)
        except ValueError:
            raise InvalidArgumentError(
                f"Invalid break type: {break_type} (use short, long or custom)"
            ) from None

    options = OptionsStore(root)
    if duration is None:
        selected_type, duration = counter.select_break(counter.get_count(root), root)
        if break_type is None:
            break_type = selected_type
        elif break_type is BreakType.SHORT:
            duration = options.get("break_short")
        elif break_type is BreakType.LONG:
            duration = options.get("break_long")
    elif break_type is None:
        break_type = BreakType.CUSTOM

    if duration <= 0:
        raise InvalidArgumentError(f"Break duration must be positive, got {duration}")

    if blocking:
        if interactive is None:
            interactive = _stdio_is_tty()
        if not interactive or countdown is None:
            logger.info("No interactive terminal for a blocking break; running in background")
            blocking = False

    session = BreakSession(
        start_time=format_timestamp(now),
        duration_seconds=duration,
        type=break_type,
        blocking_mode=blocking,
    )
    _record(root).save(session.to_dict())
    logger.info("Break started (%s, %ds, blocking=%s)", break_type.value, duration, blocking)

    run_hooks("on_break_start", session.to_dict(), root)
    send_notification(
        "☕ Break Started",
        f"{break_type.value.capitalize()} break - {duration // 60} minutes to recharge",
        root=root,
    )

    result = BreakStartResult(session=session, blocking=blocking)
    if not blocking:
        spawn_timer(break_timer_handle_path(root), TimerOwner.BREAK, "break_complete", duration, root)
        return result

    skip_mode = SkipMode(options.get("break_skip_mode"))
    try:
        finished = countdown(duration, break_type, skip_mode)
    except KeyboardInterrupt:
        finished = False
    logger.info("Countdown %s", "finished" if finished else "interrupted")
    if is_break_active(root):
        result.stopped = stop_break(root=root)
    return result


def stop_break(root: Path | None = None, now: datetime | None = None) -> BreakStopResult:
    """Stop the active break, classify it and release the strict break flag."""
    if root is None:
        root = workspace_root()
    if now is None:
        now = utc_now()

    session = load_break(root)
    if session is None:
        raise NoActiveSessionError("No active break to stop.")

    elapsed = elapsed_seconds(session.started_at, now)
    full = completed_fully(elapsed, session.duration_seconds)
    record = BreakRecord(
        start_time=session.start_time,
        end_time=format_timestamp(now),
        duration_seconds=elapsed,
        planned_duration_seconds=session.duration_seconds,
        type=session.type.value,
        completed_fully=full,
    )
    if OptionsStore(root).get("strict_track_breaks"):
        append_jsonl(breaks_archive_path(now, root), record.to_dict())

    cancel_timer(break_timer_handle_path(root))
    _record(root).delete()
    logger.info("Break stopped after %ds of %ds (full=%s)", elapsed, session.duration_seconds, full)

    cleared = enforcement.on_break_stopped(full, now, root)

    run_hooks("on_break_stop", record.to_dict(), root)
    send_notification("💪 Break Complete!", "Let's get back to work!", root=root)
    return BreakStopResult(record=record, requirement_cleared=cleared)


def break_status(root: Path | None = None, now: datetime | None = None) -> BreakStatus:
    session = load_break(root)
    if session is None:
        return BreakStatus(active=False)
    elapsed = elapsed_seconds(session.started_at, now)
    return BreakStatus(
        active=True,
        type=session.type.value,
        start_time=session.start_time,
        duration_seconds=session.duration_seconds,
        elapsed_seconds=elapsed,
        remaining_seconds=max(0, session.duration_seconds - elapsed),
        auto_completed=session.auto_completed,
    )


def mark_auto_completed(root: Path | None = None) -> bool:
    """Timer completion: flag the break as finished without removing it."""
    if _record(root).update(auto_completed=True) is None:
        logger.debug("Break timer fired after the break ended")
        return False
    send_notification("⏰ Break Complete!", "Time to get back to work!", root=root)
    logger.info("Break auto-completed")
    return True


def can_skip(skip_mode: SkipMode, break_type: BreakType, elapsed: int, duration: int) -> bool:
    """Whether a foreground countdown may be ended early right now."""
    if skip_mode is SkipMode.TYPE_BASED:
        skip_mode = SkipMode.ALWAYS if break_type is BreakType.SHORT else SkipMode.AFTER50
    if skip_mode is SkipMode.ALWAYS:
        return True
    if skip_mode is SkipMode.AFTER50:
        return elapsed * 2 >= duration
    return False
