"""Scheduled break daemon.

A standing background loop that offers a short break every
break_scheduled_interval minutes whenever neither a work session nor a
break is running. The loop ends once its handle file is removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from focuscycle import breaks, work
from focuscycle.errors import AlreadyActiveError
from focuscycle.fileio import remove_file
from focuscycle.models import BreakType, TimerHandle, TimerOwner
from focuscycle.notify import send_notification
from focuscycle.options import OptionsStore
from focuscycle.timers import cancel_timer, pid_alive, read_handle, spawn_repeating
from focuscycle.workspace import scheduled_break_handle_path, workspace_root


logger = logging.getLogger(__name__)


@dataclass
class ScheduledStatus:
    enabled: bool
    running: bool
    interval_minutes: int
    pid: int | None = None


def _running_handle(root: Path) -> TimerHandle | None:
    """The live daemon's handle; stale handle files are removed."""
    path = scheduled_break_handle_path(root)
    handle = read_handle(path)
    if handle is None:
        remove_file(path)
        return None
    if not pid_alive(handle.pid):
        logger.debug("Removing stale scheduled break handle (pid %d)", handle.pid)
        remove_file(path)
        return None
    return handle


def start_scheduled_daemon(root: Path | None = None) -> TimerHandle | None:
    """Start the daemon if enabled and not already running.

    Returns the new handle, or None when nothing was started.
    """
    if root is None:
        root = workspace_root()
    options = OptionsStore(root)
    if not options.get("break_scheduled_enabled"):
        logger.info("Scheduled breaks are disabled")
        return None
    if _running_handle(root) is not None:
        logger.info("Scheduled break daemon already running")
        return None
    interval = options.get("break_scheduled_interval") * 60
    return spawn_repeating(
        scheduled_break_handle_path(root), TimerOwner.SCHEDULED, "scheduled_break", interval, root,
    )


def stop_scheduled_daemon(root: Path | None = None) -> bool:
    """Remove the handle (ending the loop) and terminate the process."""
    if root is None:
        root = workspace_root()
    running = _running_handle(root) is not None
    cancel_timer(scheduled_break_handle_path(root))
    if running:
        logger.info("Scheduled break daemon stopped")
    return running


def scheduled_status(root: Path | None = None) -> ScheduledStatus:
    if root is None:
        root = workspace_root()
    options = OptionsStore(root)
    handle = _running_handle(root)
    return ScheduledStatus(
        enabled=options.get("break_scheduled_enabled"),
        running=handle is not None,
        interval_minutes=options.get("break_scheduled_interval"),
        pid=handle.pid if handle else None,
    )


def scheduled_tick(root: Path | None = None) -> bool:
    """One daemon wake-up. Returns False once the daemon has been stopped."""
    if root is None:
        root = workspace_root()
    if not scheduled_break_handle_path(root).exists():
        return False

    if work.is_work_active(root) or breaks.is_break_active(root):
        logger.debug("Scheduled break skipped: a session is active")
        return True

    interval = OptionsStore(root).get("break_scheduled_interval")
    send_notification(
        "⏰ Scheduled Break Time!",
        f"It's been {interval} minutes. Time for a break!",
        root=root,
    )
    try:
        breaks.start_break(
            OptionsStore(root).get("break_short"), BreakType.SHORT, blocking=False, root=root,
        )
    except AlreadyActiveError:
        logger.debug("Break started concurrently; scheduled break skipped")
    else:
        logger.info("Scheduled break started")
    return True
