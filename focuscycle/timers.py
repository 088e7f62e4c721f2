"""Detached timer and reminder processes.

A timer is a separate OS process (``python -m focuscycle.runner``) started
in its own session so it outlives the CLI invocation that spawned it. Its
pid is recorded in a one-line handle file; any later process can cancel it
through that file. A handle whose process is gone is simply stale.
"""

from __future__ import annotations

import json
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from focuscycle.durations import format_timestamp, utc_now
from focuscycle.fileio import read_text, remove_file, write_text_atomic
from focuscycle.models import TimerHandle, TimerOwner
from focuscycle.workspace import workspace_root


logger = logging.getLogger(__name__)

_PACKAGE_PARENT = str(Path(__file__).resolve().parent.parent)


def _launch(argv: list[str], root: Path) -> int:
    """Start argv detached from the current session and return its pid."""
    root.mkdir(parents=True, exist_ok=True)
    env = os.environ.copy()
    env["FOCUSCYCLE_HOME"] = str(root)
    pythonpath = env.get("PYTHONPATH")
    env["PYTHONPATH"] = _PACKAGE_PARENT + (os.pathsep + pythonpath if pythonpath else "")
    proc = subprocess.Popen(
        argv,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
        cwd=str(root),
        env=env,
    )
    return proc.pid


def _runner_argv(mode: str, action: str, seconds: int, handle_path: Path, root: Path) -> list[str]:
    flag = "--delay" if mode == "once" else "--interval"
    return [
        sys.executable, "-m", "focuscycle.runner", mode, action,
        flag, str(seconds),
        "--handle", str(handle_path),
        "--root", str(root),
    ]


def _write_handle(handle_path: Path, handle: TimerHandle) -> None:
    write_text_atomic(handle_path, json.dumps(handle.to_dict()) + "\n")


def read_handle(handle_path: Path) -> TimerHandle | None:
    """Read a handle file. Missing or unreadable handles read as None."""
    text = read_text(handle_path).strip()
    if not text:
        return None
    try:
        if text.isdigit():
            return TimerHandle(pid=int(text), owner=TimerOwner.WORK)
        return TimerHandle.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError):
        logger.debug("Ignoring unreadable handle file %s", handle_path)
        return None


def pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def is_running(handle_path: Path) -> bool:
    handle = read_handle(handle_path)
    return handle is not None and pid_alive(handle.pid)


def spawn_timer(
    handle_path: Path,
    owner: TimerOwner,
    action: str,
    delay_seconds: int,
    root: Path | None = None,
) -> TimerHandle:
    """Run action once after delay_seconds in a detached process."""
    if root is None:
        root = workspace_root()
    pid = _launch(_runner_argv("once", action, delay_seconds, handle_path, root), root)
    handle = TimerHandle(pid=pid, owner=owner, action=action, created=format_timestamp(utc_now()))
    _write_handle(handle_path, handle)
    logger.info("Spawned %s timer %s (pid %d, %ds)", owner.value, action, pid, delay_seconds)
    return handle


def spawn_repeating(
    handle_path: Path,
    owner: TimerOwner,
    action: str,
    interval_seconds: int,
    root: Path | None = None,
) -> TimerHandle:
    """Run action every interval_seconds until it reports its owner is gone."""
    if root is None:
        root = workspace_root()
    pid = _launch(_runner_argv("repeat", action, interval_seconds, handle_path, root), root)
    handle = TimerHandle(pid=pid, owner=owner, action=action, created=format_timestamp(utc_now()))
    _write_handle(handle_path, handle)
    logger.info("Spawned %s loop %s (pid %d, every %ds)", owner.value, action, pid, interval_seconds)
    return handle


def cancel_timer(handle_path: Path) -> bool:
    """Terminate the process behind a handle and remove the handle file.

    Missing, unreadable and stale handles are silent no-ops. Returns True
    only when a live process was signalled.
    """
    handle = read_handle(handle_path)
    remove_file(handle_path)
    if handle is None or handle.pid <= 0:
        return False
    try:
        os.kill(handle.pid, signal.SIGTERM)
    except ProcessLookupError:
        logger.debug("Handle %s was stale (pid %d)", handle_path.name, handle.pid)
        return False
    except PermissionError:
        logger.debug("Not allowed to signal pid %d from %s", handle.pid, handle_path.name)
        return False
    logger.info("Cancelled %s timer (pid %d)", handle.owner.value, handle.pid)
    return True


def release_handle(handle_path: Path, pid: int) -> None:
    """Remove a handle file only if it still belongs to pid."""
    handle = read_handle(handle_path)
    if handle is not None and handle.pid == pid:
        remove_file(handle_path)
