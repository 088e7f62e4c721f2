"""Pomodoro counter and break-type selection.

The count of completed work sessions is a single integer in its own file,
replaced atomically. It only goes up (by stop_work) or back to zero (reset).
"""

from __future__ import annotations

import logging
from pathlib import Path

from focuscycle.errors import StateCorruptionError
from focuscycle.fileio import write_text_atomic
from focuscycle.models import BreakType
from focuscycle.options import OptionsStore
from focuscycle.workspace import pomodoro_count_path, workspace_root


logger = logging.getLogger(__name__)


def get_count(root: Path | None = None) -> int:
    """Current pomodoro count; 0 when never written."""
    if root is None:
        root = workspace_root()
    path = pomodoro_count_path(root)
    try:
        text = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return 0
    if not text.isdigit():
        raise StateCorruptionError(path, f"expected a non-negative integer, got {text!r}")
    return int(text)


def _write_count(count: int, root: Path) -> None:
    write_text_atomic(pomodoro_count_path(root), f"{count}\n")


def increment_count(root: Path | None = None) -> int:
    """Add one completed pomodoro and return the new count."""
    if root is None:
        root = workspace_root()
    count = get_count(root) + 1
    _write_count(count, root)
    logger.info("Pomodoro count is now %d", count)
    return count


def reset_count(root: Path | None = None) -> None:
    if root is None:
        root = workspace_root()
    _write_count(0, root)
    logger.info("Pomodoro count reset")


def is_long_break(count: int, pomodoros_until_long: int) -> bool:
    return count > 0 and pomodoros_until_long > 0 and count % pomodoros_until_long == 0


def select_break(count: int, root: Path | None = None) -> tuple[BreakType, int]:
    """Choose the break that follows the given count: (type, seconds)."""
    options = OptionsStore(root)
    if is_long_break(count, options.get("pomodoros_until_long")):
        return BreakType.LONG, options.get("break_long")
    return BreakType.SHORT, options.get("break_short")
