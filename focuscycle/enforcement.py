"""Focus enforcement: project-switch tracking and the strict break policy.

Only the strict mode does anything. While a work session is active, each
directory change into a different project (last path segment) counts as a
violation against the session's project. With strict_require_break on,
stopping work leaves a break_required flag that blocks the next start until
a break is completed fully.

This module is the only writer of the enforcement record.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from focuscycle.durations import format_timestamp, utc_now
from focuscycle.errors import (
    BreakRequiredError,
    InvalidArgumentError,
    ProjectSwitchBlockedError,
    StateCorruptionError,
)
from focuscycle.fileio import AtomicRecord
from focuscycle.hooks import HookDispatcher
from focuscycle.models import EnforcementMode, EnforcementState
from focuscycle.options import OptionsStore
from focuscycle.workspace import enforcement_path, work_state_path, workspace_root


logger = logging.getLogger(__name__)


@dataclass
class SwitchOutcome:
    """Result of handling one directory change."""

    allowed: bool = True
    violation: bool = False
    escalated: bool = False
    violations: int = 0
    project: str = ""
    new_project: str = ""

    def __bool__(self) -> bool:
        return self.allowed


def project_name(path: str | os.PathLike[str]) -> str:
    """Project identity of a directory: its last path segment."""
    return os.path.basename(os.path.normpath(os.fspath(path)))


def get_mode(root: Path | None = None) -> EnforcementMode:
    return EnforcementMode(OptionsStore(root).get("work_enforcement"))


def set_enforcement_mode(mode: str, root: Path | None = None) -> EnforcementMode:
    """Persist a new enforcement mode to the config file."""
    try:
        new_mode = EnforcementMode(str(mode).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in EnforcementMode)
        raise InvalidArgumentError(f"Invalid enforcement mode: {mode} (use {choices})") from None
    OptionsStore(root).set("work_enforcement", new_mode.value)
    logger.info("Enforcement mode set to %s", new_mode.value)
    return new_mode


# ── State ─────────────────────────────────────────────────────


def _record(root: Path | None) -> AtomicRecord:
    return AtomicRecord(enforcement_path(root))


def load_enforcement_state(root: Path | None = None) -> EnforcementState:
    """The enforcement record, or a fresh one. Corrupt records raise."""
    record = _record(root)
    try:
        return EnforcementState.from_dict(record.load() or {})
    except (ValueError, TypeError) as e:
        raise StateCorruptionError(record.path, str(e)) from e


def _save(state: EnforcementState, root: Path | None, now: datetime | None = None) -> None:
    state.updated = format_timestamp(now or utc_now())
    _record(root).save(state.to_dict())


def clear_enforcement(root: Path | None = None) -> None:
    if _record(root).delete():
        logger.info("Enforcement state cleared")


def get_violations(root: Path | None = None) -> int:
    return load_enforcement_state(root).violations


def reset_violations(root: Path | None = None) -> None:
    """Set the violation count back to zero, keeping the tracked project."""
    state = load_enforcement_state(root)
    state.violations = 0
    _save(state, root)
    logger.info("Violations reset")


def _active_goal(root: Path | None) -> str | None:
    """Goal of the active work session, or None when there is no session."""
    data = AtomicRecord(work_state_path(root)).load()
    if data is None:
        return None
    return data.get("goal", "") or ""


# ── Directory changes ─────────────────────────────────────────


def on_directory_change(
    old_dir: str,
    new_dir: str,
    root: Path | None = None,
    now: datetime | None = None,
) -> SwitchOutcome:
    """React to one ``cd`` from old_dir to new_dir.

    A falsy outcome means the switch is refused and the shell integration
    should return to old_dir.
    """
    if root is None:
        root = workspace_root()
    old_project = project_name(old_dir)
    new_project = project_name(new_dir)
    outcome = SwitchOutcome(new_project=new_project)

    if get_mode(root) is not EnforcementMode.STRICT:
        return outcome
    goal = _active_goal(root)
    if goal is None:
        return outcome
    if old_project == new_project:
        return outcome

    state = load_enforcement_state(root)
    outcome.violations = state.violations

    if not state.project:
        state.project = new_project
        state.goal = goal
        _save(state, root, now)
        outcome.project = new_project
        logger.info("Active project set to %s", new_project)
        return outcome

    outcome.project = state.project
    if new_project == state.project:
        return outcome

    options = OptionsStore(root)
    if options.get("strict_block_project_switch"):
        outcome.allowed = False
        logger.info("Project switch blocked: %s -> %s", state.project, new_project)
        return outcome

    state.violations += 1
    _save(state, root, now)
    outcome.violation = True
    outcome.violations = state.violations
    outcome.escalated = state.violations >= options.get("work_distraction_threshold")
    logger.info(
        "Project switch violation: %s -> %s (violations=%d)",
        state.project, new_project, state.violations,
    )
    return outcome


_CALLBACKS: dict[Path | None, object] = {}


def register(dispatcher: HookDispatcher, root: Path | None = None) -> None:
    """Subscribe to directory changes. Safe to call more than once."""
    dispatcher.register("directory_change", _callback_for(root))


def _callback_for(root: Path | None):
    if root not in _CALLBACKS:
        def callback(old_dir: str, new_dir: str) -> SwitchOutcome:
            return on_directory_change(old_dir, new_dir, root=root)

        callback.__qualname__ = "enforcement.on_directory_change"
        _CALLBACKS[root] = callback
    return _CALLBACKS[root]


# ── Session coupling ──────────────────────────────────────────


def check_start_allowed(
    cwd: str | None = None,
    root: Path | None = None,
    break_satisfied: bool = False,
) -> None:
    """Raise if strict mode forbids starting a work session here and now.

    break_satisfied means a break that meets the requirement is about to be
    stopped, so a pending break requirement does not block the start.
    """
    if get_mode(root) is not EnforcementMode.STRICT:
        return
    options = OptionsStore(root)
    state = load_enforcement_state(root)

    if options.get("strict_block_project_switch") and state.project:
        current = project_name(cwd or os.getcwd())
        if current != state.project:
            raise ProjectSwitchBlockedError(
                f"Project switch blocked by strict mode: active project is "
                f"{state.project}, current location is {current}"
            )

    if options.get("strict_require_break") and state.break_required and not break_satisfied:
        break_type = state.break_type_required or "short"
        raise BreakRequiredError(
            f"Break required before starting a new work session "
            f"(complete a {break_type} break: focuscycle break start)"
        )


def on_work_stopped(break_type: str, end_time: datetime, root: Path | None = None) -> None:
    """Update enforcement after a work session ends.

    Under strict mode with strict_require_break the violations are reset,
    the project is kept and a break is flagged as required; in every other
    case the record is removed.
    """
    options = OptionsStore(root)
    if get_mode(root) is EnforcementMode.STRICT and options.get("strict_require_break"):
        state = load_enforcement_state(root)
        state.violations = 0
        state.break_required = True
        state.break_type_required = break_type
        state.last_session_end = format_timestamp(end_time)
        _save(state, root, end_time)
        logger.info("Break required (%s) before next work session", break_type)
        return
    clear_enforcement(root)


def on_break_stopped(completed_fully: bool, end_time: datetime, root: Path | None = None) -> bool:
    """Clear the break requirement after a full break. Returns True if cleared."""
    if get_mode(root) is not EnforcementMode.STRICT:
        return False
    if not OptionsStore(root).get("strict_require_break") or not completed_fully:
        return False
    state = load_enforcement_state(root)
    if not state.break_required:
        return False
    state.break_required = False
    state.break_type_required = None
    state.last_break_end = format_timestamp(end_time)
    _save(state, root, end_time)
    logger.info("Break requirement satisfied")
    return True
