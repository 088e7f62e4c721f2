"""Error types and CLI exit codes for FocusCycle."""

from __future__ import annotations

from pathlib import Path


EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2
EXIT_NOT_FOUND = 5
EXIT_INVALID_STATE = 6


class FocusCycleError(Exception):
    """Base class for errors reported to the operator."""

    exit_code = EXIT_ERROR


class UserError(FocusCycleError, ValueError):
    """The operator asked for something the current state does not allow."""


class AlreadyActiveError(UserError):
    pass


class NoActiveSessionError(UserError):
    pass


class BreakRequiredError(UserError):
    pass


class ProjectSwitchBlockedError(UserError):
    pass


class InvalidArgumentError(UserError):
    exit_code = EXIT_INVALID_ARGS


class StateNotFoundError(FocusCycleError):
    exit_code = EXIT_NOT_FOUND

    def __init__(self, path: Path) -> None:
        super().__init__(f"Required state file not found: {path}")
        self.path = path


class StateCorruptionError(FocusCycleError):
    """A persisted record exists but cannot be parsed."""

    exit_code = EXIT_INVALID_STATE

    def __init__(self, path: Path | str, detail: str = "") -> None:
        message = f"Corrupted state file: {path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.path = Path(path)
