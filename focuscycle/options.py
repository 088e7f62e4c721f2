"""Configuration options for FocusCycle.

Each option resolves with precedence environment variable > config.yaml >
built-in default. Environment variables are ``FOCUSCYCLE_<KEY>`` in upper
case, e.g. ``FOCUSCYCLE_WORK_DURATION=1800``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from focuscycle.errors import InvalidArgumentError
from focuscycle.fileio import read_yaml, write_yaml_atomic
from focuscycle.workspace import config_path, workspace_root


@dataclass(frozen=True)
class OptionSpec:
    key: str
    kind: str  # bool, int, enum, str
    default: Any
    description: str
    choices: tuple[str, ...] = ()
    minimum: int | None = 0

    @property
    def env_var(self) -> str:
        return f"FOCUSCYCLE_{self.key.upper()}"


_SPECS = [
    # Work sessions
    OptionSpec("work_duration", "int", 1500, "Work session length in seconds", minimum=1),
    OptionSpec("work_auto_start_break", "bool", True, "Start a break automatically after work stop"),
    OptionSpec("work_notifications", "bool", True, "Send desktop notifications"),
    OptionSpec("work_sound_notifications", "bool", True, "Play a sound with notifications"),
    OptionSpec("work_reminder_interval", "int", 30, "Minutes between focus reminders (0 disables)"),
    # Breaks
    OptionSpec("break_short", "int", 300, "Short break length in seconds", minimum=1),
    OptionSpec("break_long", "int", 900, "Long break length in seconds", minimum=1),
    OptionSpec("pomodoros_until_long", "int", 4, "Pomodoros before a long break", minimum=1),
    OptionSpec(
        "break_skip_mode", "enum", "always", "When a blocking break countdown may be skipped",
        choices=("never", "after50", "always", "type-based"),
    ),
    OptionSpec("break_scheduled_enabled", "bool", False, "Allow the scheduled break daemon"),
    OptionSpec("break_scheduled_interval", "int", 120, "Minutes between scheduled breaks", minimum=1),
    # Enforcement
    OptionSpec(
        "work_enforcement", "enum", "moderate", "Focus enforcement mode",
        choices=("off", "coaching", "moderate", "strict"),
    ),
    OptionSpec("work_distraction_threshold", "int", 3, "Violations before escalated warnings", minimum=1),
    OptionSpec("strict_block_project_switch", "bool", False, "Refuse project switches in strict mode"),
    OptionSpec("strict_require_break", "bool", False, "Require a full break between work sessions"),
    OptionSpec("strict_confirm_early_stop", "bool", False, "Confirm work stops before 80% of the session"),
    OptionSpec("strict_track_breaks", "bool", False, "Record break compliance"),
    # Logging
    OptionSpec(
        "log_level", "enum", "WARNING", "Console log level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    ),
    OptionSpec("log_to_file", "bool", True, "Write logs/focuscycle.log"),
    OptionSpec("log_max_size", "int", 10 * 1024 * 1024, "Log rotation size in bytes", minimum=1024),
    OptionSpec("log_max_files", "int", 5, "Rotated log files to keep", minimum=1),
]

OPTION_SPECS: dict[str, OptionSpec] = {spec.key: spec for spec in _SPECS}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def get_spec(key: str) -> OptionSpec:
    try:
        return OPTION_SPECS[key]
    except KeyError:
        raise InvalidArgumentError(f"Unknown option: {key}") from None


def coerce_value(spec: OptionSpec, value: Any) -> Any:
    """Convert a raw value (from env, YAML or the CLI) to the option's type."""
    if spec.kind == "bool":
        if isinstance(value, bool):
            return value
        s = str(value).strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
        raise InvalidArgumentError(f"{spec.key} expects a boolean, got {value!r}")

    if spec.kind == "int":
        if isinstance(value, bool):
            raise InvalidArgumentError(f"{spec.key} expects an integer, got {value!r}")
        try:
            n = int(str(value).strip())
        except ValueError:
            raise InvalidArgumentError(f"{spec.key} expects an integer, got {value!r}") from None
        if spec.minimum is not None and n < spec.minimum:
            raise InvalidArgumentError(f"{spec.key} must be >= {spec.minimum}, got {n}")
        return n

    if spec.kind == "enum":
        s = str(value).strip()
        for choice in spec.choices:
            if s.lower() == choice.lower():
                return choice
        raise InvalidArgumentError(
            f"{spec.key} must be one of {', '.join(spec.choices)}, got {value!r}"
        )

    return str(value)


class OptionsStore:
    """Resolved view over environment, config.yaml and defaults."""

    def __init__(self, root: Path | None = None) -> None:
        if root is None:
            root = workspace_root()
        self.root = root
        self.path = config_path(root)

    def _file_values(self) -> dict[str, Any]:
        data = read_yaml(self.path)
        options = data.get("options", data)
        return options if isinstance(options, dict) else {}

    def source(self, key: str) -> str:
        """Where the effective value comes from: env, file or default."""
        spec = get_spec(key)
        if spec.env_var in os.environ:
            return "env"
        if key in self._file_values():
            return "file"
        return "default"

    def get(self, key: str) -> Any:
        spec = get_spec(key)
        if spec.env_var in os.environ:
            return coerce_value(spec, os.environ[spec.env_var])
        values = self._file_values()
        if key in values:
            return coerce_value(spec, values[key])
        return spec.default

    def set(self, key: str, value: Any) -> Any:
        """Validate and persist a value to config.yaml. Returns the stored value."""
        spec = get_spec(key)
        coerced = coerce_value(spec, value)
        data = read_yaml(self.path)
        options = data.get("options")
        if not isinstance(options, dict):
            options = {}
        options[key] = coerced
        data["options"] = options
        write_yaml_atomic(self.path, data)
        return coerced

    def items(self) -> list[tuple[str, Any, str]]:
        """All options as (key, value, source) tuples."""
        return [(key, self.get(key), self.source(key)) for key in OPTION_SPECS]


def get_option(key: str, root: Path | None = None) -> Any:
    return OptionsStore(root).get(key)
