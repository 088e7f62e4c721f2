"""Typed dataclasses for the FocusCycle data model.

All models use from_dict/to_dict for JSON serialization. Keys are
snake_case on disk. Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from focuscycle.durations import parse_timestamp


# ── Enumerations ──────────────────────────────────────────────


class BreakType(str, Enum):
    SHORT = "short"
    LONG = "long"
    CUSTOM = "custom"


class EnforcementMode(str, Enum):
    OFF = "off"
    COACHING = "coaching"
    MODERATE = "moderate"
    STRICT = "strict"


class TimerOwner(str, Enum):
    WORK = "work"
    REMINDER = "reminder"
    BREAK = "break"
    SCHEDULED = "scheduled"


class SkipMode(str, Enum):
    NEVER = "never"
    AFTER50 = "after50"
    ALWAYS = "always"
    TYPE_BASED = "type-based"


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


# ── Sessions ──────────────────────────────────────────────────


@dataclass
class WorkSession:
    start_time: str
    goal: str = ""
    paused_duration: int = 0
    status: str = "active"
    last_updated: str = ""

    @property
    def started_at(self) -> datetime:
        return parse_timestamp(self.start_time)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WorkSession:
        return cls(
            start_time=d.get("start_time", ""),
            goal=d.get("goal", "") or "",
            paused_duration=int(d.get("paused_duration", 0) or 0),
            status=d.get("status", "active"),
            last_updated=d.get("last_updated", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "start_time": self.start_time,
            "goal": self.goal,
            "paused_duration": self.paused_duration,
            "last_updated": self.last_updated,
        }


@dataclass
class BreakSession:
    start_time: str
    duration_seconds: int
    type: BreakType = BreakType.CUSTOM
    blocking_mode: bool = False
    auto_completed: bool = False
    status: str = "active"

    @property
    def started_at(self) -> datetime:
        return parse_timestamp(self.start_time)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BreakSession:
        try:
            break_type = BreakType(d.get("type", "custom"))
        except ValueError:
            break_type = BreakType.CUSTOM
        return cls(
            start_time=d.get("start_time", ""),
            duration_seconds=int(d.get("duration_seconds", 0) or 0),
            type=break_type,
            blocking_mode=_bool(d.get("blocking_mode", False)),
            auto_completed=_bool(d.get("auto_completed", False)),
            status=d.get("status", "active"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "start_time": self.start_time,
            "duration_seconds": self.duration_seconds,
            "type": self.type.value,
            "blocking_mode": self.blocking_mode,
            "auto_completed": self.auto_completed,
        }


# ── Enforcement ───────────────────────────────────────────────


@dataclass
class EnforcementState:
    violations: int = 0
    project: str = ""
    goal: str = ""
    updated: str = ""
    break_required: bool = False
    break_type_required: str | None = None
    last_session_end: str | None = None
    last_break_end: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EnforcementState:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            violations=max(0, int(d.get("violations", 0) or 0)),
            project=d.get("project", "") or "",
            goal=d.get("goal", "") or "",
            updated=d.get("updated", "") or "",
            break_required=_bool(d.get("break_required", False)),
            break_type_required=d.get("break_type_required"),
            last_session_end=d.get("last_session_end"),
            last_break_end=d.get("last_break_end"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "violations": self.violations,
            "project": self.project,
            "goal": self.goal,
            "updated": self.updated,
        }
        d["break_required"] = self.break_required
        d["break_type_required"] = self.break_type_required
        if self.last_session_end:
            d["last_session_end"] = self.last_session_end
        if self.last_break_end:
            d["last_break_end"] = self.last_break_end
        return d


# ── Background tasks ──────────────────────────────────────────


@dataclass
class TimerHandle:
    """Process handle recorded for a detached background task."""

    pid: int
    owner: TimerOwner
    action: str = ""
    created: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerHandle:
        return cls(
            pid=int(d["pid"]),
            owner=TimerOwner(d.get("owner", "work")),
            action=d.get("action", ""),
            created=d.get("created", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "owner": self.owner.value,
            "action": self.action,
            "created": self.created,
        }


# ── Archive records ───────────────────────────────────────────


@dataclass
class SessionRecord:
    start_time: str
    end_time: str
    duration_seconds: int
    goal: str = ""
    pomodoro_count: int = 0
    early_stop: bool = False
    termination_reason: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SessionRecord:
        return cls(
            start_time=str(d.get("start_time") or ""),
            end_time=str(d.get("end_time") or ""),
            duration_seconds=int(d.get("duration_seconds", 0) or 0),
            goal=d.get("goal", "") or "",
            pomodoro_count=int(d.get("pomodoro_count", 0) or 0),
            early_stop=_bool(d.get("early_stop", False)),
            termination_reason=d.get("termination_reason", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": self.duration_seconds,
            "goal": self.goal,
            "pomodoro_count": self.pomodoro_count,
            "early_stop": self.early_stop,
            "termination_reason": self.termination_reason,
        }


@dataclass
class BreakRecord:
    start_time: str
    end_time: str
    duration_seconds: int
    planned_duration_seconds: int
    type: str = "custom"
    completed_fully: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BreakRecord:
        return cls(
            start_time=str(d.get("start_time") or ""),
            end_time=str(d.get("end_time") or ""),
            duration_seconds=int(d.get("duration_seconds", 0) or 0),
            planned_duration_seconds=int(d.get("planned_duration_seconds", 0) or 0),
            type=d.get("type", "custom") or "custom",
            completed_fully=_bool(d.get("completed_fully", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": self.duration_seconds,
            "planned_duration_seconds": self.planned_duration_seconds,
            "type": self.type,
            "completed_fully": self.completed_fully,
        }

