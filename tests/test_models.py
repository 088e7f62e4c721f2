"""Tests for focuscycle/models.py: dataclass serialization."""

from focuscycle.models import (
    BreakSession,
    BreakType,
    EnforcementState,
    SessionRecord,
    TimerHandle,
    TimerOwner,
    WorkSession,
)


def test_work_session_defaults():
    session = WorkSession.from_dict({"start_time": "2026-10-14T09:00:00Z", "extra": 1})
    assert session.goal == ""
    assert session.paused_duration == 0
    assert session.status == "active"
    assert session.started_at.hour == 9


def test_break_session_unknown_type_is_custom():
    brk = BreakSession.from_dict({"start_time": "2026-10-14T09:00:00Z", "duration_seconds": 60, "type": "nap"})
    assert brk.type is BreakType.CUSTOM
    assert brk.to_dict()["type"] == "custom"


def test_break_session_string_booleans():
    brk = BreakSession.from_dict({"duration_seconds": "300", "auto_completed": "true"})
    assert brk.duration_seconds == 300
    assert brk.auto_completed is True


def test_enforcement_state_clamps_and_keeps_flag():
    state = EnforcementState.from_dict({"violations": -3, "project": "api"})
    assert state.violations == 0
    d = state.to_dict()
    assert d["break_required"] is False
    assert d["break_type_required"] is None
    assert "last_break_end" not in d
    assert EnforcementState.from_dict({}) == EnforcementState()


def test_timer_handle():
    handle = TimerHandle.from_dict({"pid": "42", "owner": "scheduled"})
    assert handle.pid == 42
    assert handle.owner is TimerOwner.SCHEDULED


def test_session_record_roundtrip():
    d = {
        "start_time": "2026-10-14T09:00:00Z",
        "end_time": "2026-10-14T09:25:00Z",
        "duration_seconds": 1500,
        "goal": "g",
        "pomodoro_count": 3,
        "early_stop": False,
        "termination_reason": "",
    }
    assert SessionRecord.from_dict(d).to_dict() == d
