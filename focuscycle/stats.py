"""Session statistics from the monthly archives.

Days are UTC calendar days, matched against each record's start_time.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

from focuscycle.durations import utc_now
from focuscycle.fileio import read_jsonl
from focuscycle.models import BreakRecord, SessionRecord
from focuscycle.workspace import breaks_archive_path, sessions_archive_path


logger = logging.getLogger(__name__)

Record = TypeVar("Record", SessionRecord, BreakRecord)


@dataclass
class PeriodStats:
    period: str
    start_date: str
    end_date: str
    sessions: int = 0
    total_duration_seconds: int = 0
    pomodoros: int = 0
    average_per_day_seconds: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _records(path: Path, parse: Callable[[dict[str, Any]], Record]) -> Iterator[Record]:
    """Parse archive lines, skipping records whose fields have the wrong type."""
    for raw in read_jsonl(path):
        try:
            record = parse(raw)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping bad record in %s: %s", path.name, e)
            continue
        yield record


def _months_between(start: date, end: date) -> list[datetime]:
    months = []
    cursor = date(start.year, start.month, 1)
    while cursor <= end:
        months.append(datetime(cursor.year, cursor.month, 1))
        if cursor.month == 12:
            cursor = date(cursor.year + 1, 1, 1)
        else:
            cursor = date(cursor.year, cursor.month + 1, 1)
    return months


def load_sessions(start: date, end: date, root: Path | None = None) -> list[SessionRecord]:
    """Archived sessions whose start day falls within [start, end]."""
    first, last = start.isoformat(), end.isoformat()
    records = []
    for month in _months_between(start, end + timedelta(days=31)):
        for record in _records(sessions_archive_path(month, root), SessionRecord.from_dict):
            if first <= record.start_time[:10] <= last:
                records.append(record)
    return records


def _period_stats(period: str, start: date, end: date, root: Path | None) -> PeriodStats:
    records = load_sessions(start, end, root)
    stats = PeriodStats(period=period, start_date=start.isoformat(), end_date=end.isoformat())
    stats.sessions = len(records)
    stats.total_duration_seconds = sum(r.duration_seconds for r in records)
    stats.pomodoros = max((r.pomodoro_count for r in records), default=0)
    days = (end - start).days + 1
    stats.average_per_day_seconds = stats.total_duration_seconds // days
    return stats


def stats_today(root: Path | None = None, now: datetime | None = None) -> PeriodStats:
    today = (now or utc_now()).date()
    return _period_stats("today", today, today, root)


def stats_week(root: Path | None = None, now: datetime | None = None) -> PeriodStats:
    today = (now or utc_now()).date()
    monday = today - timedelta(days=today.weekday())
    return _period_stats("week", monday, today, root)


def stats_month(root: Path | None = None, now: datetime | None = None) -> PeriodStats:
    today = (now or utc_now()).date()
    return _period_stats("month", today.replace(day=1), today, root)


def break_compliance(root: Path | None = None, now: datetime | None = None) -> dict[str, Any]:
    """Break-taking habits for the current month (needs strict_track_breaks)."""
    month = now or utc_now()
    work_sessions = sum(1 for _ in _records(sessions_archive_path(month, root), SessionRecord.from_dict))
    breaks = list(_records(breaks_archive_path(month, root), BreakRecord.from_dict))

    taken = len(breaks)
    completed = sum(1 for b in breaks if b.completed_fully)
    return {
        "work_sessions": work_sessions,
        "breaks_taken": taken,
        "breaks_completed_fully": completed,
        "completion_rate_percent": completed * 100 // taken if taken else 0,
        "compliance_rate_percent": taken * 100 // work_sessions if work_sessions else 0,
        "avg_break_duration_seconds": sum(b.duration_seconds for b in breaks) // taken if taken else 0,
        "avg_planned_duration_seconds": (
            sum(b.planned_duration_seconds for b in breaks) // taken if taken else 0
        ),
    }
