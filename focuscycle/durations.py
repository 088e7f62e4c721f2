"""Duration strings and UTC timestamps.

Durations are written as a run of ``<number><unit>`` components
(``d``, ``h``, ``m``, ``s``) such as ``2h30m``; a bare integer is seconds.
Timestamps are persisted as ``YYYY-MM-DDTHH:MM:SSZ``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from focuscycle.errors import InvalidArgumentError


_UNITS = {"d": 86400, "h": 3600, "m": 60, "s": 1}
_COMPONENT_RE = re.compile(r"(\d+)([dhms])")
_DURATION_RE = re.compile(r"^(?:\d+[dhms])+$")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_duration(text: str | int) -> int:
    """Parse '90', '5m', '1h30m' or '2d' into seconds."""
    if isinstance(text, int) and not isinstance(text, bool):
        if text < 0:
            raise InvalidArgumentError(f"Duration must not be negative: {text}")
        return text

    s = str(text).strip().lower().replace(" ", "")
    if not s:
        raise InvalidArgumentError("Duration must not be empty")
    if s.isdigit():
        return int(s)
    if not _DURATION_RE.match(s):
        raise InvalidArgumentError(
            f"Invalid duration: {text!r} (use e.g. 300, 5m, 1h30m)"
        )
    return sum(int(n) * _UNITS[unit] for n, unit in _COMPONENT_RE.findall(s))


def format_duration(seconds: int) -> str:
    """Format seconds as '1h1m1s'; zero components are left out."""
    if seconds < 0:
        raise InvalidArgumentError(f"Duration must not be negative: {seconds}")
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)


def format_clock(seconds: int) -> str:
    """Format seconds as MM:SS (minutes keep growing past an hour)."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


# ── Timestamps ────────────────────────────────────────────────


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    """Parse a persisted timestamp into an aware UTC datetime.

    Accepts the canonical ``Z`` form as well as explicit offsets.
    Raises ValueError on anything else.
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"Invalid timestamp: {text!r}")
    s = text.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def elapsed_seconds(start: datetime, now: datetime | None = None) -> int:
    """Whole seconds between start and now, never negative."""
    if now is None:
        now = utc_now()
    return max(0, to_epoch(now) - to_epoch(start))
