"""Atomic file I/O and the small record store built on it.

Every record is replaced with temp file + flock + fsync + rename, so a
background process reading concurrently sees either the old or the new
content, never a partial write. Reads never lock.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator

import yaml

from focuscycle.errors import StateCorruptionError, StateNotFoundError


logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a text file, returning empty string if missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object, returning empty dict if missing or empty.

    Raises StateCorruptionError when the file holds anything else.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    return _parse_object(path, text)


def _parse_object(path: Path, text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateCorruptionError(path, str(e)) from e
    if not isinstance(data, dict):
        raise StateCorruptionError(path, "expected a JSON object")
    return data


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file, returning empty dict if missing or empty."""
    text = read_text(path)
    if not text.strip():
        return {}
    try:
        result = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StateCorruptionError(path, str(e)) from e
    return result if isinstance(result, dict) else {}


def _atomic_write(path: Path, content: str, suffix: str = ".tmp") -> None:
    """Atomic write with file locking: temp file + flock + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.rename(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_text_atomic(path: Path, content: str) -> None:
    """Atomic text file write."""
    _atomic_write(path, content, suffix=".txt")


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Atomic JSON write."""
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", suffix=".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Atomic YAML write."""
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")


def remove_file(path: Path) -> bool:
    """Remove a file; a missing file is not an error. Returns True if removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


# ── Append-only logs ──────────────────────────────────────────


def append_jsonl(path: Path, record: dict[str, Any]) -> None:
    """Append one JSON line under an exclusive lock."""
    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(record, ensure_ascii=False) + "\n"
    with open(path, "a", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        try:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def read_jsonl(path: Path) -> Iterator[dict[str, Any]]:
    """Yield records from a JSONL file, skipping blank and malformed lines."""
    if not path.exists():
        return
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed line %d in %s", lineno, path)
                continue
            if isinstance(record, dict):
                yield record


# ── Record store ──────────────────────────────────────────────


class AtomicRecord:
    """A single JSON record at a fixed path.

    Absence of the file means "no record". Every mutation goes through
    the atomic writer; there are no cross-record locks.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"AtomicRecord({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, required: bool = False) -> dict[str, Any] | None:
        """Return the record, or None when absent.

        With required=True a missing file raises StateNotFoundError.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            if required:
                raise StateNotFoundError(self.path) from None
            return None
        if not text.strip():
            raise StateCorruptionError(self.path, "empty file")
        return _parse_object(self.path, text)

    def save(self, data: dict[str, Any]) -> None:
        write_json_atomic(self.path, data)

    def update(self, **changes: Any) -> dict[str, Any] | None:
        """Merge changes into an existing record.

        Returns None without writing when the record has disappeared.
        """
        data = self.load()
        if data is None:
            return None
        data.update(changes)
        self.save(data)
        return data

    def delete(self) -> bool:
        return remove_file(self.path)
