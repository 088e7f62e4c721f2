"""Shared test fixtures for FocusCycle tests."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from focuscycle import log, notify, timers


# Above the kernel's pid_max, so these never name a live process.
FAKE_PID_BASE = 2**22 + 1000

NOW = datetime(2026, 10, 14, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary workspace and point FOCUSCYCLE_HOME at it."""
    root = tmp_path / "workspace"
    root.mkdir()
    for key in list(os.environ):
        if key.startswith("FOCUSCYCLE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("FOCUSCYCLE_HOME", str(root))
    return root


@pytest.fixture
def configure(workspace: Path):
    """Write options into the workspace config.yaml."""

    def _configure(**options) -> None:
        path = workspace / "config.yaml"
        data = yaml.safe_load(path.read_text(encoding="utf-8")) if path.exists() else {}
        data = data or {}
        data.setdefault("options", {}).update(options)
        path.write_text(yaml.dump(data), encoding="utf-8")

    return _configure


@pytest.fixture(autouse=True)
def launched(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Record detached launches instead of starting processes."""
    calls: list[list[str]] = []

    def fake_launch(argv: list[str], root: Path) -> int:
        calls.append(argv)
        return FAKE_PID_BASE + len(calls)

    monkeypatch.setattr(timers, "_launch", fake_launch)
    return calls


@pytest.fixture(autouse=True)
def notifications(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str, bool]]:
    """Capture notifications instead of calling the desktop."""
    sent: list[tuple[str, str, bool]] = []

    def fake_deliver(title: str, message: str, sound: bool) -> bool:
        sent.append((title, message, sound))
        return True

    monkeypatch.setattr(notify, "_deliver", fake_deliver)
    return sent


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("focuscycle")
    while log._installed:
        handler = log._installed.pop()
        logger.removeHandler(handler)
        handler.close()
