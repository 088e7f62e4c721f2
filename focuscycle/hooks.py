"""Event dispatch and lifecycle hooks for FocusCycle.

Two mechanisms live here:

- HookDispatcher: in-process callbacks keyed by event name. The shell
  integration calls ``focuscycle hook directory-change OLD NEW`` on every
  ``cd``, and each call is its own process, so callbacks must rely on
  persisted state only.
- run_hooks: user shell commands configured in hooks.yaml, run at session
  lifecycle points with a JSON context on stdin.

Hook points for run_hooks:
- on_work_start, on_work_stop
- on_break_start, on_break_stop
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable

from focuscycle.errors import FocusCycleError
from focuscycle.fileio import read_yaml
from focuscycle.workspace import hooks_config_path, workspace_root


logger = logging.getLogger(__name__)

VALID_EVENTS = {"directory_change"}

VALID_HOOK_POINTS = {
    "on_work_start",
    "on_work_stop",
    "on_break_start",
    "on_break_stop",
}

DEFAULT_TIMEOUT = 30


class HookDispatcher:
    """Registry of callbacks per event.

    Registering the same callback twice for an event keeps one entry, so
    modules can re-register after reloading state.
    """

    def __init__(self) -> None:
        self._callbacks: dict[str, list[Callable[..., Any]]] = {}

    def register(self, event: str, callback: Callable[..., Any]) -> None:
        if event not in VALID_EVENTS:
            raise ValueError(f"Unknown hook event: {event}")
        callbacks = self._callbacks.setdefault(event, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unregister(self, event: str, callback: Callable[..., Any]) -> None:
        callbacks = self._callbacks.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def callbacks(self, event: str) -> list[Callable[..., Any]]:
        return list(self._callbacks.get(event, []))

    def dispatch(self, event: str, *args: Any) -> list[dict[str, Any]]:
        """Invoke every callback for event. Failures are recorded, not raised."""
        results = []
        for callback in self.callbacks(event):
            name = getattr(callback, "__qualname__", repr(callback))
            result: dict[str, Any] = {"callback": name, "event": event}
            try:
                result["result"] = callback(*args)
            except Exception as e:
                logger.exception("Hook %s failed for %s", name, event)
                result["error"] = str(e)
            results.append(result)
        return results


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    if root is None:
        root = workspace_root()
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    return read_yaml(path)


def _hook_command(hook: Any) -> tuple[str, int]:
    """Normalize a hooks.yaml entry: a bare command string or {command, timeout}."""
    if isinstance(hook, str):
        return hook, DEFAULT_TIMEOUT
    if isinstance(hook, dict):
        return str(hook.get("command") or ""), int(hook.get("timeout", DEFAULT_TIMEOUT))
    return "", DEFAULT_TIMEOUT


def _run_command(command: str, payload: str, timeout: int, cwd: Path) -> dict[str, Any]:
    try:
        proc = subprocess.run(
            command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=str(cwd),
        )
    except subprocess.TimeoutExpired:
        return {"exit_code": -1, "error": f"Hook timed out after {timeout}s"}
    except OSError as e:
        return {"exit_code": -1, "error": str(e)}
    return {
        "exit_code": proc.returncode,
        "stdout": proc.stdout[:4096],
        "stderr": proc.stderr[:4096],
    }


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run the shell commands configured for a lifecycle point.

    Each command receives the session context as JSON on stdin. Failures
    are logged and reported in the result list; they never interrupt the
    session operation that triggered them.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []
    if root is None:
        root = workspace_root()

    try:
        entries = load_hooks_config(root).get(hook_point) or []
    except FocusCycleError as e:
        logger.warning("Could not read hooks config: %s", e)
        return []
    if not isinstance(entries, list):
        logger.warning("Ignoring hooks for %s: expected a list", hook_point)
        return []

    payload = json.dumps(context, ensure_ascii=False)
    results = []
    for entry in entries:
        command, timeout = _hook_command(entry)
        if not command:
            continue
        result = {"command": command, "hook_point": hook_point}
        result.update(_run_command(command, payload, timeout, root))
        if result["exit_code"] != 0:
            logger.warning("Hook %r at %s exited with %s", command, hook_point, result["exit_code"])
        results.append(result)
    return results
