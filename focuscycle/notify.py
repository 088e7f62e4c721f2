"""Best-effort desktop notifications.

Uses osascript on macOS and notify-send (plus paplay for sound) on Linux.
A missing backend or a failing command is logged and otherwise ignored:
send_notification never raises.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path

from focuscycle.options import OptionsStore


logger = logging.getLogger(__name__)

MAC_SOUND = "Glass"
LINUX_SOUND_FILE = "/usr/share/sounds/freedesktop/stereo/complete.oga"
COMMAND_TIMEOUT = 10


def _escape_applescript(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _run(cmd: list[str]) -> None:
    subprocess.run(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        timeout=COMMAND_TIMEOUT,
        check=False,
    )


def _deliver(title: str, message: str, sound: bool) -> bool:
    """Hand the notification to the platform backend. Returns False if none."""
    if sys.platform == "darwin" and shutil.which("osascript"):
        script = (
            f'display notification "{_escape_applescript(message)}" '
            f'with title "{_escape_applescript(title)}"'
        )
        if sound:
            script += f' sound name "{MAC_SOUND}"'
        _run(["osascript", "-e", script])
        return True

    if shutil.which("notify-send"):
        _run(["notify-send", title, message])
        if sound and shutil.which("paplay") and Path(LINUX_SOUND_FILE).exists():
            _run(["paplay", LINUX_SOUND_FILE])
        return True

    return False


def send_notification(
    title: str,
    message: str,
    sound: bool | None = None,
    root: Path | None = None,
) -> bool:
    """Send a notification if enabled. Returns True when a backend took it."""
    try:
        options = OptionsStore(root)
        if not options.get("work_notifications"):
            return False
        if sound is None:
            sound = options.get("work_sound_notifications")
        delivered = _deliver(title, message, bool(sound))
    except Exception as e:  # notifications must never break a transition
        logger.debug("Notification %r failed: %s", title, e)
        return False

    if not delivered:
        logger.debug("No notification backend available for %r", title)
    return delivered
