"""Entry point of the detached timer processes.

Started by focuscycle.timers as ``python -m focuscycle.runner``. ``once``
sleeps for the whole delay in one call and then runs its action; ``repeat``
sleeps and runs its action until the action reports that its owner is gone.
Actions always re-check their own state record before doing anything.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable

import click

from focuscycle.log import configure_logging
from focuscycle.timers import release_handle


logger = logging.getLogger(__name__)


def _actions() -> dict[str, Callable[[Path], bool]]:
    from focuscycle import breaks, scheduled, work

    return {
        "work_complete": work.notify_work_complete,
        "work_reminder": work.send_reminder,
        "break_complete": breaks.mark_auto_completed,
        "scheduled_break": scheduled.scheduled_tick,
    }


def get_action(name: str) -> Callable[[Path], bool]:
    try:
        return _actions()[name]
    except KeyError:
        raise click.BadParameter(f"Unknown action: {name}") from None


def run_once(
    action: str,
    delay: int,
    root: Path,
    handle_path: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    callback = get_action(action)
    sleep(delay)
    try:
        return callback(root)
    finally:
        if handle_path is not None:
            release_handle(handle_path, os.getpid())


def run_repeating(
    action: str,
    interval: int,
    root: Path,
    handle_path: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Loop until the action returns False. Returns the number of ticks run."""
    callback = get_action(action)
    ticks = 0
    try:
        while True:
            sleep(interval)
            if not callback(root):
                break
            ticks += 1
    finally:
        if handle_path is not None:
            release_handle(handle_path, os.getpid())
    return ticks


@click.group()
def main() -> None:
    """Background timer runner (not meant to be called by hand)."""


@main.command()
@click.argument("action")
@click.option("--delay", type=click.IntRange(min=0), required=True)
@click.option("--handle", "handle_path", type=click.Path(path_type=Path))
@click.option("--root", type=click.Path(path_type=Path), required=True)
def once(action: str, delay: int, handle_path: Path | None, root: Path) -> None:
    configure_logging(root, console=False)
    logger.debug("Timer %s armed for %ds", action, delay)
    try:
        run_once(action, delay, root, handle_path)
    except Exception:
        logger.exception("Timer action %s failed", action)
        raise


@main.command()
@click.argument("action")
@click.option("--interval", type=click.IntRange(min=1), required=True)
@click.option("--handle", "handle_path", type=click.Path(path_type=Path))
@click.option("--root", type=click.Path(path_type=Path), required=True)
def repeat(action: str, interval: int, handle_path: Path | None, root: Path) -> None:
    configure_logging(root, console=False)
    logger.debug("Loop %s running every %ds", action, interval)
    try:
        ticks = run_repeating(action, interval, root, handle_path)
    except Exception:
        logger.exception("Loop action %s failed", action)
        raise
    logger.info("Loop %s finished after %d ticks", action, ticks)


if __name__ == "__main__":
    main()
