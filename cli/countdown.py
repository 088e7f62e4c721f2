"""Foreground break countdown powered by Textual."""

from __future__ import annotations

import time
from typing import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Label, ProgressBar, Static

from focuscycle.breaks import can_skip
from focuscycle.durations import format_clock, format_duration
from focuscycle.models import BreakType, SkipMode


CSS = """
Screen {
    align: center middle;
}

#countdown {
    width: 60;
    height: auto;
    border: round $accent;
    padding: 1 2;
}

#countdown Label {
    width: 100%;
    content-align: center middle;
    text-style: bold;
}

#remaining {
    margin-top: 1;
    content-align: center middle;
    width: 100%;
}

#skip-hint {
    color: $text-muted;
    margin-top: 1;
}
"""

SKIP_HINTS = {
    SkipMode.NEVER: "This break cannot be skipped.",
    SkipMode.AFTER50: "Press q to skip once half the break is over.",
    SkipMode.ALWAYS: "Press q to skip.",
}


class BreakCountdownApp(App[bool]):
    """Counts a break down once per second; exits True when it runs out."""

    TITLE = "FocusCycle"
    CSS = CSS

    BINDINGS = [
        Binding("q", "skip", "Skip"),
        Binding("escape", "skip", "Skip", show=False),
        Binding("ctrl+q", "skip", "Skip", show=False, priority=True),
    ]

    def __init__(
        self,
        duration: int,
        break_type: BreakType,
        skip_mode: SkipMode,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.duration = duration
        self.break_type = break_type
        self.skip_mode = skip_mode
        self._clock = clock
        self._started = 0.0

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(
            Label(f"☕ {self.break_type.value.capitalize()} break · {format_duration(self.duration)}"),
            ProgressBar(total=self.duration, show_eta=False, id="progress"),
            Static(id="remaining"),
            Static(self._skip_hint(), id="skip-hint"),
            id="countdown",
        )
        yield Footer()

    def _skip_hint(self) -> str:
        mode = self.skip_mode
        if mode is SkipMode.TYPE_BASED:
            mode = SkipMode.ALWAYS if self.break_type is BreakType.SHORT else SkipMode.AFTER50
        return SKIP_HINTS[mode]

    def on_mount(self) -> None:
        self._started = self._clock()
        self.set_interval(1, self._tick)
        self._tick()

    @property
    def elapsed(self) -> int:
        return int(self._clock() - self._started)

    def _tick(self) -> None:
        elapsed = min(self.elapsed, self.duration)
        self.query_one("#progress", ProgressBar).update(progress=elapsed)
        self.query_one("#remaining", Static).update(
            f"Time remaining {format_clock(self.duration - elapsed)}"
        )
        if elapsed >= self.duration:
            self.exit(True)

    def action_skip(self) -> None:
        if can_skip(self.skip_mode, self.break_type, self.elapsed, self.duration):
            self.exit(False)
        else:
            self.notify("Skipping is not allowed yet.", title="Keep resting", severity="warning")


def run_countdown(duration: int, break_type: BreakType, skip_mode: SkipMode) -> bool:
    """Run the countdown in the terminal. True when the break ran to the end."""
    return bool(BreakCountdownApp(duration, break_type, skip_mode).run())
