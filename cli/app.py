"""FocusCycle command line interface."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from focuscycle import breaks, counter, enforcement, scheduled, stats, work
from focuscycle.durations import format_duration, parse_duration
from focuscycle.errors import FocusCycleError
from focuscycle.hooks import HookDispatcher
from focuscycle.log import configure_logging
from focuscycle.models import BreakType
from focuscycle.options import OPTION_SPECS, OptionsStore
from focuscycle.workspace import workspace_root


class FocusCycleGroup(click.Group):
    """Group that turns FocusCycleError into a message and its exit code."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except FocusCycleError as e:
            click.secho(f"✗ {e}", fg="red", err=True)
            ctx.exit(e.exit_code)


def _root(ctx: click.Context) -> Path:
    return ctx.obj["root"]


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def _is_tty() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


@click.group(cls=FocusCycleGroup)
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FOCUSCYCLE_HOME",
    help="Workspace directory (default ~/.focuscycle).",
)
@click.pass_context
def cli(ctx: click.Context, home: Path | None) -> None:
    """Pomodoro work sessions, breaks and focus enforcement."""
    root = home.expanduser().resolve() if home else workspace_root()
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    configure_logging(root)


# ── work ──────────────────────────────────────────────────────


@cli.group("work")
def work_group() -> None:
    """Work sessions."""


@work_group.command("start")
@click.argument("goal", required=False, default="")
@click.pass_context
def work_start(ctx: click.Context, goal: str) -> None:
    """Start a work session with an optional GOAL."""
    root = _root(ctx)
    session = work.start_work(goal, root=root)
    duration = OptionsStore(root).get("work_duration")
    _success("Work session started")
    if session.goal:
        click.echo(f"  Goal: {session.goal}")
    click.echo(f"  Duration: {format_duration(duration)}")
    click.echo("  Timer running in background")


@work_group.command("stop")
@click.option("--reason", default="", help="Why the session ended early.")
@click.option("--break/--no-break", "auto_break", default=None, help="Override work_auto_start_break.")
@click.pass_context
def work_stop(ctx: click.Context, reason: str, auto_break: bool | None) -> None:
    """Stop the active work session."""
    root = _root(ctx)
    options = OptionsStore(root)
    status = work.work_status(root)
    if (
        status.active
        and options.get("strict_confirm_early_stop")
        and _is_tty()
        and work.is_early_stop(status.elapsed_seconds, options.get("work_duration"))
    ):
        click.secho(
            f"Only {format_duration(status.elapsed_seconds)} of "
            f"{format_duration(options.get('work_duration'))} done.",
            fg="yellow",
        )
        if not click.confirm("Stop the session early?", default=False):
            click.echo("Keep going!")
            return
        if not reason:
            reason = click.prompt("Reason", default="", show_default=False)

    result = work.stop_work(root=root, reason=reason, auto_break=auto_break)
    record = result.record
    _success("Work session stopped")
    click.echo(f"  Duration: {format_duration(record.duration_seconds)}")
    click.echo(f"  Pomodoros: {record.pomodoro_count}")
    if record.early_stop:
        click.secho("  Stopped before 80% of the planned time", fg="yellow")
    if result.break_started:
        click.echo(
            f"  {result.break_type.value.capitalize()} break started "
            f"({format_duration(result.break_seconds)})"
        )
    else:
        click.echo(
            f"  Suggested: {format_duration(result.break_seconds)} {result.break_type.value} break"
        )


@work_group.command("status")
@click.option("--json", "as_json", is_flag=True)
@click.pass_context
def work_status_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show the active work session."""
    root = _root(ctx)
    status = work.work_status(root)
    if as_json:
        data = status.to_dict()
        data["focus_score"] = work.focus_score(root)
        data["pomodoro_count"] = counter.get_count(root)
        _echo_json(data)
        return
    if not status.active:
        click.echo("No active work session")
        return
    click.echo("🍅 Work session active")
    if status.goal:
        click.echo(f"  Goal: {status.goal}")
    click.echo(f"  Started: {status.start_time}")
    click.echo(f"  Elapsed: {format_duration(status.elapsed_seconds)}")
    click.echo(f"  Remaining: {format_duration(status.remaining_seconds)}")
    click.echo(f"  Focus score: {work.focus_score(root)}/100")


@work_group.command("stats")
@click.argument("period", type=click.Choice(["today", "week", "month"]), default="today")
@click.option("--json", "as_json", is_flag=True)
@click.pass_context
def work_stats(ctx: click.Context, period: str, as_json: bool) -> None:
    """Show session totals for today, this week or this month."""
    root = _root(ctx)
    result = {
        "today": stats.stats_today,
        "week": stats.stats_week,
        "month": stats.stats_month,
    }[period](root)
    if as_json:
        _echo_json(result.to_dict())
        return
    click.echo(f"📊 Work stats ({period}: {result.start_date} to {result.end_date})")
    click.echo(f"  Sessions: {result.sessions}")
    click.echo(f"  Total time: {format_duration(result.total_duration_seconds)}")
    click.echo(f"  Pomodoros: {result.pomodoros}")
    if period != "today":
        click.echo(f"  Daily average: {format_duration(result.average_per_day_seconds)}")


@work_group.command("compliance")
@click.option("--json", "as_json", is_flag=True)
@click.pass_context
def work_compliance(ctx: click.Context, as_json: bool) -> None:
    """Show this month's break compliance."""
    report = stats.break_compliance(_root(ctx))
    if as_json:
        _echo_json(report)
        return
    if not report["breaks_taken"]:
        click.echo("No break data available for this month.")
        click.echo("Enable break tracking: focuscycle options set strict_track_breaks true")
        return
    click.echo("☕ Break compliance (this month)")
    click.echo(f"  Work sessions: {report['work_sessions']}")
    click.echo(f"  Breaks taken: {report['breaks_taken']}")
    click.echo(f"  Completed fully: {report['breaks_completed_fully']}")
    click.echo(f"  Completion rate: {report['completion_rate_percent']}%")
    click.echo(f"  Compliance rate: {report['compliance_rate_percent']}%")


@work_group.command("reset-count")
@click.pass_context
def work_reset_count(ctx: click.Context) -> None:
    """Reset the pomodoro count to zero."""
    counter.reset_count(_root(ctx))
    _success("Pomodoro count reset")


@work_group.command("violations")
@click.pass_context
def work_violations(ctx: click.Context) -> None:
    """Show the enforcement state."""
    root = _root(ctx)
    state = enforcement.load_enforcement_state(root)
    click.echo(f"Mode: {enforcement.get_mode(root).value}")
    click.echo(f"Violations: {state.violations}")
    if state.project:
        click.echo(f"Active project: {state.project}")
    if state.break_required:
        click.echo(f"Break required: {state.break_type_required or 'short'}")


@work_group.command("reset-violations")
@click.pass_context
def work_reset_violations(ctx: click.Context) -> None:
    """Reset the violation counter."""
    enforcement.reset_violations(_root(ctx))
    _success("Violations reset")


@work_group.command("set-mode")
@click.argument("mode", type=click.Choice(["off", "coaching", "moderate", "strict"], case_sensitive=False))
@click.pass_context
def work_set_mode(ctx: click.Context, mode: str) -> None:
    """Set the enforcement mode."""
    new_mode = enforcement.set_enforcement_mode(mode, _root(ctx))
    _success(f"Enforcement mode set to {new_mode.value}")


# ── break ─────────────────────────────────────────────────────


@cli.group("break")
def break_group() -> None:
    """Break sessions."""


@break_group.command("start")
@click.argument("duration", required=False)
@click.argument("break_type", metavar="[TYPE]", required=False,
                type=click.Choice([t.value for t in BreakType]))
@click.option("--blocking/--background", default=True,
              help="Foreground countdown (default) or background timer.")
@click.pass_context
def break_start(ctx: click.Context, duration: str | None, break_type: str | None, blocking: bool) -> None:
    """Start a break; DURATION accepts 300, 5m or 1h30m."""
    from cli.countdown import run_countdown

    root = _root(ctx)
    if duration in {t.value for t in BreakType} and break_type is None:
        duration, break_type = None, duration
    seconds = parse_duration(duration) if duration else None
    result = breaks.start_break(
        seconds, break_type, blocking=blocking, root=root, countdown=run_countdown,
    )
    session = result.session
    if result.stopped:
        record = result.stopped.record
        _success("Break finished")
        click.echo(f"  Duration: {format_duration(record.duration_seconds)}")
        if not record.completed_fully:
            click.secho("  Ended before 80% of the planned time", fg="yellow")
        return
    _success("Break started (background)")
    click.echo(f"  Type: {session.type.value.capitalize()} break")
    click.echo(f"  Duration: {format_duration(session.duration_seconds)}")
    click.echo("  Run 'focuscycle break stop' when you are back")


@break_group.command("stop")
@click.pass_context
def break_stop(ctx: click.Context) -> None:
    """Stop the active break."""
    result = breaks.stop_break(_root(ctx))
    record = result.record
    _success("Break stopped")
    click.echo(f"  Duration: {format_duration(record.duration_seconds)}")
    click.echo(f"  Type: {record.type.capitalize()} break")
    if result.requirement_cleared:
        click.echo("  Break requirement satisfied")


@break_group.command("status")
@click.option("--json", "as_json", is_flag=True)
@click.pass_context
def break_status_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show the active break."""
    status = breaks.break_status(_root(ctx))
    if as_json:
        _echo_json(status.to_dict())
        return
    if not status.active:
        click.echo("No active break")
        return
    click.echo(f"☕ {status.type.capitalize()} break active")
    click.echo(f"  Started: {status.start_time}")
    click.echo(f"  Elapsed: {format_duration(status.elapsed_seconds)}")
    click.echo(f"  Remaining: {format_duration(status.remaining_seconds)}")
    if status.auto_completed:
        click.echo("  Time is up: run 'focuscycle break stop'")


# ── scheduled ─────────────────────────────────────────────────


@cli.group("scheduled")
def scheduled_group() -> None:
    """Scheduled break daemon."""


@scheduled_group.command("start")
@click.pass_context
def scheduled_start(ctx: click.Context) -> None:
    root = _root(ctx)
    handle = scheduled.start_scheduled_daemon(root)
    if handle is None:
        status = scheduled.scheduled_status(root)
        if not status.enabled:
            click.echo("Scheduled breaks are disabled")
            click.echo("Enable: focuscycle options set break_scheduled_enabled true")
        else:
            click.echo(f"Scheduled break daemon already running (pid {status.pid})")
        return
    _success(f"Scheduled break daemon started (pid {handle.pid})")


@scheduled_group.command("stop")
@click.pass_context
def scheduled_stop(ctx: click.Context) -> None:
    if scheduled.stop_scheduled_daemon(_root(ctx)):
        _success("Scheduled break daemon stopped")
    else:
        click.echo("Scheduled break daemon is not running")


@scheduled_group.command("status")
@click.pass_context
def scheduled_status_cmd(ctx: click.Context) -> None:
    status = scheduled.scheduled_status(_root(ctx))
    state = "running" if status.running else "stopped"
    click.echo(f"Scheduled breaks: {'enabled' if status.enabled else 'disabled'}, {state}")
    if status.pid:
        click.echo(f"  PID: {status.pid}")
    click.echo(f"  Interval: {status.interval_minutes} minutes")


# ── hook ──────────────────────────────────────────────────────


@cli.group("hook")
def hook_group() -> None:
    """Entry points for shell integration."""


@hook_group.command("directory-change")
@click.argument("old_dir")
@click.argument("new_dir")
@click.pass_context
def hook_directory_change(ctx: click.Context, old_dir: str, new_dir: str) -> None:
    """Report a cd from OLD_DIR to NEW_DIR; exits 1 if the switch is blocked."""
    dispatcher = HookDispatcher()
    enforcement.register(dispatcher, _root(ctx))
    blocked = False
    for entry in dispatcher.dispatch("directory_change", old_dir, new_dir):
        outcome = entry.get("result")
        if outcome is None:
            continue
        if not outcome:
            blocked = True
            click.secho("🚫 PROJECT SWITCH BLOCKED!", fg="red", err=True)
            click.echo(f"   Active work session in: {outcome.project}", err=True)
            click.echo(f"   Cannot switch to: {outcome.new_project}", err=True)
            click.echo("   Stop the session first: focuscycle work stop", err=True)
        elif outcome.violation:
            click.secho("⚠️  CONTEXT SWITCH DETECTED!", fg="yellow", err=True)
            click.echo(f"   Active project: {outcome.project}", err=True)
            click.echo(f"   Switched to: {outcome.new_project}", err=True)
            click.echo(f"   Violations: {outcome.violations}", err=True)
            if outcome.escalated:
                click.secho("❌ TOO MANY DISTRACTIONS!", fg="red", err=True)
                click.echo(f"   Refocus on: {outcome.project} or stop: focuscycle work stop", err=True)
    if blocked:
        ctx.exit(1)


# ── options ───────────────────────────────────────────────────


@cli.group("options")
def options_group() -> None:
    """Read and change configuration."""


@options_group.command("list")
@click.pass_context
def options_list(ctx: click.Context) -> None:
    for key, value, source in OptionsStore(_root(ctx)).items():
        click.echo(f"{key:<30} {value!s:<12} ({source})")


@options_group.command("get")
@click.argument("key", type=click.Choice(sorted(OPTION_SPECS)))
@click.pass_context
def options_get(ctx: click.Context, key: str) -> None:
    click.echo(OptionsStore(_root(ctx)).get(key))


@options_group.command("set")
@click.argument("key", type=click.Choice(sorted(OPTION_SPECS)))
@click.argument("value")
@click.pass_context
def options_set(ctx: click.Context, key: str, value: str) -> None:
    stored = OptionsStore(_root(ctx)).set(key, value)
    _success(f"{key} = {stored}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
