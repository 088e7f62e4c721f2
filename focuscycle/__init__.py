"""FocusCycle core library: work/break engines, timers and enforcement.

Public API re-exports for convenient imports:
    from focuscycle import start_work, stop_work, start_break, ...
"""

# Workspace & paths
from focuscycle.workspace import (
    workspace_root,
    work_state_path,
    break_state_path,
    pomodoro_count_path,
    enforcement_path,
    sessions_archive_path,
    breaks_archive_path,
    config_path,
    hooks_config_path,
)

# Errors
from focuscycle.errors import (
    FocusCycleError,
    UserError,
    AlreadyActiveError,
    NoActiveSessionError,
    BreakRequiredError,
    ProjectSwitchBlockedError,
    InvalidArgumentError,
    StateNotFoundError,
    StateCorruptionError,
)

# Durations
from focuscycle.durations import (
    parse_duration,
    format_duration,
    parse_timestamp,
    format_timestamp,
    utc_now,
)

# File I/O
from focuscycle.fileio import (
    AtomicRecord,
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
    append_jsonl,
    read_jsonl,
)

# Options
from focuscycle.options import OptionsStore, get_option

# Pomodoro counter
from focuscycle.counter import (
    get_count,
    increment_count,
    reset_count,
    select_break,
)

# Timers
from focuscycle.timers import (
    spawn_timer,
    spawn_repeating,
    cancel_timer,
    is_running,
)

# Work sessions
from focuscycle.work import (
    start_work,
    stop_work,
    work_status,
    is_work_active,
    focus_score,
)

# Breaks
from focuscycle.breaks import (
    start_break,
    stop_break,
    break_status,
    is_break_active,
)

# Enforcement
from focuscycle.enforcement import (
    on_directory_change,
    reset_violations,
    get_violations,
    set_enforcement_mode,
)

# Scheduled breaks
from focuscycle.scheduled import (
    start_scheduled_daemon,
    stop_scheduled_daemon,
    scheduled_status,
)

# Hooks
from focuscycle.hooks import HookDispatcher, run_hooks

# Stats
from focuscycle.stats import (
    stats_today,
    stats_week,
    stats_month,
    break_compliance,
)
