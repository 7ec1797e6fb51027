"""Plain-text rendering of a SystemSnapshot."""

from procinspect.models import TaskRecord, Uptime, ViewOptions
from procinspect.monitor import SystemSnapshot
from procinspect.owners import OwnerResolver

UNAVAILABLE = "unavailable"
BAR_WIDTH = 20
RULE = "------------------"

TASK_HEADER = f"{'PID':>5} | {'State':>12} | {'Task Name':>25} | {'User':>15} | Tasks"
TASK_RULE = "------+--------------+---------------------------+-----------------+-------"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_uptime(uptime: Uptime) -> str:
    """Format an uptime, leaving out units that are zero."""
    parts = [
        _plural(value, unit)
        for value, unit in (
            (uptime.years, "year"),
            (uptime.days, "day"),
            (uptime.hours, "hour"),
            (uptime.minutes, "minute"),
            (uptime.seconds, "second"),
        )
        if value > 0
    ]
    return ", ".join(parts) if parts else _plural(0, "second")


def format_kib_as_gib(kib: int) -> str:
    """Format a KiB figure as GB with one decimal."""
    return f"{kib / 1024 / 1024:.1f} GB"


def render_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Render a fraction in [0, 1] as a '#'/'-' bar."""
    filled = min(width, max(0, int(fraction * width)))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _value(value: object) -> str:
    return UNAVAILABLE if value is None else str(value)


def render_system(snapshot: SystemSnapshot, options: ViewOptions) -> list[str]:
    """System Information section, limited to the enabled identity fields."""
    lines = ["System Information", RULE]
    if options.hostname:
        lines.append(f"Hostname: {_value(snapshot.hostname)}")
    if options.kernel_version:
        lines.append(f"Kernel Version: {_value(snapshot.kernel_version)}")
    if options.uptime:
        uptime = UNAVAILABLE if snapshot.uptime is None else format_uptime(snapshot.uptime)
        lines.append(f"Uptime: {uptime}")
    lines.append("")
    return lines


def render_hardware(snapshot: SystemSnapshot) -> list[str]:
    """Hardware Information section with the CPU and memory bars."""
    lines = [
        "Hardware Information",
        RULE,
        f"CPU Model: {_value(snapshot.cpu_model)}",
        f"Processing Units: {_value(snapshot.processor_count)}",
    ]

    load = snapshot.load_average
    if load is None:
        lines.append(f"Load Average (1/5/15 min): {UNAVAILABLE}")
    else:
        lines.append(f"Load Average (1/5/15 min): {load.one} {load.five} {load.fifteen}")

    if snapshot.cpu_usage is None:
        lines.append(f"CPU Usage:\t{UNAVAILABLE}")
    else:
        usage = snapshot.cpu_usage
        lines.append(f"CPU Usage:\t{render_bar(usage)} {usage * 100:.1f}%")

    memory = snapshot.memory
    if memory is None:
        lines.append(f"Memory Usage:\t{UNAVAILABLE}")
    else:
        percent = memory.used_percent
        lines.append(
            f"Memory Usage:\t{render_bar(percent / 100)} {percent:.1f}% "
            f"({format_kib_as_gib(memory.active_kib)} / {format_kib_as_gib(memory.total_kib)})"
        )
    lines.append("")
    return lines


def render_task_summary(snapshot: SystemSnapshot) -> list[str]:
    """Task Information section: task count and counters since boot."""
    counters = snapshot.counters
    lines = [
        "Task Information",
        RULE,
        f"Tasks running: {_value(snapshot.task_count)}",
        "Since boot:",
    ]
    if counters is None:
        lines.extend(
            [
                f"\tInterrupts: {UNAVAILABLE}",
                f"\tContext Switches: {UNAVAILABLE}",
                f"\tForks: {UNAVAILABLE}",
            ]
        )
    else:
        lines.extend(
            [
                f"\tInterrupts: {counters.interrupts}",
                f"\tContext Switches: {counters.context_switches}",
                f"\tForks: {counters.forks}",
            ]
        )
    lines.append("")
    return lines


def owner_label(task: TaskRecord, resolve_owner: OwnerResolver | None = None) -> str:
    """Account name of the task owner when resolvable, else the numeric uid."""
    if resolve_owner is not None:
        name = resolve_owner(task.owner_id)
        if name is not None:
            return name
    return str(task.owner_id)


def render_task_list(
    snapshot: SystemSnapshot, resolve_owner: OwnerResolver | None = None
) -> list[str]:
    """Task table, one row per task in listing order."""
    lines = [TASK_HEADER, TASK_RULE]
    if snapshot.tasks is None:
        lines.append(UNAVAILABLE)
        return lines
    for task in snapshot.tasks:
        lines.append(
            f"{task.pid:>5} | {task.state[:12]:>12} | {task.name[:25]:>25} | "
            f"{owner_label(task, resolve_owner)[:15]:>15} | {task.thread_count}"
        )
    return lines


def render_report(
    snapshot: SystemSnapshot,
    options: ViewOptions,
    resolve_owner: OwnerResolver | None = None,
) -> str:
    """Render the enabled sections of a snapshot as a text report."""
    lines: list[str] = []
    if options.system:
        lines.extend(render_system(snapshot, options))
    if options.hardware:
        lines.extend(render_hardware(snapshot))
    if options.task_summary:
        lines.extend(render_task_summary(snapshot))
    if options.task_list:
        lines.extend(render_task_list(snapshot, resolve_owner))
    return "\n".join(lines)
