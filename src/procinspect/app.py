"""procinspect - interactive Textual viewer."""

from enum import Enum
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from procinspect.config import InspectorConfig
from procinspect.models import TaskRecord
from procinspect.monitor import SystemMonitor, SystemSnapshot
from procinspect.owners import OwnerResolver, resolve_owner_name
from procinspect.report import UNAVAILABLE, format_kib_as_gib, format_uptime, owner_label


class SortKey(Enum):
    """Sort keys for the task table."""

    PID = "pid"
    NAME = "name"
    USER = "user"
    THREADS = "threads"


def _escape(text: str) -> str:
    return text.replace("[", "\\[")


def _bar(fraction: float, colour: str) -> str:
    filled = min(20, max(0, int(fraction * 20)))
    return f"[{colour}]█[/{colour}]" * filled + "[dim]░[/dim]" * (20 - filled)


class HeaderStats(Static):
    """Header widget showing system, hardware and task summary information."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: SystemSnapshot | None = None

    @property
    def snapshot(self) -> SystemSnapshot | None:
        """Get the most recently shown snapshot."""
        return self._snapshot

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_system_info(), id="system-info"),
            Static(self._get_hardware_info(), id="hardware-info"),
        )

    def update_stats(self, snapshot: SystemSnapshot) -> None:
        """Update the statistics from a system snapshot."""
        self._snapshot = snapshot
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            system_info = self.query_one("#system-info", Static)
            hardware_info = self.query_one("#hardware-info", Static)
        except NoMatches:
            return  # Widget not mounted yet
        system_info.update(self._get_system_info())
        hardware_info.update(self._get_hardware_info())

    def _get_system_info(self) -> str:
        """Get system and task summary display."""
        snap = self._snapshot
        if snap is None:
            return "Loading system info..."

        uptime = UNAVAILABLE if snap.uptime is None else format_uptime(snap.uptime)
        lines = [
            f"Host: {_escape(snap.hostname or UNAVAILABLE)}",
            f"Kernel: {_escape(snap.kernel_version or UNAVAILABLE)}",
            f"Uptime: {uptime}",
        ]
        if snap.task_count is not None:
            lines.append(f"Tasks: {snap.task_count}")
        if snap.counters is not None:
            lines.append(
                f"Interrupts: {snap.counters.interrupts}  "
                f"Ctxt: {snap.counters.context_switches}  "
                f"Forks: {snap.counters.forks}"
            )
        return "\n".join(lines)

    def _get_hardware_info(self) -> str:
        """Get CPU, load and memory display."""
        snap = self._snapshot
        if snap is None:
            return "Loading hardware info..."

        lines = [
            f"CPU: {_escape(snap.cpu_model or UNAVAILABLE)} "
            f"({snap.processor_count if snap.processor_count is not None else '?'} units)"
        ]
        if snap.cpu_usage is not None:
            lines.append(f"Cpu\\[{_bar(snap.cpu_usage, 'green')}] {snap.cpu_usage * 100:5.1f}%")
        if snap.memory is not None:
            mem = snap.memory
            lines.append(
                f"Mem\\[{_bar(mem.used_percent / 100, 'cyan')}] "
                f"{format_kib_as_gib(mem.active_kib)}/{format_kib_as_gib(mem.total_kib)}"
            )
        if snap.load_average is not None:
            load = snap.load_average
            lines.append(f"Load average: {load.one} {load.five} {load.fifteen}")
        return "\n".join(lines)


class TaskTable(Container):
    """Container for the task data table."""

    DEFAULT_CSS = """
    TaskTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, resolve_owner: OwnerResolver | None = None, **kwargs) -> None:
        """Initialize TaskTable."""
        super().__init__(*args, **kwargs)
        self._resolve_owner = resolve_owner
        self._sort_key: SortKey = SortKey.PID
        self._sort_reverse: bool = False

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        # Thread counts read best largest first
        self._sort_reverse = self._sort_key is SortKey.THREADS
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the task table."""
        yield DataTable(id="task-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#task-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("STATE", key="state", width=12)
        table.add_column("USER", key="user", width=12)
        table.add_column("THR", key="threads", width=5)
        table.add_column("Name", key="name")

    def update_tasks(self, tasks: list[TaskRecord]) -> None:
        """
        Replace the table contents with a new task list.

        Rows are rebuilt in sorted order so the table always follows the
        current sort key.
        """
        table = self.query_one("#task-table", DataTable)
        table.clear()
        for task in self._sort_tasks(tasks):
            table.add_row(
                str(task.pid),
                _escape(task.state),
                _escape(owner_label(task, self._resolve_owner)[:12]),
                str(task.thread_count),
                _escape(task.name),
                key=str(task.pid),
            )

    def _sort_tasks(self, tasks: list[TaskRecord]) -> list[TaskRecord]:
        """Sort tasks based on the current sort key."""
        key_func = {
            SortKey.PID: lambda t: t.pid,
            SortKey.NAME: lambda t: t.name.lower(),
            SortKey.USER: lambda t: owner_label(t, self._resolve_owner).lower(),
            SortKey.THREADS: lambda t: t.thread_count,
        }
        return sorted(tasks, key=key_func[self._sort_key], reverse=self._sort_reverse)


class InspectorApp(App):
    """Main procinspect application."""

    TITLE = "procinspect"
    SUB_TITLE = "procfs system inspector"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #system-info {
        width: 1fr;
        padding-right: 2;
    }

    #hardware-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, config: InspectorConfig | None = None) -> None:
        """Initialize the InspectorApp."""
        super().__init__()
        self._config = config if config is not None else InspectorConfig()
        self._update_queue: Queue[SystemSnapshot] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue,
            procfs_root=self._config.procfs_root,
            options=self._config.options,
            poll_rate=self._config.poll_rate,
            sample_interval=self._config.sample_interval,
        )
        self._last_tasks: list[TaskRecord] = []

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        resolver = resolve_owner_name if self._config.resolve_owners else None
        yield HeaderStats(id="header-stats")
        yield TaskTable(resolve_owner=resolver)
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def on_unmount(self) -> None:
        """Stop the system monitor when the app is unmounted."""
        self._monitor.stop()

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent snapshot."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._update_ui(snapshot)

    def _update_ui(self, snapshot: SystemSnapshot) -> None:
        """Update the UI with the new system snapshot."""
        self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
        if snapshot.tasks is not None:
            self._last_tasks = snapshot.tasks
            self.query_one(TaskTable).update_tasks(snapshot.tasks)

    def action_sort(self) -> None:
        """Cycle the task table sort key."""
        task_table = self.query_one(TaskTable)
        new_sort_key = task_table.cycle_sort()
        task_table.update_tasks(self._last_tasks)
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
