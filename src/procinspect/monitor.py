"""Report assembly engine for procinspect."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from queue import Queue
from typing import TypeVar

from procinspect import extractors
from procinspect.config import DEFAULT_PROCFS_ROOT
from procinspect.errors import InspectError
from procinspect.models import (
    LoadAverage,
    MemoryInfo,
    SystemCounters,
    TaskRecord,
    Uptime,
    ViewOptions,
)
from procinspect.sampler import CpuUsageSampler, SampleTimer
from procinspect.tasks import collect_tasks, count_tasks

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SystemSnapshot:
    """
    Snapshot of overall system state.

    Fields stay None when their section is disabled or their extractor
    failed; failures are recorded by field name.
    """

    hostname: str | None = None
    kernel_version: str | None = None
    uptime: Uptime | None = None
    cpu_model: str | None = None
    processor_count: int | None = None
    load_average: LoadAverage | None = None
    memory: MemoryInfo | None = None
    cpu_usage: float | None = None
    task_count: int | None = None
    counters: SystemCounters | None = None
    tasks: list[TaskRecord] | None = None
    failures: dict[str, InspectError] = field(default_factory=dict)


class SystemMonitor:
    """
    System monitor that assembles snapshots from procfs.

    collect_snapshot() runs every enabled extractor once, in sequence. When
    started, a daemon thread repeats that and pushes each snapshot to a
    thread-safe Queue. A failing extractor only blanks its own field.
    """

    def __init__(
        self,
        update_queue: Queue[SystemSnapshot] | None = None,
        procfs_root: Path | str = DEFAULT_PROCFS_ROOT,
        options: ViewOptions | None = None,
        poll_rate: float = 2.0,
        sample_interval: float = 1.0,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            procfs_root: Mount point of procfs. Default /proc.
            options: Sections to collect. Default all of them.
            poll_rate: How often to poll the system (in seconds). Default 2.0s.
            sample_interval: Wait between the CPU counter reads. Default 1.0s.
        """
        self._queue = update_queue
        self._procfs_root = Path(procfs_root)
        self._options = options if options is not None else ViewOptions.all_on()
        self._poll_rate = poll_rate
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        # Stopping the monitor also cuts a pending CPU sample short
        self._sampler = CpuUsageSampler(
            self._procfs_root,
            interval=sample_interval,
            timer=SampleTimer(self._stop_event),
        )

    @property
    def procfs_root(self) -> Path:
        """Get the procfs mount point being read."""
        return self._procfs_root

    @property
    def options(self) -> ViewOptions:
        """Get the sections collected by each snapshot."""
        return self._options

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return
        if self._queue is None:
            raise RuntimeError("SystemMonitor needs an update queue to run in the background")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                snapshot = self.collect_snapshot()
                if not self._stop_event.is_set():
                    self._queue.put(snapshot)
            except Exception:
                logger.exception("Unexpected error while collecting a snapshot")

            # Wait for poll_rate seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_rate)

    def _capture(
        self, snapshot: SystemSnapshot, name: str, extractor: Callable[[], T]
    ) -> T | None:
        """Run one extractor, recording its failure instead of raising."""
        try:
            return extractor()
        except InspectError as exc:
            logger.warning("Could not read %s: %s", name.replace("_", " "), exc)
            snapshot.failures[name] = exc
            return None

    def collect_snapshot(self) -> SystemSnapshot:
        """Collect a snapshot of the sections enabled in the view options."""
        root = self._procfs_root
        opts = self._options
        snapshot = SystemSnapshot()

        if opts.hostname:
            snapshot.hostname = self._capture(
                snapshot, "hostname", lambda: extractors.read_hostname(root)
            )
        if opts.kernel_version:
            snapshot.kernel_version = self._capture(
                snapshot, "kernel_version", lambda: extractors.read_kernel_version(root)
            )
        if opts.uptime:
            snapshot.uptime = self._capture(
                snapshot, "uptime", lambda: extractors.read_uptime(root)
            )

        if opts.hardware:
            snapshot.cpu_model = self._capture(
                snapshot, "cpu_model", lambda: extractors.read_cpu_model(root)
            )
            snapshot.processor_count = self._capture(
                snapshot, "processor_count", lambda: extractors.read_processor_count(root)
            )
            snapshot.load_average = self._capture(
                snapshot, "load_average", lambda: extractors.read_load_average(root)
            )
            snapshot.memory = self._capture(
                snapshot, "memory", lambda: extractors.read_memory_info(root)
            )
            snapshot.cpu_usage = self._capture(snapshot, "cpu_usage", self._sampler.sample)

        if opts.task_summary:
            snapshot.task_count = self._capture(
                snapshot, "task_count", lambda: count_tasks(root)
            )
            snapshot.counters = self._capture(
                snapshot, "counters", lambda: extractors.read_system_counters(root)
            )

        if opts.task_list:
            snapshot.tasks = self._capture(snapshot, "tasks", lambda: collect_tasks(root))

        return snapshot
