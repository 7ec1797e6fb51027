"""Two-sample CPU utilization from the aggregate jiffy counters."""

import logging
import math
import threading
from pathlib import Path

from procinspect.errors import ParseError, SampleCancelled
from procinspect.extractors import STAT_PATH
from procinspect.lines import WHITESPACE, iter_lines, open_source, tokenize
from procinspect.models import CpuCounters

logger = logging.getLogger(__name__)

# Index of the idle counter in a tokenized "cpu " line, label included.
IDLE_FIELD = 4


class SampleTimer:
    """
    Cancellable wait between the two counter samples.

    Wraps a threading.Event so that another thread (or a stopping monitor
    sharing the same event) can cut a pending wait short.
    """

    def __init__(self, event: threading.Event | None = None) -> None:
        self._event = event if event is not None else threading.Event()

    def wait(self, interval: float) -> bool:
        """Sleep for interval seconds. Returns False if cancelled."""
        return not self._event.wait(timeout=interval)

    def cancel(self) -> None:
        """Cut any pending or future wait short."""
        self._event.set()


def parse_cpu_counters(line: str, path: Path | str | None = None) -> CpuCounters:
    """Sum the jiffy counters of a 'cpu ' line and pick out the idle one."""
    tokens = tokenize(line, WHITESPACE)
    if len(tokens) <= IDLE_FIELD:
        raise ParseError("cpu line has too few counters", path)
    try:
        counters = [int(token) for token in tokens[1:]]
    except ValueError as exc:
        raise ParseError(f"cpu line has a non-integer counter: {exc}", path) from exc
    return CpuCounters(total=sum(counters), idle=counters[IDLE_FIELD - 1])


def cpu_usage_between(first: CpuCounters, second: CpuCounters) -> float:
    """
    Busy fraction of the jiffies elapsed between two samples.

    Returns 0.0 when no jiffies elapsed or the ratio is not finite.
    """
    elapsed = second.total - first.total
    if elapsed == 0:
        return 0.0
    usage = 1 - (second.idle - first.idle) / elapsed
    if not math.isfinite(usage):
        return 0.0
    return min(1.0, max(0.0, usage))


class CpuUsageSampler:
    """
    Instantaneous CPU utilization sampler.

    Reads the aggregate counters, waits one interval, reads them again and
    derives the busy fraction. Each call to sample() is a single independent
    measurement, not a running average.
    """

    def __init__(
        self,
        procfs_root: Path | str,
        interval: float = 1.0,
        timer: SampleTimer | None = None,
    ) -> None:
        """
        Initialize the sampler.

        Args:
            procfs_root: Mount point of procfs.
            interval: Seconds between the two counter reads. Default 1.0s.
            timer: Timer used for the wait; cancelling it aborts sample().
        """
        self._procfs_root = procfs_root
        self._interval = interval
        self._timer = timer if timer is not None else SampleTimer()

    def read_counters(self) -> CpuCounters:
        """Read the aggregate 'cpu ' line once."""
        path = Path(self._procfs_root, STAT_PATH)
        with open_source(self._procfs_root, STAT_PATH) as stream:
            for line in iter_lines(stream, path=path):
                if line.startswith("cpu "):
                    return parse_cpu_counters(line, path)
        raise ParseError("no aggregate 'cpu ' line", path)

    def sample(self) -> float:
        """Measure the busy fraction over one interval."""
        first = self.read_counters()
        if not self._timer.wait(self._interval):
            raise SampleCancelled("cpu sample cancelled", Path(self._procfs_root, STAT_PATH))
        second = self.read_counters()
        usage = cpu_usage_between(first, second)
        logger.debug("CPU usage %.3f from %s -> %s", usage, first, second)
        return usage
