"""
Field extractors for the fixed set of procfs pseudo-files.

Every reader takes the procfs root, opens exactly one pseudo-file, and either
returns a fully populated value or raises an InspectError subclass.
"""

import logging
import re
from pathlib import Path

from procinspect.errors import ParseError
from procinspect.lines import (
    WHITESPACE,
    TokenCursor,
    iter_lines,
    open_source,
    read_first_line,
    tokenize,
)
from procinspect.models import LoadAverage, MemoryInfo, SystemCounters, Uptime

logger = logging.getLogger(__name__)

HOSTNAME_PATH = "sys/kernel/hostname"
VERSION_PATH = "version"
UPTIME_PATH = "uptime"
CPUINFO_PATH = "cpuinfo"
STAT_PATH = "stat"
LOADAVG_PATH = "loadavg"
MEMINFO_PATH = "meminfo"

_DIGIT_RUN = re.compile(r"[0-9]+")


def integer_after_label(line: str, label: str, path: Path | str | None = None) -> int:
    """
    Return the first run of ASCII digits following a line's label.

    The label is skipped by length, so digits inside the label itself are
    never picked up.
    """
    match = _DIGIT_RUN.search(line, len(label))
    if match is None:
        raise ParseError(f"no number after {label!r}", path)
    return int(match.group())


def read_hostname(procfs_root: Path | str) -> str:
    """Return the host name, which must not be empty."""
    hostname = read_first_line(procfs_root, HOSTNAME_PATH)
    if not hostname:
        raise ParseError("hostname is empty", Path(procfs_root, HOSTNAME_PATH))
    return hostname


def parse_kernel_version(line: str, path: Path | str | None = None) -> str:
    """Return the release from a '<os> version <release> ...' banner."""
    cursor = TokenCursor(line)
    token = None
    for _ in range(3):
        token = cursor.next(WHITESPACE)
        if token is None:
            raise ParseError("kernel version banner has fewer than 3 fields", path)
    return token


def read_kernel_version(procfs_root: Path | str) -> str:
    """Read the kernel release from the version banner."""
    line = read_first_line(procfs_root, VERSION_PATH)
    return parse_kernel_version(line, Path(procfs_root, VERSION_PATH))


def parse_uptime_seconds(line: str, path: Path | str | None = None) -> int:
    """Parse the first field of an uptime line, discarding the fraction."""
    token = TokenCursor(line).next(WHITESPACE)
    if token is None:
        raise ParseError("uptime line is empty", path)
    whole, _, fraction = token.partition(".")
    if not whole.isdigit() or (fraction and not fraction.isdigit()):
        raise ParseError(f"uptime is not a decimal number: {token!r}", path)
    return int(whole)


def read_uptime(procfs_root: Path | str) -> Uptime:
    """Read the whole seconds since boot, decomposed into units."""
    line = read_first_line(procfs_root, UPTIME_PATH)
    return Uptime.from_seconds(parse_uptime_seconds(line, Path(procfs_root, UPTIME_PATH)))


def read_cpu_model(procfs_root: Path | str) -> str:
    """Return the first 'model name' entry of cpuinfo."""
    path = Path(procfs_root, CPUINFO_PATH)
    with open_source(procfs_root, CPUINFO_PATH) as stream:
        for line in iter_lines(stream, path=path):
            if not line.startswith("model name"):
                continue
            cursor = TokenCursor(line)
            cursor.next("\t:")
            model = cursor.next("\t:")
            if model is None:
                raise ParseError("'model name' has no value", path)
            return model[1:] if model.startswith(" ") else model
    raise ParseError("no 'model name' line", path)


def read_processor_count(procfs_root: Path | str) -> int:
    """
    Count per-core cpu lines of /proc/stat.

    Scanning stops at the 'intr' line, which always follows the cpu block.
    The aggregate 'cpu' line is excluded from the count.
    """
    path = Path(procfs_root, STAT_PATH)
    cpu_lines = 0
    scanned = 0
    with open_source(procfs_root, STAT_PATH) as stream:
        for line in iter_lines(stream, path=path):
            scanned += 1
            if line.startswith("cpu"):
                cpu_lines += 1
            elif line.startswith("intr"):
                break

    if scanned == 0:
        raise ParseError("stat is empty", path)
    if cpu_lines == 0:
        raise ParseError("no cpu lines", path)
    return cpu_lines - 1


def parse_load_average(line: str, path: Path | str | None = None) -> LoadAverage:
    """Keep the first three load average tokens verbatim."""
    tokens = tokenize(line, WHITESPACE)
    if len(tokens) < 3:
        raise ParseError("load average line has fewer than 3 fields", path)
    return LoadAverage(one=tokens[0], five=tokens[1], fifteen=tokens[2])


def read_load_average(procfs_root: Path | str) -> LoadAverage:
    """Read the 1, 5 and 15 minute load averages."""
    line = read_first_line(procfs_root, LOADAVG_PATH)
    return parse_load_average(line, Path(procfs_root, LOADAVG_PATH))


def read_memory_info(procfs_root: Path | str) -> MemoryInfo:
    """Read the MemTotal and Active figures, in KiB."""
    path = Path(procfs_root, MEMINFO_PATH)
    total = active = None
    with open_source(procfs_root, MEMINFO_PATH) as stream:
        for line in iter_lines(stream, path=path):
            if total is None and line.startswith("MemTotal:"):
                total = integer_after_label(line, "MemTotal:", path)
            elif active is None and line.startswith("Active:"):
                active = integer_after_label(line, "Active:", path)
            if total is not None and active is not None:
                break

    if total is None:
        raise ParseError("no 'MemTotal:' line", path)
    if active is None:
        raise ParseError("no 'Active:' line", path)
    return MemoryInfo(total_kib=total, active_kib=active)


_COUNTER_LABELS = ("intr", "ctxt", "processes")


def read_system_counters(procfs_root: Path | str) -> SystemCounters:
    """
    Read the interrupt, context switch and fork totals from /proc/stat.

    Only the first number of the 'intr' line is kept: the aggregate total
    that precedes the per-IRQ counts.
    """
    path = Path(procfs_root, STAT_PATH)
    found: dict[str, int] = {}
    with open_source(procfs_root, STAT_PATH) as stream:
        for line in iter_lines(stream, path=path):
            for label in _COUNTER_LABELS:
                if label not in found and line.startswith(label):
                    found[label] = integer_after_label(line, label, path)
                    break
            if len(found) == len(_COUNTER_LABELS):
                break

    missing = [label for label in _COUNTER_LABELS if label not in found]
    if missing:
        raise ParseError(f"missing counters: {', '.join(missing)}", path)

    logger.debug("Counters from %s: %s", path, found)
    return SystemCounters(
        interrupts=found["intr"],
        context_switches=found["ctxt"],
        forks=found["processes"],
    )
