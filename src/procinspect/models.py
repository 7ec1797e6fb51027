"""Data models for procinspect."""

from dataclasses import dataclass

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY


@dataclass(slots=True, frozen=True)
class Uptime:
    """Time since boot, decomposed into 365-day years and smaller units."""

    total_seconds: int
    years: int
    days: int
    hours: int
    minutes: int
    seconds: int

    @classmethod
    def from_seconds(cls, total_seconds: int) -> "Uptime":
        """Greedily split a second count, largest unit first."""
        if total_seconds < 0:
            raise ValueError(f"uptime cannot be negative: {total_seconds}")
        years, remainder = divmod(total_seconds, SECONDS_PER_YEAR)
        days, remainder = divmod(remainder, SECONDS_PER_DAY)
        hours, remainder = divmod(remainder, SECONDS_PER_HOUR)
        minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)
        return cls(
            total_seconds=total_seconds,
            years=years,
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
        )


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """1, 5 and 15 minute load averages, kept as the kernel printed them."""

    one: str
    five: str
    fifteen: str


@dataclass(slots=True, frozen=True)
class MemoryInfo:
    """Total and active memory in KiB."""

    total_kib: int
    active_kib: int

    @property
    def used_percent(self) -> float:
        """Active memory as a percentage of the total."""
        if self.total_kib == 0:
            return 0.0
        return self.active_kib / self.total_kib * 100


@dataclass(slots=True, frozen=True)
class SystemCounters:
    """Cumulative counters since boot."""

    interrupts: int
    context_switches: int
    forks: int


@dataclass(slots=True, frozen=True)
class CpuCounters:
    """Jiffy totals from the aggregate cpu line."""

    total: int
    idle: int


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """Immutable record of one task's status."""

    pid: int
    state: str  # 'running', 'sleeping', 'zombie', ...
    name: str
    owner_id: int  # real uid
    thread_count: int


@dataclass(slots=True, frozen=True)
class ViewOptions:
    """Switches selecting which report sections are collected."""

    hostname: bool = False
    kernel_version: bool = False
    uptime: bool = False
    hardware: bool = False
    task_summary: bool = False
    task_list: bool = False

    @classmethod
    def all_on(cls) -> "ViewOptions":
        """Every section enabled, the default when no section is chosen."""
        return cls(True, True, True, True, True, True)

    @property
    def system(self) -> bool:
        """True when any of the system information fields is enabled."""
        return self.hostname or self.kernel_version or self.uptime
