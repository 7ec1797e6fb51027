"""Shared fixtures: a synthetic procfs tree under tmp_path."""

import os
from pathlib import Path

import pytest

STAT = (
    "cpu  100 0 0 80 0 0 0 0 0 0\n"
    "cpu0 25 0 0 20 0 0 0 0 0 0\n"
    "cpu1 25 0 0 20 0 0 0 0 0 0\n"
    "cpu2 25 0 0 20 0 0 0 0 0 0\n"
    "cpu3 25 0 0 20 0 0 0 0 0 0\n"
    "intr 123456 10 0 0 7 0\n"
    "ctxt 987654\n"
    "btime 1700000000\n"
    "processes 4321\n"
    "procs_running 2\n"
    "procs_blocked 0\n"
)

MEMINFO = (
    "MemTotal:       16384000 kB\n"
    "MemFree:         8000000 kB\n"
    "MemAvailable:   12000000 kB\n"
    "Active:          2048000 kB\n"
    "Inactive:        1000000 kB\n"
    "Active(anon):     512000 kB\n"
)

CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: GenuineIntel\n"
    "cpu family\t: 6\n"
    "model\t\t: 142\n"
    "model name\t: Intel(R) Core(TM) i7-8650U CPU @ 1.90GHz\n"
    "stepping\t: 10\n"
    "\n"
    "processor\t: 1\n"
    "model name\t: Some Other CPU\n"
)


def status_text(name: str, state: str, uid: int, threads: int, extra: str = "") -> str:
    return (
        f"Name:\t{name}\n"
        "Umask:\t0022\n"
        f"State:\t{state}\n"
        "Tgid:\t1\n"
        "Pid:\t1\n"
        f"Uid:\t{uid}\t{uid + 1}\t{uid}\t{uid}\n"
        f"Gid:\t{uid}\t{uid}\t{uid}\t{uid}\n"
        f"Threads:\t{threads}\n"
        f"{extra}"
    )


def build_procfs(root: Path) -> Path:
    (root / "sys" / "kernel").mkdir(parents=True)
    (root / "sys" / "kernel" / "hostname").write_text("testhost\n")
    (root / "version").write_text(
        "Linux version 6.1.0-13-amd64 (debian-kernel@lists.debian.org) (gcc 12.2.0) #1 SMP\n"
    )
    (root / "uptime").write_text("90061.5 350000.25\n")
    (root / "cpuinfo").write_text(CPUINFO)
    (root / "stat").write_text(STAT)
    (root / "loadavg").write_text("0.52 0.58 0.59 2/467 12345\n")
    (root / "meminfo").write_text(MEMINFO)

    tasks = {
        1: status_text("systemd", "S (sleeping)", 0, 1),
        42: status_text("bash", "R (running)", 1000, 4),
        314: status_text("kworker/0:1", "I (idle)", 0, 1),
    }
    for pid, text in tasks.items():
        (root / str(pid)).mkdir()
        (root / str(pid) / "status").write_text(text)

    # Entries that are not task directories
    (root / "self").mkdir()
    (root / "999").write_text("not a directory\n")
    return root


@pytest.fixture
def procfs(tmp_path: Path) -> Path:
    """A populated fake procfs root."""
    return build_procfs(tmp_path / "proc")


class FailingListing:
    """Directory listing that fails with EIO after its first entry."""

    def __init__(self, listing) -> None:
        self._listing = listing
        self._returned = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self._listing.close()

    def __iter__(self):
        return self

    def __next__(self):
        if self._returned >= 1:
            raise OSError(5, "Input/output error")
        self._returned += 1
        return next(self._listing)


@pytest.fixture
def failing_listing(procfs: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """The fake procfs, with listing its root failing partway through."""
    real_scandir = os.scandir

    def scandir(path):
        listing = real_scandir(path)
        if Path(path) != procfs:
            return listing
        return FailingListing(listing)

    monkeypatch.setattr(os, "scandir", scandir)
    return procfs
