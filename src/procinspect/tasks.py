"""
Task enumeration and per-task status parsing.

Listing the task directories and reading each one's status is inherently
racy: a task may exit in between. Such tasks raise TaskVanished and are
skipped by collect_tasks, never retried.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from procinspect.errors import OpenError, ParseError, ReadError, TaskVanished
from procinspect.lines import iter_lines, open_source
from procinspect.models import TaskRecord

logger = logging.getLogger(__name__)

_VANISHED = (FileNotFoundError, ProcessLookupError)


def enumerate_tasks(procfs_root: Path | str) -> Iterator[int]:
    """
    Yield the ids of the task directories directly under the procfs root.

    Order follows the directory listing and is not sorted.
    """
    try:
        entries = os.scandir(procfs_root)
    except OSError as exc:
        raise OpenError(f"cannot list: {exc.strerror or exc}", procfs_root) from exc

    with entries:
        while True:
            try:
                entry = next(entries, None)
            except OSError as exc:
                raise ReadError(f"listing failed: {exc.strerror or exc}", procfs_root) from exc
            if entry is None:
                return
            if not (entry.name.isascii() and entry.name.isdigit()):
                continue
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue  # gone between readdir and stat
            yield int(entry.name)


def count_tasks(procfs_root: Path | str) -> int:
    """Number of task directories currently listed under the procfs root."""
    return sum(1 for _ in enumerate_tasks(procfs_root))


def _after_tab(line: str) -> str:
    _, _, value = line.partition("\t")
    return value


def read_task_status(procfs_root: Path | str, pid: int) -> TaskRecord:
    """
    Parse Name, State, Uid and Threads from a task's status file.

    Scanning stops at the 'Threads:' line, which follows the other three.
    """
    relative = f"{pid}/status"
    path = Path(procfs_root, relative)
    name = state = uid = threads = None

    try:
        with open_source(procfs_root, relative) as stream:
            for line in iter_lines(stream, path=path):
                if line.startswith("Name:"):
                    name = _after_tab(line)
                elif line.startswith("State:"):
                    _, paren, rest = line.partition("(")
                    word, close, _ = rest.partition(")")
                    if paren and close:
                        state = word
                elif line.startswith("Uid:"):
                    uid = _after_tab(line).partition("\t")[0]
                elif line.startswith("Threads:"):
                    threads = _after_tab(line)
                    break
    except (OpenError, ReadError) as exc:
        if isinstance(exc.__cause__, _VANISHED):
            raise TaskVanished(pid, path) from exc
        raise

    if name is None:
        raise ParseError("no 'Name:' line", path)
    if state is None:
        raise ParseError("no parenthesised 'State:' word", path)
    if uid is None:
        raise ParseError("no 'Uid:' line", path)
    if threads is None:
        raise ParseError("no 'Threads:' line", path)

    try:
        owner_id = int(uid)
        thread_count = int(threads)
    except ValueError as exc:
        raise ParseError(f"malformed status field: {exc}", path) from exc

    return TaskRecord(
        pid=pid,
        state=state,
        name=name,
        owner_id=owner_id,
        thread_count=thread_count,
    )


def collect_tasks(procfs_root: Path | str) -> list[TaskRecord]:
    """Read the status of every enumerated task, skipping unreadable ones."""
    records: list[TaskRecord] = []
    for pid in enumerate_tasks(procfs_root):
        try:
            records.append(read_task_status(procfs_root, pid))
        except TaskVanished:
            logger.debug("Task %d exited before its status was read", pid)
        except (OpenError, ReadError, ParseError) as exc:
            logger.warning("Skipping task %d: %s", pid, exc)
    return records
