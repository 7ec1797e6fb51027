"""Typed failures raised by the procfs parsing engine."""

from pathlib import Path


class InspectError(Exception):
    """Base class for every failure the engine reports."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is None:
            return message
        return f"{message} ({self.path})"


class OpenError(InspectError):
    """A pseudo-file or directory is missing or inaccessible."""


class ReadError(InspectError):
    """A read failed part way through a pseudo-file."""


class ParseError(InspectError):
    """An expected label or field is absent from otherwise readable content."""


class TaskVanished(ParseError):
    """A task exited between enumeration and the read of its status."""

    def __init__(self, pid: int, path: Path | str | None = None) -> None:
        super().__init__(f"task {pid} vanished", path)
        self.pid = pid


class SampleCancelled(InspectError):
    """The wait between two CPU counter samples was cancelled."""
