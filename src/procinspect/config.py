"""Runtime configuration for procinspect."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from procinspect.errors import OpenError
from procinspect.models import ViewOptions

DEFAULT_PROCFS_ROOT = "/proc"
DEFAULT_SAMPLE_INTERVAL = 1.0
DEFAULT_POLL_RATE = 2.0


@dataclass(slots=True, frozen=True)
class InspectorConfig:
    """Immutable settings handed from the command line to the monitor."""

    procfs_root: Path = Path(DEFAULT_PROCFS_ROOT)
    options: ViewOptions = field(default_factory=ViewOptions.all_on)
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
    poll_rate: float = DEFAULT_POLL_RATE
    resolve_owners: bool = False
    log_level: str = "WARNING"


def validate_procfs_root(procfs_root: Path | str) -> Path:
    """Check the procfs root names an existing, listable directory."""
    path = Path(procfs_root)
    if not path.is_dir():
        raise OpenError("procfs root is not a directory", path)
    if not os.access(path, os.R_OK | os.X_OK):
        raise OpenError("procfs root is not readable", path)
    return path
