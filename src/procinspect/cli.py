"""Command-line entry point for procinspect."""

import argparse
import logging
import sys
from collections.abc import Sequence

from procinspect.config import (
    DEFAULT_PROCFS_ROOT,
    DEFAULT_SAMPLE_INTERVAL,
    InspectorConfig,
    validate_procfs_root,
)
from procinspect.errors import OpenError
from procinspect.logging_config import setup_logging
from procinspect.models import ViewOptions
from procinspect.monitor import SystemMonitor
from procinspect.owners import resolve_owner_name
from procinspect.report import render_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the procinspect command."""
    parser = argparse.ArgumentParser(
        prog="procinspect",
        description="Report host state read from the procfs pseudo-filesystem.",
    )
    parser.add_argument(
        "-a", dest="all", action="store_true",
        help="display all sections (equivalent to -lrst, default)",
    )
    parser.add_argument("-l", dest="task_list", action="store_true", help="task list")
    parser.add_argument(
        "-p", dest="procfs_root", metavar="procfs_dir", default=DEFAULT_PROCFS_ROOT,
        help="change the expected procfs mount point (default: %(default)s)",
    )
    parser.add_argument("-r", dest="hardware", action="store_true", help="hardware information")
    parser.add_argument("-s", dest="system", action="store_true", help="system information")
    parser.add_argument("-t", dest="task_summary", action="store_true", help="task information")
    parser.add_argument(
        "-u", dest="resolve_owners", action="store_true",
        help="show owner account names instead of numeric uids",
    )
    parser.add_argument(
        "--interval", type=float, default=DEFAULT_SAMPLE_INTERVAL, metavar="SECONDS",
        help="CPU usage sampling interval (default: %(default)s)",
    )
    parser.add_argument("--tui", action="store_true", help="run the interactive viewer")
    parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper, help="logging verbosity on stderr (default: %(default)s)",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> ViewOptions:
    """Map section flags to view options; no section flag means all of them."""
    if args.all or not (args.task_list or args.hardware or args.system or args.task_summary):
        return ViewOptions.all_on()
    return ViewOptions(
        hostname=args.system,
        kernel_version=args.system,
        uptime=args.system,
        hardware=args.hardware,
        task_summary=args.task_summary,
        task_list=args.task_list,
    )


def config_from_args(args: argparse.Namespace) -> InspectorConfig:
    """Validate parsed arguments into an InspectorConfig."""
    if args.interval < 0:
        raise ValueError("--interval must not be negative")
    return InspectorConfig(
        procfs_root=validate_procfs_root(args.procfs_root),
        options=options_from_args(args),
        sample_interval=args.interval,
        resolve_owners=args.resolve_owners,
        log_level=args.log_level,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the procinspect command."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
    except (OpenError, ValueError) as exc:
        print(f"procinspect: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, textual=args.tui)

    logger.info("Using procfs root %s", config.procfs_root)
    logger.debug("Options selected: %s", config.options)

    if args.tui:
        from procinspect.app import InspectorApp

        InspectorApp(config).run()
        return 0

    monitor = SystemMonitor(
        procfs_root=config.procfs_root,
        options=config.options,
        sample_interval=config.sample_interval,
    )
    snapshot = monitor.collect_snapshot()
    resolver = resolve_owner_name if config.resolve_owners else None
    print(render_report(snapshot, config.options, resolver))
    return 0


if __name__ == "__main__":
    sys.exit(main())
