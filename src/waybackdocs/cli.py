"""
Command-line entry point.

    waybackdocs -d example.com [-n 10] [-o output]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .core.controller import DEFAULT_WORKERS, RunConfig, WaybackDocsController
from .core.exceptions import WaybackDocsError
from .core.logger import create_error_tracker, initialize_logging
from .core.task_filter import DEFAULT_ARCHIVE_HOST
from .utils.file_manager import DEFAULT_OUTPUT_DIR
from .utils.rate_limiter import DEFAULT_TASK_DELAY
from .utils.validators import validate_domain


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="waybackdocs",
        description="Download archived PDF/DOC/DOCX snapshots of a domain from the Wayback Machine.",
    )
    parser.add_argument("-d", "--domain", required=True,
                        help="Target domain (e.g. example.com)")
    parser.add_argument("-n", "--max-downloads", type=int, default=0,
                        help="Maximum downloads (0 for unlimited)")
    parser.add_argument("-o", "--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help=f"Directory for downloaded files (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("-w", "--workers", type=int, default=DEFAULT_WORKERS,
                        help=f"Concurrent download workers (default: {DEFAULT_WORKERS})")
    parser.add_argument("--delay", type=float, default=DEFAULT_TASK_DELAY,
                        help=f"Seconds each worker waits before every download (default: {DEFAULT_TASK_DELAY:g})")
    parser.add_argument("--global-rate", action="store_true",
                        help="Also limit the whole pool to one request per delay")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Per-request timeout in seconds (default: none)")
    parser.add_argument("--archive-host", default=DEFAULT_ARCHIVE_HOST,
                        help=f"Archive host (default: {DEFAULT_ARCHIVE_HOST})")
    parser.add_argument("--log-dir", default=None,
                        help="Also write rotating log files to this directory")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug output on the console")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    ok, domain, err = validate_domain(args.domain)
    if not ok:
        parser.print_usage(sys.stderr)
        print(f"waybackdocs: error: {err}", file=sys.stderr)
        return 2
    if args.max_downloads < 0 or args.workers < 1 or args.delay < 0:
        parser.print_usage(sys.stderr)
        print("waybackdocs: error: --max-downloads and --delay must be >= 0, --workers >= 1", file=sys.stderr)
        return 2

    logger = initialize_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)

    config = RunConfig(
        domain=domain,
        output_dir=args.output_dir,
        workers=args.workers,
        delay_secs=args.delay,
        max_tasks=args.max_downloads,
        archive_host=args.archive_host,
        timeout=args.timeout,
        global_rate=args.global_rate,
    )
    controller = WaybackDocsController(config, logger=logger, error_tracker=create_error_tracker('tasks'))

    try:
        controller.run()
    except WaybackDocsError as e:
        logger.critical(str(e))
        return 1
    return 0
