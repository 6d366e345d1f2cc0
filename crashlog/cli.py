"""
Command line entry point.

    crashlog-notifier API_KEY CRASH_LOG [--endpoint URL] [--dry-run]

Exit status 0 when the endpoint accepted the report, 1 on any failure.
"""
import argparse
import json
import logging
import os
import sys
from typing import Optional

from crashlog.core import config
from crashlog.core.errors import CrashlogError
from crashlog.core.notifier import NotifierInfo
from crashlog.services.upload_service import UploadService
from crashlog.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crashlog-notifier",
        description="Upload a plain-text crash log to a crash-aggregation endpoint.",
    )
    parser.add_argument("api_key", help="project API key")
    parser.add_argument("crash_log", help="path to the crash log file")
    parser.add_argument("--endpoint", default=config.CRASHLOG_ENDPOINT, help="endpoint URL")
    parser.add_argument("--dry-run", action="store_true", help="print the payload instead of sending it")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="log to stderr only")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL, logging.INFO)
    setup_logging(level=level, log_dir=None if args.no_log_file else config.LOG_DIR)

    service = UploadService(args.endpoint, NotifierInfo.from_config())
    try:
        result = service.upload_file(args.crash_log, args.api_key, dry_run=args.dry_run)
    except (CrashlogError, OSError) as e:
        logger.error("Upload failed: %s", e)
        return 1

    if args.dry_run:
        print(json.dumps(result.payload, indent=2))
    else:
        print(f"Crash report sent: {os.path.basename(args.crash_log)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
