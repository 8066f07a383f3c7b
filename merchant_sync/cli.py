#!/usr/bin/env python3
"""Command line entry point for running merchant sync."""

import argparse
import asyncio
import logging
import sys

from .app import build_app
from .config import create_config_from_args


def setup_logging(log_file: str = None, verbose: bool = False):
    """Setup logging configuration.

    Args:
        log_file: Optional file path for logging
        verbose: If True, enable debug logging
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "[%(asctime)s] %(levelname)s: %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))

    handlers = [console_handler]

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers)


def parse_arguments(argv=None):
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Keep merchant campaigns and CRM data in sync with the backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll with configuration from .env until interrupted
  merchant-sync

  # Log in, then poll for ten minutes
  merchant-sync --merchant-id m-42 --token TOKEN --duration 600

  # Refresh campaigns once and exit
  merchant-sync --refresh campaigns
        """,
    )

    backend_group = parser.add_argument_group("backend")
    backend_group.add_argument(
        "--api-url",
        type=str,
        help="Merchant backend base URL (or set MERCHANT_API_URL env var)",
    )
    backend_group.add_argument(
        "--session-dir",
        type=str,
        help="Directory holding the stored session (or set SESSION_DIR env var)",
    )

    session_group = parser.add_argument_group("session")
    session_group.add_argument(
        "--merchant-id",
        type=str,
        help="Merchant ID to store as the current session (requires --token)",
    )
    session_group.add_argument(
        "--token",
        type=str,
        help="Access token for --merchant-id",
    )

    sync_group = parser.add_argument_group("sync options")
    sync_group.add_argument(
        "--refresh",
        choices=["campaigns", "crm", "analytics", "all"],
        help="Refresh once and exit instead of polling",
    )
    sync_group.add_argument(
        "--duration",
        type=float,
        help="Stop polling after this many seconds (default: run until interrupted)",
    )
    sync_group.add_argument(
        "--poll-analytics",
        action="store_true",
        help="Also poll analytics (or set SYNC_POLL_ANALYTICS=true)",
    )

    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "--log-file",
        type=str,
        help="Path to log file (console always logs)",
    )
    log_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    args = parser.parse_args(argv)
    if bool(args.merchant_id) != bool(args.token):
        parser.error("--merchant-id and --token must be given together")
    if args.duration is not None and args.duration <= 0:
        parser.error("--duration must be a positive number of seconds")
    return args


async def run(app, args) -> int:
    """Run a one-shot refresh or the poller.

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)

    if args.merchant_id:
        app.session.save_session(args.merchant_id, args.token)
        logger.info(f"Stored session for merchant {args.merchant_id}")

    if not app.session.session_id:
        logger.error("No merchant session. Log in with --merchant-id and --token")
        return 1

    if args.refresh:
        ok = await app.sync_service.refresh(args.refresh)
        return 0 if ok else 1

    if not await app.sync_service.start():
        return 1

    try:
        if args.duration is not None:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()
    finally:
        app.sync_service.stop()

    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    # Exits with status 1 on invalid configuration
    config = create_config_from_args(args)

    setup_logging(log_file=config.log_file, verbose=args.verbose)
    logger = logging.getLogger(__name__)

    logger.info(f"Backend: {config.api_url}")

    try:
        app = build_app(config)
        exit_code = asyncio.run(run(app, args))
    except KeyboardInterrupt:
        logger.info("\nSync interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=args.verbose)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
