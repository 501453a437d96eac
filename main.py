import argparse
import logging
import sys
from typing import List, Optional
from app.logger import setup_logging, get_logger
from app.config import WatchdogConfig
from app.supervision_loop import SupervisionLoop
from service import ExecutableNotFoundError, ProcessController


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Restart Plex Media Server when its health endpoint stops answering"
    )
    parser.add_argument("--url", type=str, help="Health endpoint to probe")
    parser.add_argument("--executable", type=str, help="Path to the server executable")
    parser.add_argument("--interval", type=int, help="Seconds between health probes")
    parser.add_argument("--grace", type=int, help="Seconds to wait after starting the server")
    parser.add_argument("--settle", type=int, help="Seconds to wait after killing the server")
    parser.add_argument("--log-file", type=str, help="File the watchdog log is appended to")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Echo log lines to the console"
    )
    parser.add_argument("--debug", action="store_true", help="Log intermediate steps")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Watchdog entry point.

    Builds the configuration, sets up logging and runs the supervision
    loop until interrupted or the executable cannot be found.

    Returns:
        Exit code (0 on interrupt, 1 on unexpected error, 2 on configuration error)
    """
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.debug else logging.INFO

    try:
        config = WatchdogConfig.from_args(args)
    except ValueError as e:
        setup_logging(level=level, console=True)
        get_logger(__name__).error(f"Invalid configuration: {e}")
        return 2

    setup_logging(level=level, log_file=config.log_file, console=config.verbose)
    logger = get_logger(__name__)

    logger.info("=" * 60)
    logger.info("Plex Watchdog - Starting")
    logger.info("=" * 60)

    exit_code = 0
    try:
        loop = SupervisionLoop(config, ProcessController(config))
        loop.run()

    except ExecutableNotFoundError as e:
        logger.critical(f"Cannot supervise without an executable, exiting: {e}")
        exit_code = 2

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt (Ctrl+C)")
        exit_code = 0

    except Exception as e:
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        exit_code = 1

    finally:
        logger.info("=" * 60)
        logger.info(f"Plex Watchdog - Exiting (code: {exit_code})")
        logger.info("=" * 60)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
