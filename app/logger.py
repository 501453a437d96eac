import logging
import sys

loggerInitialized = False


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    console: bool = True,
    format_string: str | None = None,
    date_format: str | None = None,
) -> None:
    """
    Setup the root logger with the log file sink and optional console echo.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Path of the append-only log file, None to skip file output
        console: Also echo log lines to stdout (verbose mode)
        format_string: Custom format string for log messages
        date_format: Custom date format string
    """
    global loggerInitialized
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if date_format is None:
        date_format = "%Y-%m-%d %H:%M:%S"

    formatter = logging.Formatter(fmt=format_string, datefmt=date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    loggerInitialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Configured logger instance
    """
    if loggerInitialized:
        return logging.getLogger(name)
    else:
        raise SystemError("Initialize logger before use!")
