import os
import sys
from dataclasses import dataclass
from pathlib import PureWindowsPath, PurePosixPath
from typing import Any


"""
Watchdog configuration and constants.

Module-level values are the defaults, read from environment variables.
WatchdogConfig bundles them into one immutable object built at startup.
"""


def _default_executable() -> str:
    if sys.platform == "win32":
        program_files = os.getenv("ProgramFiles(x86)", r"C:\Program Files (x86)")
        return str(
            PureWindowsPath(program_files)
            / "Plex"
            / "Plex Media Server"
            / "Plex Media Server.exe"
        )
    return str(PurePosixPath("/usr/lib/plexmediaserver") / "Plex Media Server")


def _env_int(name: str, default: int) -> Any:
    """
    Read an integer setting from the environment.

    A malformed value is returned unparsed so WatchdogConfig rejects it
    with a ValueError instead of failing at import time.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return raw


# Health endpoint probed on every poll
# Read from HEALTH_URL environment variable
HEALTH_URL = os.getenv("HEALTH_URL", "http://127.0.0.1:32400/identity")

# Configured location of the server executable (may be stale)
EXECUTABLE_PATH = os.getenv("PLEX_EXECUTABLE", _default_executable())

# Time between health probes in seconds
POLL_INTERVAL = _env_int("POLL_INTERVAL", 60)

# Time to wait after starting the server before probing it, in seconds
GRACE_PERIOD = _env_int("GRACE_PERIOD", 120)

# Time to wait after killing processes before restarting, in seconds
SETTLE_PERIOD = _env_int("SETTLE_PERIOD", 15)

# Request timeout for a single health probe in seconds
PROBE_TIMEOUT = 15

# Display name of the primary server process
PROCESS_NAME = "Plex Media Server"

# Name pattern covering every process of the supervised application
KILL_PATTERN = "Plex*"

# Append-only log sink
LOG_FILE = os.getenv("WATCHDOG_LOG_FILE", "plex-watchdog.log")


@dataclass(frozen=True)
class WatchdogConfig:
    """
    Immutable watchdog settings, shared by the loop and the process controller.

    Raises:
        ValueError: If any of the timing values is not positive
    """

    health_url: str = HEALTH_URL
    executable_path: str = EXECUTABLE_PATH
    poll_interval: int = POLL_INTERVAL
    grace_period: int = GRACE_PERIOD
    settle_period: int = SETTLE_PERIOD
    probe_timeout: float = PROBE_TIMEOUT
    process_name: str = PROCESS_NAME
    kill_pattern: str = KILL_PATTERN
    verbose: bool = False
    log_file: str = LOG_FILE

    def __post_init__(self):
        for field_name in ("poll_interval", "grace_period"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    f"{field_name} must be a positive integer, got {value!r}"
                )
        for field_name in ("settle_period", "probe_timeout"):
            value = getattr(self, field_name)
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value <= 0
            ):
                raise ValueError(f"{field_name} must be positive, got {value!r}")
        if not self.health_url:
            raise ValueError("health_url must not be empty")

    @property
    def executable_name(self) -> str:
        """Filename the fallback search looks for."""
        # Windows separators are accepted on every platform
        return PureWindowsPath(self.executable_path).name

    @classmethod
    def from_args(cls, args: Any) -> "WatchdogConfig":
        """
        Build a config from parsed command-line arguments.

        Args:
            args: argparse namespace; options left as None use the defaults

        Returns:
            New WatchdogConfig instance
        """
        overrides = {
            "health_url": args.url,
            "executable_path": args.executable,
            "poll_interval": args.interval,
            "grace_period": args.grace,
            "settle_period": args.settle,
            "log_file": args.log_file,
        }
        values = {key: value for key, value in overrides.items() if value is not None}
        return cls(verbose=bool(args.verbose), **values)
