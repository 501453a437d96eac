import fnmatch
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import psutil

from app.config import WatchdogConfig
from app.logger import get_logger
from .errors import ExecutableNotFoundError
from .executable_locator import default_search_roots, find_executable


def display_name(process_name: str) -> str:
    """Strip the Windows executable suffix from an OS process name."""
    if process_name.lower().endswith(".exe"):
        return process_name[:-4]
    return process_name


def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific flags that detach the child from the watchdog."""
    if sys.platform == "win32":
        return {
            "creationflags": subprocess.DETACHED_PROCESS
            | subprocess.CREATE_NEW_PROCESS_GROUP
        }
    return {"start_new_session": True}


class ProcessController:
    """
    Locate, start, and force-stop the supervised server process.

    Every check re-queries the OS process table by name. The only handle
    kept is the last child it launched, so that child gets reaped when it dies.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the process controller.

        Args:
            config: Watchdog configuration
            sleep: Blocking wait used for the grace and settle periods
        """
        self.config = config
        self._sleep = sleep
        self._child: Optional[subprocess.Popen] = None
        self.logger = get_logger(__name__)

    def _live_processes(self) -> Iterator[Tuple[psutil.Process, str]]:
        """Yield (process, display name) for every live process except the watchdog."""
        own_pid = os.getpid()
        for proc in psutil.process_iter(["pid", "name", "status"]):
            try:
                if proc.info.get("pid") == own_pid:
                    continue
                if proc.info.get("status") == psutil.STATUS_ZOMBIE:
                    continue
                yield proc, display_name(proc.info.get("name") or "")
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue

    def find_processes(self, pattern: str) -> List[psutil.Process]:
        """
        Enumerate processes whose display name matches a shell-style pattern.

        Args:
            pattern: Name pattern, e.g. "Plex*" (case-insensitive)

        Returns:
            Matching live processes, excluding the watchdog itself
        """
        pattern = pattern.lower()
        try:
            return [
                proc
                for proc, name in self._live_processes()
                if fnmatch.fnmatchcase(name.lower(), pattern)
            ]
        except psutil.Error as e:
            self.logger.warning(f"Failed to enumerate processes: {e}")
            return []

    def is_running(self) -> bool:
        """
        Returns:
            True if a live process named exactly like the primary server process exists
        """
        self._reap_child()
        wanted = self.config.process_name.lower()
        try:
            return any(name.lower() == wanted for _proc, name in self._live_processes())
        except psutil.Error as e:
            self.logger.warning(f"Failed to enumerate processes: {e}")
            return False

    def ensure_started(self, is_first_run: bool = False) -> None:
        """
        Start the server unless it is already running.

        Args:
            is_first_run: True for the startup check (logs "already running")

        Raises:
            ExecutableNotFoundError: If the executable cannot be located anywhere
        """
        if self.is_running():
            if is_first_run:
                self.logger.info(f"{self.config.process_name} is already running")
            return

        executable = self._resolve_executable()
        self._launch(executable)

        self.logger.info(
            f"Waiting {self.config.grace_period}s for {self.config.process_name} to initialize"
        )
        self._sleep(self.config.grace_period)

    def kill_all(self, pattern: Optional[str] = None) -> int:
        """
        Force-kill every process of the supervised application.

        Args:
            pattern: Name pattern, defaults to config.kill_pattern

        Returns:
            Number of processes killed
        """
        pattern = pattern or self.config.kill_pattern
        processes = self.find_processes(pattern)
        if not processes:
            self.logger.info(f"No processes matching '{pattern}' found, nothing to kill")
            return 0

        killed = 0
        for proc in processes:
            name = proc.info.get("name")
            self.logger.info(f"Killing process {name} (PID: {proc.pid})")
            try:
                proc.kill()
                killed += 1
            except psutil.NoSuchProcess:
                self.logger.debug(f"Process {proc.pid} exited before it was killed")
            except psutil.AccessDenied:
                self.logger.warning(f"Access denied killing {name} (PID: {proc.pid})")
            except psutil.Error as e:
                self.logger.warning(f"Failed to kill {name} (PID: {proc.pid}): {e}")

        self.logger.info(
            f"Killed {killed} of {len(processes)} processes matching '{pattern}', "
            f"waiting {self.config.settle_period}s for resources to be released"
        )
        self._reap_child()
        self._sleep(self.config.settle_period)
        return killed

    def _resolve_executable(self) -> Path:
        """
        Returns the configured executable path, or a discovered one if it is stale.
        The config itself is never changed.
        """
        configured = Path(self.config.executable_path)
        if configured.is_file():
            return configured

        self.logger.warning(
            f"Executable not found at {configured}, searching install locations"
        )
        roots = default_search_roots()
        found = find_executable(self.config.executable_name, roots)
        if found is None:
            error = ExecutableNotFoundError(str(configured), roots)
            self.logger.critical(f"Configuration error: {error}")
            raise error

        self.logger.warning(f"Using executable found at {found} instead of {configured}")
        return found

    def _launch(self, executable: Path) -> None:
        self.logger.info(f"Starting {self.config.process_name}: {executable}")
        try:
            process = subprocess.Popen(
                [str(executable)],
                cwd=str(executable.parent),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                close_fds=True,
                **_get_popen_creation_flags(),
            )
        except OSError as e:
            # Next probe fails and remediation retries
            self.logger.error(f"Failed to start {executable}: {e}")
            return
        self._child = process
        self.logger.debug(f"Process started with PID: {process.pid}")

    def _reap_child(self) -> None:
        """Collect the exit status of the launched child if it has died."""
        if self._child is None:
            return
        exit_code = self._child.poll()
        if exit_code is not None:
            self.logger.info(
                f"Started process (PID: {self._child.pid}) exited with code {exit_code}"
            )
            self._child = None
