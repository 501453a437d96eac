"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import psutil
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import WatchdogConfig  # noqa: E402
from app.logger import setup_logging  # noqa: E402

# Loggers refuse to hand out instances before setup
setup_logging(console=False)


def _fake_process(name: str, pid: int, status: str = psutil.STATUS_RUNNING) -> MagicMock:
    """Fake psutil.Process as yielded by process_iter(["pid", "name", "status"])."""
    proc = MagicMock()
    proc.pid = pid
    proc.info = {"pid": pid, "name": name, "status": status}
    return proc


@pytest.fixture
def make_process():
    return _fake_process


@pytest.fixture
def config(tmp_path) -> WatchdogConfig:
    return WatchdogConfig(
        health_url="http://127.0.0.1:32400/identity",
        executable_path=str(tmp_path / "missing" / "Plex Media Server.exe"),
        poll_interval=60,
        grace_period=120,
        settle_period=15,
        log_file=str(tmp_path / "watchdog.log"),
    )


@pytest.fixture
def args_namespace():
    return SimpleNamespace(
        url=None,
        executable=None,
        interval=None,
        grace=None,
        settle=None,
        log_file=None,
        verbose=False,
    )
