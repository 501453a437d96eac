"""Fallback search for the server executable under well-known install roots."""

import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from app.logger import get_logger


def default_search_roots() -> List[Path]:
    """Returns the platform-specific install roots, deduplicated, in search order."""
    if sys.platform == "win32":
        candidates = [
            os.getenv("ProgramFiles"),
            os.getenv("ProgramFiles(x86)"),
            os.getenv("ProgramW6432"),
        ]
        local_app_data = os.getenv("LOCALAPPDATA")
        if local_app_data:
            candidates.append(os.path.join(local_app_data, "Programs"))
    else:
        candidates = ["/usr/lib", "/opt", "/usr/local"]

    roots: List[Path] = []
    seen = set()
    for candidate in candidates:
        if not candidate:
            continue
        key = os.path.normcase(os.path.normpath(candidate))
        if key in seen:
            continue
        seen.add(key)
        roots.append(Path(candidate))
    return roots


def find_executable(
    filename: str, roots: Optional[Iterable[Path]] = None
) -> Optional[Path]:
    """
    Search the install roots recursively for a file named `filename`.

    Args:
        filename: Executable filename to look for
        roots: Directories to search, defaults to default_search_roots()

    Returns:
        Path of the first match, or None if no root contains it
    """
    logger = get_logger(__name__)
    wanted = os.path.normcase(filename)

    for root in default_search_roots() if roots is None else roots:
        if not Path(root).is_dir():
            logger.debug(f"Skipping missing search root: {root}")
            continue

        logger.debug(f"Searching {root} for {filename}")
        # os.walk skips directories it cannot read
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                if os.path.normcase(name) == wanted:
                    return Path(dirpath) / name
    return None
