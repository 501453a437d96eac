from pathlib import Path
from typing import Sequence


class ExecutableNotFoundError(RuntimeError):
    """
    The supervised executable is missing from its configured path and
    from every known installation root. Nothing can be supervised.
    """

    def __init__(self, configured_path: str, searched_roots: Sequence[Path]):
        self.configured_path = configured_path
        self.searched_roots = list(searched_roots)
        roots = ", ".join(str(root) for root in self.searched_roots) or "none"
        super().__init__(
            f"Executable not found at {configured_path} "
            f"or under any known install root ({roots})"
        )
