# service/__init__.py

from .errors import ExecutableNotFoundError
from .process_controller import ProcessController

__all__ = ["ExecutableNotFoundError", "ProcessController"]
