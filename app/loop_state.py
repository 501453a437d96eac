from enum import Enum


class LoopState(str, Enum):
    """
    Enumeration of the supervision loop states.

    States:
        INITIALIZING: Startup check, entered once
        POLLING: Probing the health endpoint at the poll interval
        REMEDIATING: Killing and restarting after an unhealthy probe
    """

    INITIALIZING = "initializing"
    POLLING = "polling"
    REMEDIATING = "remediating"
