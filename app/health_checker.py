import requests
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from .logger import get_logger


class ProbeOutcome(str, Enum):
    """
    Transport-level outcome of a single health probe.

    States:
        SUCCESS: An HTTP response arrived (any status code)
        TRANSPORT_FAILURE: Connection refused, DNS failure, or other request error
        TIMEOUT: No response within the probe timeout
    """

    SUCCESS = "success"
    TRANSPORT_FAILURE = "transport_failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ProbeResult:
    outcome: ProbeOutcome
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def success(cls, status_code: int) -> "ProbeResult":
        return cls(ProbeOutcome.SUCCESS, int(status_code))

    @classmethod
    def transport_failure(cls, detail: str = "") -> "ProbeResult":
        return cls(ProbeOutcome.TRANSPORT_FAILURE, detail=detail)

    @classmethod
    def timeout(cls, detail: str = "") -> "ProbeResult":
        return cls(ProbeOutcome.TIMEOUT, detail=detail)

    @property
    def is_healthy(self) -> bool:
        # Exact match only: 204 or 301 are failures too
        return self.outcome is ProbeOutcome.SUCCESS and self.status_code == 200

    def __str__(self) -> str:
        if self.outcome is ProbeOutcome.SUCCESS:
            return f"HTTP {self.status_code}"
        if self.detail:
            return f"{self.outcome.value} ({self.detail})"
        return self.outcome.value


class HealthChecker:
    """
    Probe the supervised service's health endpoint via HTTP requests.

    Transport errors never escape: every probe returns a ProbeResult.
    """

    def __init__(self, url: str, timeout: float = 15):
        """
        Initialize the health checker.

        Args:
            url: Health endpoint to GET
            timeout: Request timeout in seconds (default: 15)
        """
        self.url = url
        self.timeout = timeout

        self.logger = get_logger(__name__)

    def probe(self) -> ProbeResult:
        """
        Perform a single health probe.

        Returns:
            ProbeResult describing the outcome
        """
        try:
            response = requests.get(self.url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            self.logger.debug(f"Health probe timed out: {e}")
            return ProbeResult.timeout(str(e))
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"Health probe failed: {e}")
            return ProbeResult.transport_failure(str(e))

        if response.status_code == 200:
            self.logger.debug(f"Health probe successful: {self.url}")
        else:
            self.logger.debug(f"Health probe returned status {response.status_code}")
        return ProbeResult.success(response.status_code)

    def check_availability(self) -> bool:
        """
        Returns:
            True if service is available, False otherwise
        """
        return self.probe().is_healthy
