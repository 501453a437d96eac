import time
from typing import Callable, Optional
from .config import WatchdogConfig
from .health_checker import HealthChecker, ProbeResult
from .logger import get_logger
from .loop_state import LoopState


class SupervisionLoop:
    """
    Keep the supervised server alive: probe it, and kill and restart it on failure.

    Strictly sequential state machine over LoopState. The controller and
    probe are injected so the loop runs without a live server.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        controller,
        probe: Optional[Callable[[], ProbeResult]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the supervision loop.

        Args:
            config: Watchdog configuration
            controller: ProcessController (or any object with
                ensure_started(is_first_run) and kill_all())
            probe: Health probe callable, defaults to HealthChecker.probe
            sleep: Blocking wait used between healthy probes
        """
        self.config = config
        self.controller = controller
        if probe is None:
            probe = HealthChecker(config.health_url, config.probe_timeout).probe
        self._probe = probe
        self._sleep = sleep
        self._state = LoopState.INITIALIZING
        self._last_result: Optional[ProbeResult] = None

        self.logger = get_logger(__name__)

    @property
    def state(self) -> LoopState:
        return self._state

    def run(self) -> None:
        """
        Run the watchdog forever.

        Raises:
            ExecutableNotFoundError: If the server executable cannot be located
        """
        self.initialize()
        while True:
            self.step()

    def step(self) -> LoopState:
        """
        Perform the action of the current state.

        Returns:
            The state after the transition
        """
        if self._state == LoopState.INITIALIZING:
            self.initialize()
        elif self._state == LoopState.POLLING:
            self.poll()
        else:
            self.remediate()
        return self._state

    def initialize(self) -> None:
        self.logger.info(
            f"Watchdog started: probing {self.config.health_url} "
            f"every {self.config.poll_interval}s"
        )
        self.controller.ensure_started(is_first_run=True)
        self._set_state(LoopState.POLLING)

    def poll(self) -> None:
        """Issue one health probe; sleep if healthy, else move to remediation."""
        result = self._run_probe()
        self._last_result = result
        if result.is_healthy:
            self.logger.debug(f"Health check passed ({result})")
            self._sleep(self.config.poll_interval)
            return
        self._set_state(LoopState.REMEDIATING)

    def remediate(self) -> None:
        self.logger.warning(
            f"Health check failed ({self._last_result}), restarting {self.config.process_name}"
        )
        self.controller.kill_all()
        self.controller.ensure_started(is_first_run=False)
        self._set_state(LoopState.POLLING)

    def _run_probe(self) -> ProbeResult:
        try:
            return self._probe()
        except Exception as e:
            self.logger.error(f"Health probe raised unexpectedly: {e}")
            return ProbeResult.transport_failure(str(e))

    def _set_state(self, new_state: LoopState) -> None:
        old_state = self._state
        self._state = new_state
        if old_state != new_state:
            self.logger.debug(f"State transition: {old_state.value} -> {new_state.value}")
