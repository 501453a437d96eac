"""Tests for the supervision state machine."""

from __future__ import annotations

from unittest.mock import MagicMock, call, patch

import pytest

from app.health_checker import ProbeResult
from app.loop_state import LoopState
from app.supervision_loop import SupervisionLoop
from service.errors import ExecutableNotFoundError


class _StopLoop(Exception):
    pass


def _probe_sequence(*results: ProbeResult) -> MagicMock:
    return MagicMock(side_effect=list(results))


@pytest.fixture
def recorder():
    """Single mock recording controller and sleep calls in order."""
    return MagicMock()


def _build_loop(config, recorder, probe) -> SupervisionLoop:
    return SupervisionLoop(config, recorder.controller, probe=probe, sleep=recorder.sleep)


class TestInitialize:
    def test_starts_in_initializing(self, config, recorder) -> None:
        loop = _build_loop(config, recorder, MagicMock())

        assert loop.state is LoopState.INITIALIZING

    def test_first_step_ensures_started_then_polls(self, config, recorder) -> None:
        probe = MagicMock()
        loop = _build_loop(config, recorder, probe)

        assert loop.step() is LoopState.POLLING

        recorder.controller.ensure_started.assert_called_once_with(is_first_run=True)
        probe.assert_not_called()

    def test_missing_executable_escapes(self, config, recorder) -> None:
        recorder.controller.ensure_started.side_effect = ExecutableNotFoundError("x", [])
        loop = _build_loop(config, recorder, MagicMock())

        with pytest.raises(ExecutableNotFoundError):
            loop.run()


class TestPolling:
    @pytest.fixture
    def polling_loop(self, config, recorder):
        def build(probe):
            loop = _build_loop(config, recorder, probe)
            loop.initialize()
            recorder.reset_mock()
            return loop

        return build

    def test_healthy_probe_sleeps_and_stays(self, config, recorder, polling_loop) -> None:
        loop = polling_loop(_probe_sequence(ProbeResult.success(200)))

        assert loop.step() is LoopState.POLLING

        assert recorder.mock_calls == [call.sleep(config.poll_interval)]

    @pytest.mark.parametrize(
        "result",
        [
            ProbeResult.success(500),
            ProbeResult.success(503),
            ProbeResult.success(204),
            ProbeResult.transport_failure("refused"),
            ProbeResult.timeout("slow"),
        ],
    )
    def test_unhealthy_probe_remediates_once(self, config, recorder, polling_loop, result) -> None:
        loop = polling_loop(_probe_sequence(result))

        assert loop.step() is LoopState.REMEDIATING
        assert loop.step() is LoopState.POLLING

        assert recorder.mock_calls == [
            call.controller.kill_all(),
            call.controller.ensure_started(is_first_run=False),
        ]

    def test_probe_exception_treated_as_failure(self, recorder, polling_loop) -> None:
        loop = polling_loop(MagicMock(side_effect=RuntimeError("boom")))

        assert loop.step() is LoopState.REMEDIATING


class TestRun:
    def test_probe_sequence_drives_actions(self, config, recorder) -> None:
        probe = _probe_sequence(
            ProbeResult.success(200),
            ProbeResult.success(200),
            ProbeResult.success(503),
            ProbeResult.success(200),
        )
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 3:
                raise _StopLoop

        recorder.sleep.side_effect = sleep
        loop = _build_loop(config, recorder, probe)

        with pytest.raises(_StopLoop):
            loop.run()

        assert recorder.mock_calls == [
            call.controller.ensure_started(is_first_run=True),
            call.sleep(config.poll_interval),
            call.sleep(config.poll_interval),
            call.controller.kill_all(),
            call.controller.ensure_started(is_first_run=False),
            call.sleep(config.poll_interval),
        ]
        assert probe.call_count == 4

    def test_default_probe_uses_health_checker(self, config, recorder) -> None:
        with patch("app.supervision_loop.HealthChecker") as mock_checker:
            SupervisionLoop(config, recorder.controller)

        mock_checker.assert_called_once_with(config.health_url, config.probe_timeout)
