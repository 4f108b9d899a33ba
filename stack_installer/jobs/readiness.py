"""Bounded readiness polling for stack services."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Sequence

from stack_installer.adapters import ComposePort, HealthProbePort
from stack_installer.config import get_logger
from stack_installer.domain import ProbeOutcome, ServiceNotReadyError, StackService

logger = get_logger(__name__)

ProbeCallable = Callable[[], ProbeOutcome]


@dataclass(frozen=True)
class ReadinessCheck:
    """One service readiness requirement.

    Attributes:
        service: Service being waited on.
        probe: Zero-argument callable performing one probe attempt.
        max_attempts: Probe ceiling; reaching it fails the check.
        report_container_state: Log container state after each failed attempt.
    """

    service: StackService
    probe: ProbeCallable
    max_attempts: int
    report_container_state: bool = False


class ReadinessPoller:
    """Poll readiness probes at a fixed interval up to an attempt ceiling."""

    def __init__(
        self,
        compose: ComposePort,
        poll_interval_seconds: float = 5.0,
        log_tail_lines: int = 50,
        sleep_function: Callable[[float], None] | None = None,
    ):
        """Initialize readiness poller.

        Args:
            compose: Compose adapter used for log tails and container state.
            poll_interval_seconds: Delay between attempts.
            log_tail_lines: Log lines emitted after each failed attempt.
            sleep_function: Optional replacement for `time.sleep`.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if compose is None:
            raise ValueError("compose must not be None")
        if poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must be >= 0")
        if log_tail_lines < 0:
            raise ValueError("log_tail_lines must be >= 0")

        self._compose = compose
        self._poll_interval_seconds = poll_interval_seconds
        self._log_tail_lines = log_tail_lines
        self._sleep = sleep_function or time.sleep

    def job_wait_until_ready(self, check: ReadinessCheck) -> int:
        """Block until the check passes or its attempt ceiling is reached.

        Args:
            check: Readiness requirement to satisfy.

        Returns:
            int: Number of attempts used, counting the successful one.

        Raises:
            ValueError: Raised when the attempt ceiling is below 1.
            ServiceNotReadyError: Raised when every attempt failed.
        """

        if check.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        service_name = check.service.compose_name
        logger.info("readiness_wait_started", service=service_name, max_attempts=check.max_attempts)
        last_outcome = ProbeOutcome(ready=False, detail="not probed")

        for attempt in range(1, check.max_attempts + 1):
            last_outcome = check.probe()
            if last_outcome.ready:
                logger.info("readiness_passed", service=service_name, attempt=attempt, detail=last_outcome.detail)
                return attempt

            logger.warning(
                "readiness_attempt_failed",
                service=service_name,
                attempt=attempt,
                max_attempts=check.max_attempts,
                detail=last_outcome.detail,
            )
            self._job_report_diagnostics(check)
            if attempt < check.max_attempts:
                self._sleep(self._poll_interval_seconds)

        raise ServiceNotReadyError(
            service_name=service_name,
            attempts=check.max_attempts,
            detail=last_outcome.detail,
        )

    def job_wait_all(self, checks: Sequence[ReadinessCheck]) -> dict[str, int]:
        """Wait on each check in order, stopping at the first failure.

        Args:
            checks: Ordered readiness requirements.

        Returns:
            dict[str, int]: Attempts used per service.

        Raises:
            ServiceNotReadyError: Raised by the first check that never passes.
        """

        attempts_by_service: dict[str, int] = {}
        for check in checks:
            attempts_by_service[check.service.compose_name] = self.job_wait_until_ready(check)
        return attempts_by_service

    def _job_report_diagnostics(self, check: ReadinessCheck) -> None:
        service_name = check.service.compose_name
        if check.report_container_state:
            container_state = self._compose.adapter_compose_service_state(service_name)
            logger.info("container_state", service=service_name, state=container_state)
        log_tail = self._compose.adapter_compose_logs_tail(service_name, self._log_tail_lines)
        if log_tail:
            logger.info("container_log_tail", service=service_name, lines=self._log_tail_lines, logs=log_tail)


def job_readiness_command_probe(
    compose: ComposePort,
    service: StackService,
    command: Sequence[str],
    expected_output: str | None = None,
) -> ProbeCallable:
    """Build a probe that runs a command inside the service container.

    Args:
        compose: Compose adapter.
        service: Target service.
        command: Argument vector executed via `exec -T`.
        expected_output: Optional text that stdout must contain.

    Returns:
        ProbeCallable: Probe ready when the command exits 0 (and prints the expected text).
    """

    command_vector = tuple(command)

    def _probe() -> ProbeOutcome:
        result = compose.adapter_compose_exec(service.compose_name, command_vector)
        if not result.command_succeeded():
            return ProbeOutcome(ready=False, detail=f"exit status {result.returncode}")
        if expected_output is not None and expected_output not in result.stdout:
            return ProbeOutcome(ready=False, detail=f"output missing {expected_output}")
        return ProbeOutcome(ready=True, detail="command succeeded")

    return _probe


def job_readiness_http_probe(
    health_probe: HealthProbePort,
    url: str,
    expected_status: int | None = None,
) -> ProbeCallable:
    """Build a probe that checks one HTTP health endpoint.

    Args:
        health_probe: HTTP health adapter.
        url: Health endpoint URL.
        expected_status: Exact status required; `None` accepts any 2xx.

    Returns:
        ProbeCallable: Probe delegating to the adapter.
    """

    def _probe() -> ProbeOutcome:
        return health_probe.adapter_probe(url, expected_status=expected_status)

    return _probe
