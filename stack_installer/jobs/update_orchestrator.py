"""Job-layer update orchestrator that refreshes images and restarts the stack."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from stack_installer.adapters import ComposePort, adapter_raise_for_command
from stack_installer.config import get_logger
from stack_installer.domain import (
    STACK_DATA_TOOL,
    STACK_SERVICES,
    STACK_WORKFLOW_ENGINE,
    OrchestratorCommandError,
    OrchestratorUnavailableError,
    StackNotRunningError,
    StageEvent,
    domain_build_stage_event,
)

from .interfaces import JobExecutionResult, JobOrchestratorPort

logger = get_logger(__name__)

UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class UpdateOrchestratorConfig:
    """Configuration values for update orchestration.

    Attributes:
        settle_seconds: Wait after `up -d` before checking running services.
    """

    settle_seconds: float = 10.0


class UpdateJobOrchestrator(JobOrchestratorPort):
    """Concrete orchestrator for pull, restart and version report."""

    _UPDATE_JOB_NAME = "update"
    _VERSION_COMMANDS: dict[str, tuple[str, ...]] = {
        STACK_DATA_TOOL.compose_name: ("node", "-e", 'console.log(require("./package.json").version)'),
        STACK_WORKFLOW_ENGINE.compose_name: ("n8n", "--version"),
    }

    def __init__(
        self,
        compose: ComposePort,
        config: UpdateOrchestratorConfig,
        sleep_function: Callable[[float], None] | None = None,
    ):
        """Initialize update orchestrator.

        Args:
            compose: Compose CLI adapter.
            config: Update execution configuration.
            sleep_function: Optional replacement for `time.sleep`.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if compose is None:
            raise ValueError("compose must not be None")
        if config.settle_seconds < 0:
            raise ValueError("config.settle_seconds must be >= 0")
        self._compose = compose
        self._config = config
        self._sleep = sleep_function or time.sleep

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._UPDATE_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Pull new images, restart the stack and report running versions.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Success payload with running services and versions.

        Raises:
            ValueError: Raised when job name is unsupported.
            OrchestratorUnavailableError: Raised when the container engine is not running.
            OrchestratorCommandError: Raised when `down` or `up -d` fails.
            StackNotRunningError: Raised when no service is running after restart.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._UPDATE_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        timeline: list[StageEvent] = [domain_build_stage_event(stage="run", status="started")]
        if not self._compose.adapter_engine_available():
            raise OrchestratorUnavailableError("Docker is not running. Please start Docker and try again.")

        service_names = [service.compose_name for service in STACK_SERVICES]
        logger.info("pulling_images", services=service_names)
        pull_result = self._compose.adapter_compose_pull(service_names)
        if not pull_result.command_succeeded():
            logger.warning("image_pull_failed", returncode=pull_result.returncode, stderr=pull_result.stderr.strip())
        timeline.append(domain_build_stage_event(stage="pull", status="completed"))

        logger.info("stopping_containers")
        adapter_raise_for_command(self._compose.adapter_compose_down(), action="Stopping services")
        logger.info("starting_containers")
        adapter_raise_for_command(self._compose.adapter_compose_up_detached(), action="Starting services")
        timeline.append(domain_build_stage_event(stage="restart", status="completed"))

        if self._config.settle_seconds > 0:
            self._sleep(self._config.settle_seconds)

        running_services = self._compose.adapter_compose_running_services()
        if not running_services:
            raise StackNotRunningError("Some services failed to start. Please check docker compose logs.")
        timeline.append(
            domain_build_stage_event(stage="verify", status="completed", details={"running": list(running_services)})
        )

        versions = {
            service_name: self._job_read_version(service_name, command)
            for service_name, command in self._VERSION_COMMANDS.items()
        }
        logger.info("update_complete", running_services=list(running_services), versions=versions)
        timeline.append(domain_build_stage_event(stage="run", status="completed"))
        return JobExecutionResult(
            job_name=normalized_job_name,
            status="success",
            timeline=tuple(timeline),
            details={"running_services": list(running_services), "versions": versions},
        )

    def _job_read_version(self, service_name: str, command: tuple[str, ...]) -> str:
        try:
            result = self._compose.adapter_compose_exec(service_name, command)
        except OrchestratorCommandError as error:
            logger.warning("version_read_failed", service=service_name, error=str(error))
            return UNKNOWN_VERSION
        version_text = result.stdout.strip()
        if not result.command_succeeded() or not version_text:
            return UNKNOWN_VERSION
        return version_text.splitlines()[-1].strip()
