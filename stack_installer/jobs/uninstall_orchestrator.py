"""Job-layer uninstall orchestrator that tears the stack down."""

from __future__ import annotations

from stack_installer.adapters import ComposePort
from stack_installer.config import get_logger
from stack_installer.domain import (
    OrchestratorCommandError,
    OrchestratorUnavailableError,
    StageEvent,
    domain_build_stage_event,
)
from stack_installer.persistence import CredentialStorePort

from .interfaces import JobExecutionResult, JobOrchestratorPort

logger = get_logger(__name__)


class UninstallJobOrchestrator(JobOrchestratorPort):
    """Remove containers, volumes and the credential file.

    Safe to run when nothing is installed: a failing or unavailable
    `down -v` is reported as a warning and a missing credential file is
    ignored.
    """

    _UNINSTALL_JOB_NAME = "uninstall"

    def __init__(self, compose: ComposePort, credential_store: CredentialStorePort):
        if compose is None:
            raise ValueError("compose must not be None")
        if credential_store is None:
            raise ValueError("credential_store must not be None")
        self._compose = compose
        self._credential_store = credential_store

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._UNINSTALL_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Tear down the stack and delete stored credentials.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Success payload noting whether credentials were removed.

        Raises:
            ValueError: Raised when job name is unsupported.
            PersistenceFailedError: Raised when the credential file exists but cannot be removed.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._UNINSTALL_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        timeline: list[StageEvent] = [domain_build_stage_event(stage="run", status="started")]

        try:
            down_result = self._compose.adapter_compose_down(remove_volumes=True)
        except (OrchestratorUnavailableError, OrchestratorCommandError) as error:
            logger.warning("teardown_failed", error=str(error))
            timeline.append(domain_build_stage_event(stage="teardown", status="skipped", details={"error": str(error)}))
        else:
            if down_result.command_succeeded():
                timeline.append(domain_build_stage_event(stage="teardown", status="completed"))
            else:
                logger.warning(
                    "teardown_failed",
                    returncode=down_result.returncode,
                    stderr=down_result.stderr.strip(),
                )
                timeline.append(
                    domain_build_stage_event(
                        stage="teardown", status="skipped", details={"returncode": down_result.returncode}
                    )
                )

        credentials_removed = self._credential_store.persistence_remove()
        timeline.append(
            domain_build_stage_event(stage="credentials", status="completed", details={"removed": credentials_removed})
        )

        logger.info("uninstall_complete", credentials_removed=credentials_removed)
        timeline.append(domain_build_stage_event(stage="run", status="completed"))
        return JobExecutionResult(
            job_name=normalized_job_name,
            status="success",
            timeline=tuple(timeline),
            details={"credentials_removed": credentials_removed},
        )
