"""Job-layer install orchestrator for the n8n and NocoDB stack."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from stack_installer.adapters import ComposePort, DataToolAuthPort, HealthProbePort, adapter_raise_for_command
from stack_installer.config import get_logger
from stack_installer.domain import (
    STACK_CACHE,
    STACK_DATA_TOOL,
    STACK_DATABASE,
    STACK_WORKFLOW_ENGINE,
    CredentialRecord,
    FinalVerificationFailedError,
    StageEvent,
    domain_build_stage_event,
)
from stack_installer.persistence import CredentialStorePort

from .interfaces import JobExecutionResult, JobOrchestratorPort
from .readiness import ReadinessCheck, ReadinessPoller, job_readiness_command_probe, job_readiness_http_probe

logger = get_logger(__name__)

N8N_HEALTH_PATH = "/healthz"
NOCODB_HEALTH_PATH = "/api/v1/health"


@dataclass(frozen=True)
class InstallOrchestratorConfig:
    """Configuration values for install orchestration.

    Attributes:
        postgres_user: Role passed to `pg_isready`.
        redis_password: Password passed to `redis-cli`.
        n8n_base_url: Workflow engine base URL.
        nocodb_base_url: Data tool base URL.
        demo_email: Demo account email.
        demo_password: Demo account password.
        n8n_api_key: Pre-provisioned n8n API key.
        dependency_max_attempts: Probe ceiling for database and cache.
        application_max_attempts: Probe ceiling for n8n and NocoDB.
        settle_delay_seconds: Wait after NocoDB reports healthy.
    """

    postgres_user: str
    redis_password: str
    n8n_base_url: str
    nocodb_base_url: str
    demo_email: str
    demo_password: str
    n8n_api_key: str
    dependency_max_attempts: int = 60
    application_max_attempts: int = 60
    settle_delay_seconds: float = 30.0

    def config_n8n_health_url(self) -> str:
        return f"{self.n8n_base_url.rstrip('/')}{N8N_HEALTH_PATH}"

    def config_nocodb_health_url(self) -> str:
        return f"{self.nocodb_base_url.rstrip('/')}{NOCODB_HEALTH_PATH}"


class InstallJobOrchestrator(JobOrchestratorPort):
    """Concrete orchestrator for the linear install workflow.

    Steps run strictly in order and any failure ends the run: bring-up,
    readiness of postgres, redis, n8n and nocodb, settle delay, demo account
    signup, signin, credential persistence, final verification. Nothing is
    rolled back.
    """

    _INSTALL_JOB_NAME = "install"

    def __init__(
        self,
        compose: ComposePort,
        health_probe: HealthProbePort,
        auth_client: DataToolAuthPort,
        credential_store: CredentialStorePort,
        poller: ReadinessPoller,
        config: InstallOrchestratorConfig,
        sleep_function: Callable[[float], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize install orchestrator dependencies.

        Args:
            compose: Compose CLI adapter.
            health_probe: HTTP health adapter.
            auth_client: Data tool account client.
            credential_store: Credential persistence service.
            poller: Readiness poller.
            config: Install execution configuration.
            sleep_function: Optional replacement for `time.sleep` used by the settle delay.
            clock: Optional UTC clock used for the credential file timestamp.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if compose is None:
            raise ValueError("compose must not be None")
        if health_probe is None:
            raise ValueError("health_probe must not be None")
        if auth_client is None:
            raise ValueError("auth_client must not be None")
        if credential_store is None:
            raise ValueError("credential_store must not be None")
        if poller is None:
            raise ValueError("poller must not be None")
        if not config.demo_email.strip():
            raise ValueError("config.demo_email must not be blank")
        if not config.demo_password.strip():
            raise ValueError("config.demo_password must not be blank")
        if config.settle_delay_seconds < 0:
            raise ValueError("config.settle_delay_seconds must be >= 0")

        self._compose = compose
        self._health_probe = health_probe
        self._auth_client = auth_client
        self._credential_store = credential_store
        self._poller = poller
        self._config = config
        self._sleep = sleep_function or time.sleep
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._INSTALL_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute the install workflow end to end.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Success payload with timeline and credential path.

        Raises:
            ValueError: Raised when job name is unsupported.
            InstallerError: Raised by the first failing step.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._INSTALL_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        timeline: list[StageEvent] = []
        self._job_record(timeline, domain_build_stage_event(stage="run", status="started"))

        self._job_bring_up(timeline)

        self._job_record(timeline, domain_build_stage_event(stage="readiness", status="started"))
        attempts_by_service = self._poller.job_wait_all(self._job_build_readiness_checks())
        self._job_record(
            timeline,
            domain_build_stage_event(stage="readiness", status="completed", details={"attempts": attempts_by_service}),
        )

        self._job_settle(timeline)

        self._job_record(timeline, domain_build_stage_event(stage="signup", status="started"))
        self._auth_client.adapter_signup(self._config.demo_email, self._config.demo_password)
        self._job_record(timeline, domain_build_stage_event(stage="signup", status="completed"))

        self._job_record(timeline, domain_build_stage_event(stage="signin", status="started"))
        token = self._auth_client.adapter_signin(self._config.demo_email, self._config.demo_password)
        self._job_record(timeline, domain_build_stage_event(stage="signin", status="completed"))

        self._job_record(timeline, domain_build_stage_event(stage="persist", status="started"))
        credential_path = self._credential_store.persistence_write(
            CredentialRecord(
                data_tool_token=token,
                workflow_api_key=self._config.n8n_api_key,
                generated_at=self._clock(),
            )
        )
        self._job_record(
            timeline,
            domain_build_stage_event(stage="persist", status="completed", details={"path": str(credential_path)}),
        )

        logger.info(
            "install_complete",
            nocodb_url=self._config.nocodb_base_url,
            n8n_url=self._config.n8n_base_url,
            demo_login=self._config.demo_email,
            credentials_file=str(credential_path),
        )

        self._job_final_verification(timeline)
        self._job_record(timeline, domain_build_stage_event(stage="run", status="completed"))
        return JobExecutionResult(
            job_name=normalized_job_name,
            status="success",
            timeline=tuple(timeline),
            details={"credentials_path": str(credential_path), "readiness_attempts": attempts_by_service},
        )

    def _job_bring_up(self, timeline: list[StageEvent]) -> None:
        """Pull images and start the stack in the background.

        Raises:
            OrchestratorCommandError: Raised when `up -d` exits non-zero.
        """

        self._job_record(timeline, domain_build_stage_event(stage="bring_up", status="started"))
        pull_result = self._compose.adapter_compose_pull()
        if not pull_result.command_succeeded():
            logger.warning(
                "image_pull_failed",
                returncode=pull_result.returncode,
                stderr=pull_result.stderr.strip(),
            )
        adapter_raise_for_command(self._compose.adapter_compose_up_detached(), action="Starting services")
        self._job_record(timeline, domain_build_stage_event(stage="bring_up", status="completed"))

    def _job_build_readiness_checks(self) -> tuple[ReadinessCheck, ...]:
        return (
            ReadinessCheck(
                service=STACK_DATABASE,
                probe=job_readiness_command_probe(
                    self._compose,
                    STACK_DATABASE,
                    ("pg_isready", "-U", self._config.postgres_user),
                ),
                max_attempts=self._config.dependency_max_attempts,
            ),
            ReadinessCheck(
                service=STACK_CACHE,
                probe=job_readiness_command_probe(
                    self._compose,
                    STACK_CACHE,
                    ("redis-cli", "-a", self._config.redis_password, "ping"),
                    expected_output="PONG",
                ),
                max_attempts=self._config.dependency_max_attempts,
            ),
            ReadinessCheck(
                service=STACK_WORKFLOW_ENGINE,
                probe=job_readiness_http_probe(self._health_probe, self._config.config_n8n_health_url()),
                max_attempts=self._config.application_max_attempts,
                report_container_state=True,
            ),
            ReadinessCheck(
                service=STACK_DATA_TOOL,
                probe=job_readiness_http_probe(
                    self._health_probe,
                    self._config.config_nocodb_health_url(),
                    expected_status=200,
                ),
                max_attempts=self._config.application_max_attempts,
                report_container_state=True,
            ),
        )

    def _job_settle(self, timeline: list[StageEvent]) -> None:
        # NocoDB reports healthy before its metadata schema is initialized.
        if self._config.settle_delay_seconds <= 0:
            self._job_record(timeline, domain_build_stage_event(stage="settle", status="skipped"))
            return
        self._job_record(
            timeline,
            domain_build_stage_event(
                stage="settle",
                status="started",
                details={"seconds": self._config.settle_delay_seconds},
            ),
        )
        self._sleep(self._config.settle_delay_seconds)
        self._job_record(timeline, domain_build_stage_event(stage="settle", status="completed"))

    def _job_final_verification(self, timeline: list[StageEvent]) -> None:
        """Probe both application health endpoints once more.

        Raises:
            FinalVerificationFailedError: Raised for the first endpoint that is not healthy.
        """

        self._job_record(timeline, domain_build_stage_event(stage="final_verification", status="started"))
        final_checks = (
            (STACK_DATA_TOOL, self._config.config_nocodb_health_url(), 200),
            (STACK_WORKFLOW_ENGINE, self._config.config_n8n_health_url(), None),
        )
        for service, url, expected_status in final_checks:
            outcome = self._health_probe.adapter_probe(url, expected_status=expected_status)
            if not outcome.ready:
                raise FinalVerificationFailedError(service_name=service.compose_name, detail=outcome.detail)
        self._job_record(timeline, domain_build_stage_event(stage="final_verification", status="completed"))

    def _job_record(self, timeline: list[StageEvent], event: StageEvent) -> None:
        timeline.append(event)
        logger.info("stage", **event.stage_event_as_dict())
