"""Job layer package for stack workflow orchestration."""

from .install_orchestrator import InstallJobOrchestrator, InstallOrchestratorConfig
from .interfaces import JobExecutionResult, JobOrchestratorPort
from .readiness import ReadinessCheck, ReadinessPoller, job_readiness_command_probe, job_readiness_http_probe
from .status import job_collect_stack_status
from .uninstall_orchestrator import UninstallJobOrchestrator
from .update_orchestrator import UpdateJobOrchestrator, UpdateOrchestratorConfig

__all__ = [
    "InstallJobOrchestrator",
    "InstallOrchestratorConfig",
    "JobExecutionResult",
    "JobOrchestratorPort",
    "ReadinessCheck",
    "ReadinessPoller",
    "UninstallJobOrchestrator",
    "UpdateJobOrchestrator",
    "UpdateOrchestratorConfig",
    "job_collect_stack_status",
    "job_readiness_command_probe",
    "job_readiness_http_probe",
]
