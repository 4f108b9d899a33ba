"""Typed interfaces for job-layer orchestration responsibilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from stack_installer.domain import StageEvent


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one stack workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state.
        timeline: Ordered stage events recorded during execution.
        details: Structured job-specific outputs (paths, versions, states).
    """

    job_name: str
    status: str
    timeline: tuple[StageEvent, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating stack workflows."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            InstallerError: Raised when any workflow step fails.
        """
