"""Stack status collection for operator diagnostics."""

from __future__ import annotations

from stack_installer.adapters import ComposePort
from stack_installer.domain import STACK_SERVICES


def job_collect_stack_status(compose: ComposePort) -> dict[str, str]:
    """Return the container state of each declared service.

    Args:
        compose: Compose CLI adapter.

    Returns:
        dict[str, str]: Service name to container state, in readiness order.

    Raises:
        OrchestratorUnavailableError: Raised when the compose executable is missing.
    """

    return {service.compose_name: compose.adapter_compose_service_state(service.compose_name) for service in STACK_SERVICES}
