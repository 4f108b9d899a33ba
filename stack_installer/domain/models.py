"""Typed domain models shared across installer layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StackService:
    """One declared compose service of the managed stack.

    Attributes:
        compose_name: Service key in the compose file.
        display_name: Human-readable label used in operator output.
    """

    compose_name: str
    display_name: str


STACK_DATABASE = StackService(compose_name="postgres", display_name="PostgreSQL")
STACK_CACHE = StackService(compose_name="redis", display_name="Redis")
STACK_WORKFLOW_ENGINE = StackService(compose_name="n8n", display_name="n8n")
STACK_DATA_TOOL = StackService(compose_name="nocodb", display_name="NocoDB")

# Readiness order during install.
STACK_SERVICES: tuple[StackService, ...] = (
    STACK_DATABASE,
    STACK_CACHE,
    STACK_WORKFLOW_ENGINE,
    STACK_DATA_TOOL,
)


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one readiness probe attempt.

    Attributes:
        ready: Whether the service passed the probe.
        detail: Short diagnostic text (status code, exit status, error).
    """

    ready: bool
    detail: str


@dataclass(frozen=True)
class CredentialRecord:
    """API credentials persisted after a successful install.

    Attributes:
        data_tool_token: NocoDB token obtained from the signin call.
        workflow_api_key: Pre-provisioned n8n API key from configuration.
        generated_at: Timestamp written into the credential file header.
    """

    data_tool_token: str
    workflow_api_key: str
    generated_at: datetime

    def credential_record_is_complete(self) -> bool:
        """Return whether both secrets are present and usable."""

        return bool(self.data_tool_token.strip()) and bool(self.workflow_api_key.strip())
