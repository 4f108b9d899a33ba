"""Domain models and errors shared across installer layers."""

from .errors import (
    AuthTokenMissingError,
    EnvFileCreatedError,
    FinalVerificationFailedError,
    InstallerError,
    MissingConfigError,
    OrchestratorCommandError,
    OrchestratorUnavailableError,
    PersistenceFailedError,
    ServiceNotReadyError,
    SignupFailedError,
    StackNotRunningError,
)
from .models import (
    STACK_CACHE,
    STACK_DATABASE,
    STACK_DATA_TOOL,
    STACK_SERVICES,
    STACK_WORKFLOW_ENGINE,
    CredentialRecord,
    ProbeOutcome,
    StackService,
)
from .timeline import StageEvent, domain_build_stage_event

__all__ = [
    "AuthTokenMissingError",
    "CredentialRecord",
    "EnvFileCreatedError",
    "FinalVerificationFailedError",
    "InstallerError",
    "MissingConfigError",
    "OrchestratorCommandError",
    "OrchestratorUnavailableError",
    "PersistenceFailedError",
    "ProbeOutcome",
    "STACK_CACHE",
    "STACK_DATABASE",
    "STACK_DATA_TOOL",
    "STACK_SERVICES",
    "STACK_WORKFLOW_ENGINE",
    "ServiceNotReadyError",
    "SignupFailedError",
    "StackNotRunningError",
    "StackService",
    "StageEvent",
    "domain_build_stage_event",
]
