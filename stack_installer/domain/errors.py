"""Project-native typed exceptions for installer failures.

Every error is terminal: the CLI prints the message and exits with
``exit_code``. Only the readiness poller retries, and only within its own
attempt ceiling.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base exception for stack installer failures.

    Attributes:
        exit_code: Process exit status reported by the CLI.
    """

    exit_code: int = 1


class MissingConfigError(InstallerError):
    """Required configuration is absent, blank or invalid."""


class EnvFileCreatedError(MissingConfigError):
    """Env file was bootstrapped from the template and must be edited first."""


class OrchestratorUnavailableError(InstallerError):
    """Container engine or compose executable cannot be reached."""


class OrchestratorCommandError(InstallerError):
    """Compose command exited with a failure status or timed out.

    Attributes:
        command: Rendered command line.
        returncode: Process exit status, ``None`` when the command timed out.
    """

    def __init__(self, message: str, command: str = "", returncode: int | None = None):
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class ServiceNotReadyError(InstallerError):
    """Service did not pass its readiness probe within the attempt ceiling.

    Attributes:
        service_name: Compose service name.
        attempts: Number of probe attempts made.
    """

    def __init__(self, service_name: str, attempts: int, detail: str = ""):
        message = f"{service_name} failed to become ready after {attempts} attempts"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.service_name = service_name
        self.attempts = attempts


class SignupFailedError(InstallerError):
    """Demo account creation request failed."""


class AuthTokenMissingError(InstallerError):
    """Login did not yield a usable API token."""


class PersistenceFailedError(InstallerError):
    """Credential file could not be written or verified."""


class FinalVerificationFailedError(InstallerError):
    """Application health check failed after installation completed.

    Attributes:
        service_name: Compose service name.
    """

    def __init__(self, service_name: str, detail: str = ""):
        message = f"{service_name} final verification failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.service_name = service_name


class StackNotRunningError(InstallerError):
    """No stack service is running after an update cycle."""
