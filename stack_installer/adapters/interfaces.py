"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from stack_installer.domain import ProbeOutcome


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one orchestration CLI invocation.

    Attributes:
        command: Full argument vector that was executed.
        returncode: Process exit status.
        stdout: Captured standard output text.
        stderr: Captured standard error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def command_succeeded(self) -> bool:
        """Return whether the command exited with status 0."""

        return self.returncode == 0

    def command_rendered(self) -> str:
        """Return the command as a single display string."""

        return " ".join(self.command)


class ComposePort(Protocol):
    """Port definition for the container orchestration CLI."""

    def adapter_engine_available(self) -> bool:
        """Return whether the container engine answers `info` requests.

        Returns:
            bool: True when the engine is reachable.
        """

    def adapter_compose_pull(self, services: Sequence[str] = ()) -> CommandResult:
        """Pull images for all or the named services.

        Args:
            services: Optional compose service names; empty pulls everything.

        Returns:
            CommandResult: Captured pull result.
        """

    def adapter_compose_up_detached(self) -> CommandResult:
        """Start every declared service in the background.

        Returns:
            CommandResult: Captured result; callers decide whether failure is fatal.
        """

    def adapter_compose_down(self, remove_volumes: bool = False) -> CommandResult:
        """Stop and remove the stack containers.

        Args:
            remove_volumes: Also remove named volumes.

        Returns:
            CommandResult: Captured result.
        """

    def adapter_compose_exec(self, service: str, command: Sequence[str]) -> CommandResult:
        """Run one command inside a running service container.

        Args:
            service: Compose service name.
            command: Argument vector executed in the container.

        Returns:
            CommandResult: Captured result.
        """

    def adapter_compose_logs_tail(self, service: str, lines: int) -> str:
        """Return the last log lines of one service.

        Args:
            service: Compose service name.
            lines: Number of trailing log lines.

        Returns:
            str: Log text, empty when unavailable.
        """

    def adapter_compose_service_state(self, service: str) -> str:
        """Return the container state of one service.

        Args:
            service: Compose service name.

        Returns:
            str: State label such as `running`, or `unknown`.
        """

    def adapter_compose_running_services(self) -> tuple[str, ...]:
        """Return compose service names with a running container.

        Returns:
            tuple[str, ...]: Running service names.
        """


class HealthProbePort(Protocol):
    """Port definition for HTTP health endpoint checks."""

    def adapter_probe(self, url: str, expected_status: int | None = None) -> ProbeOutcome:
        """Probe one health endpoint once.

        Args:
            url: Health endpoint URL.
            expected_status: Exact status required; `None` accepts any 2xx.

        Returns:
            ProbeOutcome: Probe result; transport errors yield a not-ready outcome.
        """


class DataToolAuthPort(Protocol):
    """Port definition for data tool account bootstrap calls."""

    def adapter_signup(self, email: str, password: str) -> str:
        """Create one user account.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            str: Raw response body for diagnostics.

        Raises:
            SignupFailedError: Raised when the request fails.
        """

    def adapter_signin(self, email: str, password: str) -> str:
        """Authenticate and return the API token.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            str: Non-empty API token.

        Raises:
            AuthTokenMissingError: Raised when no usable token is returned.
        """
