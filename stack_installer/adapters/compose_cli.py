"""Docker Compose CLI adapter implementation for stack orchestration."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Callable, Final, Sequence

from stack_installer.config import get_logger
from stack_installer.domain import OrchestratorCommandError, OrchestratorUnavailableError

from .interfaces import CommandResult, ComposePort

logger = get_logger(__name__)


class ComposeCliAdapter(ComposePort):
    """Adapter that shells out to `docker compose` for every stack operation."""

    _UNKNOWN_STATE: Final[str] = "unknown"

    def __init__(
        self,
        compose_command: Sequence[str] = ("docker", "compose"),
        docker_command: Sequence[str] = ("docker",),
        project_directory: Path | None = None,
        env_file: Path | None = None,
        command_timeout_seconds: float = 900.0,
        runner: Callable[..., subprocess.CompletedProcess] | None = None,
    ):
        """Initialize compose CLI adapter.

        Args:
            compose_command: Compose executable argument prefix.
            docker_command: Engine executable used for `info` checks.
            project_directory: Working directory holding the compose file.
            env_file: Optional env file passed to every compose call via `--env-file`.
            command_timeout_seconds: Timeout applied to every subprocess.
            runner: Optional replacement for `subprocess.run`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_compose_command = tuple(part for part in compose_command if part.strip())
        normalized_docker_command = tuple(part for part in docker_command if part.strip())
        if not normalized_compose_command:
            raise ValueError("compose_command must not be empty")
        if not normalized_docker_command:
            raise ValueError("docker_command must not be empty")
        if command_timeout_seconds <= 0:
            raise ValueError("command_timeout_seconds must be > 0")

        self._compose_command = normalized_compose_command
        self._docker_command = normalized_docker_command
        self._project_directory = project_directory
        self._compose_global_options: tuple[str, ...] = ("--env-file", str(env_file)) if env_file is not None else ()
        self._command_timeout_seconds = command_timeout_seconds
        self._runner = runner or subprocess.run

    def adapter_engine_available(self) -> bool:
        """Return whether `docker info` succeeds.

        Returns:
            bool: True when the engine is reachable.

        Raises:
            OrchestratorCommandError: Raised when the check times out.
        """

        try:
            result = self._adapter_run(self._docker_command + ("info",))
        except OrchestratorUnavailableError:
            return False
        return result.command_succeeded()

    def adapter_compose_pull(self, services: Sequence[str] = ()) -> CommandResult:
        """Pull images for all or the named services.

        Args:
            services: Optional compose service names.

        Returns:
            CommandResult: Captured pull result.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        return self._adapter_run_compose(("pull", *services))

    def adapter_compose_up_detached(self) -> CommandResult:
        """Run `up -d` for the whole stack.

        Returns:
            CommandResult: Captured result.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        return self._adapter_run_compose(("up", "-d"))

    def adapter_compose_down(self, remove_volumes: bool = False) -> CommandResult:
        """Run `down`, optionally removing volumes.

        Args:
            remove_volumes: Append `-v` to drop named volumes.

        Returns:
            CommandResult: Captured result.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        arguments = ("down", "-v") if remove_volumes else ("down",)
        return self._adapter_run_compose(arguments)

    def adapter_compose_exec(self, service: str, command: Sequence[str]) -> CommandResult:
        """Run one command inside a service without allocating a TTY.

        Args:
            service: Compose service name.
            command: Argument vector executed in the container.

        Returns:
            CommandResult: Captured result.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        return self._adapter_run_compose(("exec", "-T", service, *command))

    def adapter_compose_logs_tail(self, service: str, lines: int) -> str:
        """Return trailing log lines for one service.

        Args:
            service: Compose service name.
            lines: Number of trailing lines.

        Returns:
            str: Combined log output; empty on failure.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        if lines <= 0:
            return ""
        result = self._adapter_run_compose(("logs", "--no-color", f"--tail={lines}", service))
        if not result.command_succeeded():
            return ""
        return (result.stdout + result.stderr).strip()

    def adapter_compose_service_state(self, service: str) -> str:
        """Return container state reported by `ps -a --format json`.

        Args:
            service: Compose service name.

        Returns:
            str: Container state, or `unknown` when it cannot be determined.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        result = self._adapter_run_compose(("ps", "-a", "--format", "json", service))
        if not result.command_succeeded():
            return self._UNKNOWN_STATE
        for entry in self._adapter_parse_ps_json(result.stdout):
            if entry.get("Service", service) == service:
                return str(entry.get("State") or self._UNKNOWN_STATE)
        return self._UNKNOWN_STATE

    def adapter_compose_running_services(self) -> tuple[str, ...]:
        """Return services whose containers are running.

        Returns:
            tuple[str, ...]: Running service names in compose output order.

        Raises:
            OrchestratorUnavailableError: Raised when the compose executable is missing.
        """

        result = self._adapter_run_compose(("ps", "--services", "--status", "running"))
        if not result.command_succeeded():
            return ()
        return tuple(line.strip() for line in result.stdout.splitlines() if line.strip())

    def _adapter_run_compose(self, arguments: Sequence[str]) -> CommandResult:
        return self._adapter_run(self._compose_command + self._compose_global_options + tuple(arguments))

    def _adapter_run(self, command: tuple[str, ...]) -> CommandResult:
        """Execute one command and capture its output.

        Args:
            command: Full argument vector.

        Returns:
            CommandResult: Captured result with exit status.

        Raises:
            OrchestratorUnavailableError: Raised when the executable cannot be found.
            OrchestratorCommandError: Raised when the command exceeds its timeout.
        """

        logger.debug("orchestrator_command_started", command=" ".join(command))
        try:
            completed = self._runner(
                list(command),
                cwd=self._project_directory,
                capture_output=True,
                text=True,
                timeout=self._command_timeout_seconds,
                check=False,
            )
        except FileNotFoundError as error:
            raise OrchestratorUnavailableError(f"Executable not found: {command[0]}") from error
        except subprocess.TimeoutExpired as error:
            raise OrchestratorCommandError(
                f"Command timed out after {self._command_timeout_seconds}s: {' '.join(command)}",
                command=" ".join(command),
            ) from error

        result = CommandResult(
            command=command,
            returncode=int(completed.returncode),
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug("orchestrator_command_finished", command=result.command_rendered(), returncode=result.returncode)
        return result

    def _adapter_parse_ps_json(self, payload: str) -> list[dict[str, object]]:
        """Parse `ps --format json` output as an array or as JSON lines.

        Args:
            payload: Raw stdout text.

        Returns:
            list[dict[str, object]]: Parsed container entries; unparseable lines are skipped.
        """

        stripped_payload = payload.strip()
        if not stripped_payload:
            return []
        try:
            parsed = json.loads(stripped_payload)
        except json.JSONDecodeError:
            entries: list[dict[str, object]] = []
            for line in stripped_payload.splitlines():
                try:
                    parsed_line = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(parsed_line, dict):
                    entries.append(parsed_line)
            return entries
        if isinstance(parsed, dict):
            return [parsed]
        if isinstance(parsed, list):
            return [entry for entry in parsed if isinstance(entry, dict)]
        return []


def adapter_raise_for_command(result: CommandResult, action: str) -> CommandResult:
    """Raise when a compose command that must succeed has failed.

    Args:
        result: Captured command result.
        action: Operator-facing action label.

    Returns:
        CommandResult: The same result when it succeeded.

    Raises:
        OrchestratorCommandError: Raised on non-zero exit status.
    """

    if result.command_succeeded():
        return result
    detail = result.stderr.strip() or result.stdout.strip()
    raise OrchestratorCommandError(
        f"{action} failed with exit status {result.returncode}: {detail}",
        command=result.command_rendered(),
        returncode=result.returncode,
    )
