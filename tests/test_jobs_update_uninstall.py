"""Regression tests for update and uninstall orchestrators."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import pytest

from stack_installer.adapters import CommandResult
from stack_installer.domain import (
    CredentialRecord,
    OrchestratorCommandError,
    OrchestratorUnavailableError,
    StackNotRunningError,
)
from stack_installer.jobs import (
    UninstallJobOrchestrator,
    UpdateJobOrchestrator,
    UpdateOrchestratorConfig,
    job_collect_stack_status,
)
from stack_installer.persistence import FileCredentialStore


class _ComposeStub:
    """Compose double covering update, uninstall and status operations."""

    def __init__(
        self,
        engine_available: bool = True,
        running_services: tuple[str, ...] = ("postgres", "redis", "n8n", "nocodb"),
        down_returncode: int = 0,
        down_error: Exception | None = None,
        exec_error: Exception | None = None,
    ):
        self.calls: list[tuple[str, ...]] = []
        self._engine_available = engine_available
        self._running_services = running_services
        self._down_returncode = down_returncode
        self._down_error = down_error
        self._exec_error = exec_error

    def adapter_engine_available(self) -> bool:
        self.calls.append(("info",))
        return self._engine_available

    def adapter_compose_pull(self, services: Sequence[str] = ()) -> CommandResult:
        self.calls.append(("pull", *services))
        return CommandResult(command=("pull",), returncode=0, stdout="", stderr="")

    def adapter_compose_down(self, remove_volumes: bool = False) -> CommandResult:
        self.calls.append(("down", "-v") if remove_volumes else ("down",))
        if self._down_error is not None:
            raise self._down_error
        return CommandResult(command=("down",), returncode=self._down_returncode, stdout="", stderr="no config file")

    def adapter_compose_up_detached(self) -> CommandResult:
        self.calls.append(("up", "-d"))
        return CommandResult(command=("up", "-d"), returncode=0, stdout="", stderr="")

    def adapter_compose_running_services(self) -> tuple[str, ...]:
        self.calls.append(("ps", "running"))
        return self._running_services

    def adapter_compose_exec(self, service: str, command: Sequence[str]) -> CommandResult:
        self.calls.append(("exec", service, *command))
        if self._exec_error is not None and service == "n8n":
            raise self._exec_error
        if service == "nocodb":
            return CommandResult(command=tuple(command), returncode=0, stdout="0.258.0\n", stderr="")
        return CommandResult(command=tuple(command), returncode=1, stdout="", stderr="not running")

    def adapter_compose_service_state(self, service: str) -> str:
        return "running" if service in self._running_services else "unknown"


def _update(compose: _ComposeStub, sleeps: list[float]) -> UpdateJobOrchestrator:
    return UpdateJobOrchestrator(
        compose=compose,
        config=UpdateOrchestratorConfig(settle_seconds=10.0),
        sleep_function=sleeps.append,
    )


def test_jobs_update_restarts_stack_and_reports_versions() -> None:
    compose = _ComposeStub()
    sleeps: list[float] = []

    result = _update(compose, sleeps).job_execute("update")

    assert result.status == "success"
    assert compose.calls[:5] == [
        ("info",),
        ("pull", "postgres", "redis", "n8n", "nocodb"),
        ("down",),
        ("up", "-d"),
        ("ps", "running"),
    ]
    assert sleeps == [10.0]
    assert result.details["versions"] == {"nocodb": "0.258.0", "n8n": "unknown"}


def test_jobs_update_timed_out_version_read_reports_unknown() -> None:
    compose = _ComposeStub(
        exec_error=OrchestratorCommandError(
            "Command timed out after 900.0s", command="docker compose exec -T n8n n8n --version", returncode=None
        )
    )

    result = _update(compose, []).job_execute("update")

    assert result.status == "success"
    assert result.details["versions"] == {"nocodb": "0.258.0", "n8n": "unknown"}


def test_jobs_update_requires_running_engine() -> None:
    compose = _ComposeStub(engine_available=False)

    with pytest.raises(OrchestratorUnavailableError, match="Docker is not running"):
        _update(compose, []).job_execute("update")

    assert compose.calls == [("info",)]


def test_jobs_update_fails_when_nothing_runs() -> None:
    with pytest.raises(StackNotRunningError):
        _update(_ComposeStub(running_services=()), []).job_execute("update")


def test_jobs_update_down_failure_is_fatal() -> None:
    with pytest.raises(OrchestratorCommandError, match="Stopping services"):
        _update(_ComposeStub(down_returncode=1), []).job_execute("update")


def test_jobs_uninstall_removes_volumes_and_credentials(tmp_path: Path) -> None:
    """Tear down with volume removal and delete the credential file."""

    store = FileCredentialStore(path=tmp_path / "api_keys.txt")
    store.persistence_write(
        CredentialRecord(
            data_tool_token="nocodb-token",
            workflow_api_key="n8n-key",
            generated_at=datetime(2026, 10, 19, tzinfo=timezone.utc),
        )
    )
    compose = _ComposeStub()

    result = UninstallJobOrchestrator(compose=compose, credential_store=store).job_execute("uninstall")

    assert compose.calls == [("down", "-v")]
    assert result.details["credentials_removed"] is True
    assert not (tmp_path / "api_keys.txt").exists()


def test_jobs_uninstall_without_installed_stack_succeeds(tmp_path: Path) -> None:
    """Nothing installed: failing teardown and missing file are not errors."""

    compose = _ComposeStub(down_returncode=1)
    store = FileCredentialStore(path=tmp_path / "api_keys.txt")

    result = UninstallJobOrchestrator(compose=compose, credential_store=store).job_execute("uninstall")

    assert result.status == "success"
    assert result.details["credentials_removed"] is False


@pytest.mark.parametrize(
    "down_error",
    [
        OrchestratorUnavailableError("docker compose executable not found"),
        OrchestratorCommandError("Command timed out after 900.0s", command="docker compose down -v", returncode=None),
    ],
)
def test_jobs_uninstall_removes_credentials_when_teardown_cannot_run(
    tmp_path: Path, down_error: Exception
) -> None:
    """Credentials are deleted even when compose cannot be executed."""

    store = FileCredentialStore(path=tmp_path / "api_keys.txt")
    store.persistence_write(
        CredentialRecord(
            data_tool_token="nocodb-token",
            workflow_api_key="n8n-key",
            generated_at=datetime(2026, 10, 19, tzinfo=timezone.utc),
        )
    )
    compose = _ComposeStub(down_error=down_error)

    result = UninstallJobOrchestrator(compose=compose, credential_store=store).job_execute("uninstall")

    assert result.status == "success"
    assert result.details["credentials_removed"] is True
    assert not (tmp_path / "api_keys.txt").exists()
    assert [event.status for event in result.timeline if event.stage == "teardown"] == ["skipped"]


def test_jobs_status_reports_every_service_in_order() -> None:
    status = job_collect_stack_status(_ComposeStub(running_services=("postgres", "nocodb")))

    assert list(status.items()) == [
        ("postgres", "running"),
        ("redis", "unknown"),
        ("n8n", "unknown"),
        ("nocodb", "running"),
    ]
