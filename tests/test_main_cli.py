"""Tests for the CLI entrypoint fail-fast and dispatch behavior."""

from __future__ import annotations

import subprocess
from pathlib import Path

import httpx
import pytest

import stack_installer.adapters.compose_cli as compose_module
from stack_installer.main import main


@pytest.fixture(autouse=True)
def _clear_stack_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "POSTGRES_PASSWORD",
        "N8N_API_KEY",
        "COMPOSE_PROJECT_DIRECTORY",
        "COMPOSE_COMMAND",
        "CREDENTIALS_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def forbid_external_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail the test if any subprocess or HTTP client is created."""

    def _no_subprocess(*args: object, **kwargs: object) -> None:
        raise AssertionError(f"unexpected subprocess call: {args} {kwargs}")

    def _no_http_client(*args: object, **kwargs: object) -> None:
        raise AssertionError("unexpected HTTP client creation")

    monkeypatch.setattr(compose_module.subprocess, "run", _no_subprocess)
    monkeypatch.setattr(httpx, "Client", _no_http_client)


def test_main_install_without_password_fails_before_any_call(tmp_path: Path, forbid_external_calls: None) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("N8N_API_KEY=key\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exit_info:
        main(["install", "--env-file", str(env_file), "--env-template", str(tmp_path / ".env.example")])

    assert exit_info.value.code == 1


def test_main_install_without_n8n_key_fails_before_any_call(tmp_path: Path, forbid_external_calls: None) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("POSTGRES_PASSWORD=secret\nN8N_API_KEY=\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exit_info:
        main(["install", "--env-file", str(env_file), "--env-template", str(tmp_path / ".env.example")])

    assert exit_info.value.code == 1


def test_main_install_bootstraps_env_file_and_exits(tmp_path: Path, forbid_external_calls: None) -> None:
    env_file = tmp_path / ".env"
    template = tmp_path / ".env.example"
    template.write_text("POSTGRES_PASSWORD=\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exit_info:
        main(["install", "--env-file", str(env_file), "--env-template", str(template)])

    assert exit_info.value.code == 1
    assert env_file.read_text(encoding="utf-8") == "POSTGRES_PASSWORD=\n"


def test_main_uninstall_runs_without_password(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Uninstall tears down volumes and removes credentials without install settings."""

    env_file = tmp_path / ".env"
    env_file.write_text(f"COMPOSE_PROJECT_DIRECTORY={tmp_path}\n", encoding="utf-8")
    credentials = tmp_path / "api_keys.txt"
    credentials.write_text("NocoDB API Key:\ntoken\n", encoding="utf-8")
    calls: list[list[str]] = []

    def _fake_run(args: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        _ = kwargs
        calls.append(args)
        return subprocess.CompletedProcess(args=args, returncode=0, stdout="", stderr="")

    monkeypatch.setattr(compose_module.subprocess, "run", _fake_run)

    main(["uninstall", "--env-file", str(env_file)])

    assert calls == [["docker", "compose", "--env-file", str(env_file.resolve()), "down", "-v"]]
    assert not credentials.exists()


def test_main_uninstall_without_compose_binary_still_removes_credentials(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"COMPOSE_PROJECT_DIRECTORY={tmp_path}\n", encoding="utf-8")
    credentials = tmp_path / "api_keys.txt"
    credentials.write_text("NocoDB API Key:\ntoken\n", encoding="utf-8")

    def _missing_binary(args: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        _ = kwargs
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(compose_module.subprocess, "run", _missing_binary)

    main(["uninstall", "--env-file", str(env_file)])

    assert not credentials.exists()


def test_main_status_prints_service_states(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def _fake_run(args: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        _ = kwargs
        stdout = f'{{"Service": "{args[-1]}", "State": "running"}}\n'
        return subprocess.CompletedProcess(args=args, returncode=0, stdout=stdout, stderr="")

    monkeypatch.setattr(compose_module.subprocess, "run", _fake_run)

    main(["status", "--env-file", str(tmp_path / "absent.env")])

    assert capsys.readouterr().out.splitlines() == [
        "postgres: running",
        "redis: running",
        "n8n: running",
        "nocodb: running",
    ]


def test_main_rejects_unknown_log_level(forbid_external_calls: None, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exit_info:
        main(["status", "--log-level", "foo"])

    assert exit_info.value.code == 2
    assert "--log-level" in capsys.readouterr().err


def test_main_accepts_lowercase_log_level(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_run(args: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        _ = kwargs
        return subprocess.CompletedProcess(args=args, returncode=1, stdout="", stderr="")

    monkeypatch.setattr(compose_module.subprocess, "run", _fake_run)

    main(["status", "--log-level", "debug", "--env-file", str(tmp_path / "absent.env")])
