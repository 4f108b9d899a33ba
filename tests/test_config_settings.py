"""Tests for installer settings loading and env-file bootstrap."""

from __future__ import annotations

from pathlib import Path

import pytest

from stack_installer.config import (
    config_ensure_env_file,
    config_load_installer_settings,
    config_load_runtime_settings,
)
from stack_installer.domain import EnvFileCreatedError, MissingConfigError

_ENV_NAMES = (
    "POSTGRES_PASSWORD",
    "POSTGRES_USER",
    "REDIS_PASSWORD",
    "N8N_API_KEY",
    "NC_USER",
    "NC_PASS",
    "COMPOSE_COMMAND",
    "COMPOSE_PROJECT_DIRECTORY",
    "NOCODB_BASE_URL",
    "N8N_BASE_URL",
    "SETTLE_DELAY_SECONDS",
    "DEPENDENCY_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def _clear_stack_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def _write_env(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_config_missing_password_raises_missing_config(tmp_path: Path) -> None:
    """Reject env files without POSTGRES_PASSWORD."""

    env_file = _write_env(tmp_path / ".env", "N8N_API_KEY=key\n")

    with pytest.raises(MissingConfigError, match="POSTGRES_PASSWORD"):
        config_load_installer_settings(env_file=env_file)


@pytest.mark.parametrize("password_line", ["POSTGRES_PASSWORD=\n", "POSTGRES_PASSWORD=   \n"])
def test_config_blank_password_raises_missing_config(tmp_path: Path, password_line: str) -> None:
    """Reject empty and whitespace-only passwords."""

    env_file = _write_env(tmp_path / ".env", password_line)

    with pytest.raises(MissingConfigError, match="POSTGRES_PASSWORD"):
        config_load_installer_settings(env_file=env_file)


@pytest.mark.parametrize("key_lines", ["", "N8N_API_KEY=\n", "N8N_API_KEY=   \n"])
def test_config_missing_n8n_key_raises_missing_config(tmp_path: Path, key_lines: str) -> None:
    """Reject install settings without a usable N8N_API_KEY."""

    env_file = _write_env(tmp_path / ".env", "POSTGRES_PASSWORD=secret\n" + key_lines)

    with pytest.raises(MissingConfigError, match="N8N_API_KEY"):
        config_load_installer_settings(env_file=env_file)


def test_config_loads_defaults_and_overrides(tmp_path: Path) -> None:
    """Apply documented defaults and honor env-file overrides."""

    env_file = _write_env(
        tmp_path / ".env",
        "POSTGRES_PASSWORD=secret\nN8N_API_KEY=n8n-key\nNOCODB_BASE_URL=http://nocodb.local:9090/\n"
        "SETTLE_DELAY_SECONDS=0\nPOSTGRES_DB=ignored\n",
    )

    settings = config_load_installer_settings(env_file=env_file)

    assert settings.postgres_password == "secret"
    assert settings.n8n_api_key == "n8n-key"
    assert settings.nocodb_base_url == "http://nocodb.local:9090"
    assert settings.n8n_base_url == "http://localhost:5678"
    assert settings.settle_delay_seconds == 0
    assert settings.dependency_max_attempts == 60
    assert settings.application_max_attempts == 60
    assert settings.poll_interval_seconds == 5.0
    assert settings.nc_user == "demo@example.com"
    assert settings.settings_credentials_path() == Path(".") / "api_keys.txt"


def test_config_settings_are_immutable(tmp_path: Path) -> None:
    """Settings objects cannot be mutated after load."""

    env_file = _write_env(tmp_path / ".env", "POSTGRES_PASSWORD=secret\nN8N_API_KEY=key\n")
    settings = config_load_installer_settings(env_file=env_file)

    with pytest.raises(Exception):
        settings.postgres_password = "other"


def test_config_invalid_attempt_ceiling_raises_missing_config(tmp_path: Path) -> None:
    """Zero attempts is not a valid polling ceiling."""

    env_file = _write_env(tmp_path / ".env", "POSTGRES_PASSWORD=secret\nN8N_API_KEY=key\nDEPENDENCY_MAX_ATTEMPTS=0\n")

    with pytest.raises(MissingConfigError, match="validation failed"):
        config_load_installer_settings(env_file=env_file)


def test_config_runtime_settings_do_not_require_password(tmp_path: Path) -> None:
    """Update, uninstall and status load without a database password."""

    settings = config_load_runtime_settings(env_file=tmp_path / "absent.env")

    assert settings.compose_command == "docker compose"
    assert settings.credentials_file == "api_keys.txt"


def test_config_ensure_env_file_copies_template_and_stops(tmp_path: Path) -> None:
    """Bootstrap the env file from the template and ask the operator to edit it."""

    template = _write_env(tmp_path / ".env.example", "POSTGRES_PASSWORD=\n")
    env_file = tmp_path / ".env"

    with pytest.raises(EnvFileCreatedError, match="POSTGRES_PASSWORD"):
        config_ensure_env_file(env_path=env_file, template_path=template)

    assert env_file.read_text(encoding="utf-8") == "POSTGRES_PASSWORD=\n"


def test_config_ensure_env_file_without_template_raises(tmp_path: Path) -> None:
    """Fail when neither env file nor template exist."""

    with pytest.raises(MissingConfigError, match="does not exist"):
        config_ensure_env_file(env_path=tmp_path / ".env", template_path=tmp_path / ".env.example")


def test_config_ensure_env_file_keeps_existing_file(tmp_path: Path) -> None:
    """Leave an existing env file untouched."""

    env_file = _write_env(tmp_path / ".env", "POSTGRES_PASSWORD=secret\n")
    template = _write_env(tmp_path / ".env.example", "POSTGRES_PASSWORD=\n")

    config_ensure_env_file(env_path=env_file, template_path=template)

    assert env_file.read_text(encoding="utf-8") == "POSTGRES_PASSWORD=secret\n"
