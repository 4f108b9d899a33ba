"""Dependency wiring from validated settings to job orchestrators."""

from __future__ import annotations

import shlex
from pathlib import Path

import httpx

from stack_installer.adapters import ComposeCliAdapter, HttpHealthProbe, NocoDbAuthClient
from stack_installer.config import InstallerSettings, StackRuntimeSettings
from stack_installer.jobs import (
    InstallJobOrchestrator,
    InstallOrchestratorConfig,
    ReadinessPoller,
    UninstallJobOrchestrator,
    UpdateJobOrchestrator,
    UpdateOrchestratorConfig,
)
from stack_installer.persistence import FileCredentialStore


def bootstrap_create_compose_adapter(
    settings: StackRuntimeSettings,
    env_file: Path | None = None,
) -> ComposeCliAdapter:
    """Build the compose CLI adapter from runtime settings.

    Args:
        settings: Validated runtime settings.
        env_file: Env file the settings were loaded from; forwarded to compose when it exists.

    Returns:
        ComposeCliAdapter: Adapter bound to the project directory and env file.
    """

    compose_env_file = env_file.resolve() if env_file is not None and env_file.is_file() else None
    return ComposeCliAdapter(
        compose_command=shlex.split(settings.compose_command),
        docker_command=shlex.split(settings.docker_command),
        project_directory=settings.compose_project_directory,
        env_file=compose_env_file,
        command_timeout_seconds=settings.command_timeout_seconds,
    )


def bootstrap_create_http_client(settings: StackRuntimeSettings) -> httpx.Client:
    """Build the shared HTTP client; callers own closing it."""

    return httpx.Client(timeout=settings.http_timeout_seconds)


def bootstrap_create_install_orchestrator(
    settings: InstallerSettings,
    http_client: httpx.Client,
    env_file: Path | None = None,
) -> InstallJobOrchestrator:
    """Build the install orchestrator with every adapter wired.

    Args:
        settings: Validated install settings.
        http_client: Shared HTTP client.
        env_file: Env file the settings were loaded from.

    Returns:
        InstallJobOrchestrator: Fully wired install orchestrator.
    """

    compose = bootstrap_create_compose_adapter(settings, env_file=env_file)
    return InstallJobOrchestrator(
        compose=compose,
        health_probe=HttpHealthProbe(client=http_client),
        auth_client=NocoDbAuthClient(base_url=settings.nocodb_base_url, client=http_client),
        credential_store=FileCredentialStore(path=settings.settings_credentials_path()),
        poller=ReadinessPoller(
            compose=compose,
            poll_interval_seconds=settings.poll_interval_seconds,
            log_tail_lines=settings.log_tail_lines,
        ),
        config=InstallOrchestratorConfig(
            postgres_user=settings.postgres_user,
            redis_password=settings.redis_password,
            n8n_base_url=settings.n8n_base_url,
            nocodb_base_url=settings.nocodb_base_url,
            demo_email=settings.nc_user,
            demo_password=settings.nc_pass,
            n8n_api_key=settings.n8n_api_key,
            dependency_max_attempts=settings.dependency_max_attempts,
            application_max_attempts=settings.application_max_attempts,
            settle_delay_seconds=settings.settle_delay_seconds,
        ),
    )


def bootstrap_create_update_orchestrator(
    settings: StackRuntimeSettings,
    env_file: Path | None = None,
) -> UpdateJobOrchestrator:
    """Build the update orchestrator."""

    return UpdateJobOrchestrator(
        compose=bootstrap_create_compose_adapter(settings, env_file=env_file),
        config=UpdateOrchestratorConfig(settle_seconds=settings.update_settle_seconds),
    )


def bootstrap_create_uninstall_orchestrator(
    settings: StackRuntimeSettings,
    env_file: Path | None = None,
) -> UninstallJobOrchestrator:
    """Build the uninstall orchestrator."""

    return UninstallJobOrchestrator(
        compose=bootstrap_create_compose_adapter(settings, env_file=env_file),
        credential_store=FileCredentialStore(path=settings.settings_credentials_path()),
    )
