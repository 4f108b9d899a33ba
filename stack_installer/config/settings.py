"""Typed installer settings with dotenv support and startup validation."""

from __future__ import annotations

import shutil
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stack_installer.domain import EnvFileCreatedError, MissingConfigError


class StackRuntimeSettings(BaseSettings):
    """Settings shared by every stack command.

    Environment variable names map directly to field names in uppercase.
    Example: `compose_command` reads from `COMPOSE_COMMAND`.

    Attributes:
        compose_command: Compose executable, split on whitespace (`docker compose` or `docker-compose`).
        docker_command: Container engine executable used for availability checks.
        compose_project_directory: Directory holding the compose file and `.env`.
        postgres_user: Database role used by the `pg_isready` probe.
        redis_password: Password passed to `redis-cli` by the cache probe.
        n8n_base_url: Workflow engine base URL.
        nocodb_base_url: Data tool base URL.
        poll_interval_seconds: Delay between readiness probe attempts.
        dependency_max_attempts: Probe ceiling for database and cache.
        application_max_attempts: Probe ceiling for n8n and NocoDB.
        settle_delay_seconds: Extra wait after NocoDB reports healthy.
        update_settle_seconds: Wait after restarting containers during update.
        log_tail_lines: Number of container log lines emitted per failed probe.
        http_timeout_seconds: Timeout for every HTTP request.
        command_timeout_seconds: Timeout for every compose subprocess.
        credentials_file: Credential file name, relative to the project directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    compose_command: str = Field(default="docker compose", min_length=1)
    docker_command: str = Field(default="docker", min_length=1)
    compose_project_directory: Path = Field(default=Path("."))
    postgres_user: str = Field(default="postgres", min_length=1)
    redis_password: str = Field(default="password")
    n8n_base_url: str = Field(default="http://localhost:5678")
    nocodb_base_url: str = Field(default="http://localhost:8080")
    poll_interval_seconds: float = Field(default=5.0, ge=0)
    dependency_max_attempts: int = Field(default=60, ge=1)
    application_max_attempts: int = Field(default=60, ge=1)
    settle_delay_seconds: float = Field(default=30.0, ge=0)
    update_settle_seconds: float = Field(default=10.0, ge=0)
    log_tail_lines: int = Field(default=50, ge=0)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    command_timeout_seconds: float = Field(default=900.0, gt=0)
    credentials_file: str = Field(default="api_keys.txt", min_length=1)

    @field_validator("n8n_base_url", "nocodb_base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        stripped_value = value.strip().rstrip("/")
        if not stripped_value.startswith(("http://", "https://")):
            raise ValueError("base url must start with http:// or https://")
        return stripped_value

    @field_validator("compose_command", "docker_command")
    @classmethod
    def _validate_command(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("command must not be blank")
        return stripped_value

    def settings_credentials_path(self) -> Path:
        """Return the absolute-or-relative credential file location."""

        return self.compose_project_directory / self.credentials_file


class InstallerSettings(StackRuntimeSettings):
    """Settings for the install command.

    Attributes:
        postgres_password: Database password; required and non-blank.
        nc_user: Demo account email created on NocoDB.
        nc_pass: Demo account password created on NocoDB.
        n8n_api_key: Pre-provisioned n8n API key written to the credential file; required and non-blank.
    """

    postgres_password: str = Field(min_length=1)
    nc_user: str = Field(default="demo@example.com", min_length=1)
    nc_pass: str = Field(default="DemoUser132!", min_length=1)
    n8n_api_key: str = Field(min_length=1)

    @field_validator("postgres_password", "n8n_api_key", "nc_user", "nc_pass")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value


_REQUIRED_INSTALL_FIELDS: tuple[tuple[str, str], ...] = (
    ("postgres_password", "POSTGRES_PASSWORD"),
    ("n8n_api_key", "N8N_API_KEY"),
)


def config_ensure_env_file(env_path: Path, template_path: Path) -> None:
    """Make sure an env file exists, bootstrapping it from the template.

    Args:
        env_path: Expected env file location.
        template_path: Template copied when the env file is absent.

    Returns:
        None: Returns normally only when the env file already exists.

    Raises:
        MissingConfigError: Raised when both env file and template are missing.
        EnvFileCreatedError: Raised after copying the template, so the operator can edit it.
    """

    if env_path.is_file():
        return
    if not template_path.is_file():
        raise MissingConfigError(f"No {env_path} file found and template {template_path} does not exist")

    shutil.copyfile(template_path, env_path)
    raise EnvFileCreatedError(
        f"Created {env_path} from {template_path}. Edit it with your desired configuration; "
        "at minimum set a secure POSTGRES_PASSWORD and the N8N_API_KEY."
    )


def config_load_installer_settings(env_file: Path | None = None) -> InstallerSettings:
    """Load and validate install settings from environment and dotenv.

    Args:
        env_file: Optional dotenv path overriding the default `.env`.

    Returns:
        InstallerSettings: Validated install settings.

    Raises:
        MissingConfigError: Raised when required settings are missing or invalid.
    """

    try:
        if env_file is None:
            return InstallerSettings()
        return InstallerSettings(_env_file=env_file)
    except ValidationError as error:
        failed_fields = {item["loc"][0] for item in error.errors() if item["loc"]}
        missing_required = [
            env_name for field_name, env_name in _REQUIRED_INSTALL_FIELDS if field_name in failed_fields
        ]
        if missing_required:
            missing_names = ", ".join(missing_required)
            raise MissingConfigError(
                f"{missing_names} not set. Edit the env file and set a value for each "
                "before installing."
            ) from error
        raise MissingConfigError(
            f"Install configuration validation failed. Update the env file or environment variables. Details: {error}"
        ) from error


def config_load_runtime_settings(env_file: Path | None = None) -> StackRuntimeSettings:
    """Load settings needed by update, uninstall and status commands.

    These commands do not touch credentials, so they run without a database
    password or a bootstrapped env file.

    Args:
        env_file: Optional dotenv path overriding the default `.env`.

    Returns:
        StackRuntimeSettings: Validated runtime settings.

    Raises:
        MissingConfigError: Raised when settings are invalid.
    """

    try:
        if env_file is None:
            return StackRuntimeSettings()
        return StackRuntimeSettings(_env_file=env_file)
    except ValidationError as error:
        raise MissingConfigError(
            f"Stack configuration validation failed. Update the env file or environment variables. Details: {error}"
        ) from error
