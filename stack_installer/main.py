"""Main module entrypoint for stack install, update, uninstall and status.

Install validates configuration completely before any container or network
call is made.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from stack_installer.bootstrap import (
    bootstrap_create_compose_adapter,
    bootstrap_create_http_client,
    bootstrap_create_install_orchestrator,
    bootstrap_create_uninstall_orchestrator,
    bootstrap_create_update_orchestrator,
)
from stack_installer.config import (
    config_ensure_env_file,
    config_load_installer_settings,
    config_load_runtime_settings,
    configure_logging,
    get_logger,
)
from stack_installer.domain import InstallerError
from stack_installer.jobs import job_collect_stack_status

logger = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    """Run the selected stack command.

    Args:
        argv: Optional argument vector; defaults to `sys.argv[1:]`.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with status 1 when any installer step fails.
    """

    argument_parser = argparse.ArgumentParser(description="n8n and NocoDB stack installer")
    argument_parser.add_argument(
        "command",
        choices=("install", "update", "uninstall", "status"),
        help="`install` brings the stack up and provisions credentials, `update` pulls new images and restarts, "
        "`uninstall` removes containers, volumes and credentials, `status` lists container states",
        type=str,
    )
    argument_parser.add_argument(
        "--env-file",
        dest="env_file",
        type=Path,
        default=Path(".env"),
        help="Dotenv file with stack configuration (default: .env)",
    )
    argument_parser.add_argument(
        "--env-template",
        dest="env_template",
        type=Path,
        default=Path(".env.example"),
        help="Template copied to the env file when it does not exist (default: .env.example)",
    )
    argument_parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    )
    argument_parser.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit JSON log lines")
    parsed_arguments = argument_parser.parse_args(argv)

    configure_logging(level=parsed_arguments.log_level, json_output=parsed_arguments.json_logs)

    try:
        main_run_command(
            command=parsed_arguments.command,
            env_file=parsed_arguments.env_file,
            env_template=parsed_arguments.env_template,
        )
    except InstallerError as error:
        logger.error("command_failed", command=parsed_arguments.command, error_type=type(error).__name__, error=str(error))
        raise SystemExit(error.exit_code) from error


def main_run_command(command: str, env_file: Path, env_template: Path) -> None:
    """Dispatch one command after loading the settings it needs.

    Args:
        command: One of `install`, `update`, `uninstall`, `status`.
        env_file: Dotenv file path.
        env_template: Template used to bootstrap the env file.

    Returns:
        None: Side effects only.

    Raises:
        InstallerError: Raised when configuration or any workflow step fails.
    """

    if command == "install":
        config_ensure_env_file(env_path=env_file, template_path=env_template)
        install_settings = config_load_installer_settings(env_file=env_file)
        logger.info("install_started", project_directory=str(install_settings.compose_project_directory))
        with bootstrap_create_http_client(install_settings) as http_client:
            orchestrator = bootstrap_create_install_orchestrator(install_settings, http_client, env_file=env_file)
            orchestrator.job_execute(job_name="install")
        return

    runtime_settings = config_load_runtime_settings(env_file=env_file)

    if command == "update":
        bootstrap_create_update_orchestrator(runtime_settings, env_file=env_file).job_execute(job_name="update")
        return

    if command == "uninstall":
        bootstrap_create_uninstall_orchestrator(runtime_settings, env_file=env_file).job_execute(job_name="uninstall")
        return

    stack_status = job_collect_stack_status(bootstrap_create_compose_adapter(runtime_settings, env_file=env_file))
    for service_name, state in stack_status.items():
        print(f"{service_name}: {state}")


if __name__ == "__main__":
    main()
