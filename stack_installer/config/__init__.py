"""Configuration package for installer settings and logging setup."""

from .logging import configure_logging, get_logger
from .settings import (
    InstallerSettings,
    StackRuntimeSettings,
    config_ensure_env_file,
    config_load_installer_settings,
    config_load_runtime_settings,
)

__all__ = [
    "InstallerSettings",
    "StackRuntimeSettings",
    "config_ensure_env_file",
    "config_load_installer_settings",
    "config_load_runtime_settings",
    "configure_logging",
    "get_logger",
]
