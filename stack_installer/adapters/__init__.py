"""Adapter layer package for compose CLI and HTTP service boundaries."""

from .compose_cli import ComposeCliAdapter, adapter_raise_for_command
from .http_health import HttpHealthProbe
from .interfaces import CommandResult, ComposePort, DataToolAuthPort, HealthProbePort
from .nocodb_client import NocoDbAuthClient

__all__ = [
    "CommandResult",
    "ComposeCliAdapter",
    "ComposePort",
    "DataToolAuthPort",
    "HealthProbePort",
    "HttpHealthProbe",
    "NocoDbAuthClient",
    "adapter_raise_for_command",
]
