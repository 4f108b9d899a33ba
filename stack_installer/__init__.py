"""Installer for the self-hosted n8n and NocoDB container stack."""

__version__ = "1.0.0"
