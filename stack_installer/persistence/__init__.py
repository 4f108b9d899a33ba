"""Persistence layer package for installer credential storage."""

from .credential_file import FileCredentialStore
from .interfaces import CredentialStorePort

__all__ = ["CredentialStorePort", "FileCredentialStore"]
