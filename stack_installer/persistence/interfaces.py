"""Typed interfaces for persistence-layer responsibilities."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from stack_installer.domain import CredentialRecord


class CredentialStorePort(Protocol):
    """Port definition for persisting installer credentials."""

    def persistence_write(self, record: CredentialRecord) -> Path:
        """Write credentials with owner-only permissions.

        Args:
            record: Complete credential record.

        Returns:
            Path: Written file path.

        Raises:
            PersistenceFailedError: Raised when the record is incomplete or the write fails.
        """

    def persistence_remove(self) -> bool:
        """Delete stored credentials.

        Returns:
            bool: True when a file was removed, False when none existed.

        Raises:
            PersistenceFailedError: Raised when an existing file cannot be removed.
        """
