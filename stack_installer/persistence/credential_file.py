"""Plaintext credential file store with owner-only permissions."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Final

from stack_installer.config import get_logger
from stack_installer.domain import CredentialRecord, PersistenceFailedError

from .interfaces import CredentialStorePort

logger = get_logger(__name__)


class FileCredentialStore(CredentialStorePort):
    """Store that writes labeled API keys to a single `0600` text file."""

    _FILE_MODE: Final[int] = 0o600
    _HEADER: Final[str] = "# API Keys for n8n and NocoDB Services"

    def __init__(self, path: Path):
        """Initialize credential file store.

        Args:
            path: Target credential file path.

        Raises:
            ValueError: Raised when path is None.
        """

        if path is None:
            raise ValueError("path must not be None")
        self._path = Path(path)

    def persistence_write(self, record: CredentialRecord) -> Path:
        """Write both labeled secrets atomically with mode `0600`.

        The content lands in a private temp file next to the target and is
        moved into place, so a partially written file is never visible.

        Args:
            record: Credential record holding both secrets.

        Returns:
            Path: Written credential file path.

        Raises:
            PersistenceFailedError: Raised when a secret is empty, the write fails, or the file is empty after write.
        """

        if not record.credential_record_is_complete():
            missing_label = "NocoDB API key" if not record.data_tool_token.strip() else "N8N_API_KEY"
            raise PersistenceFailedError(f"{missing_label} is empty; refusing to write credential file")

        content = self._persistence_render(record)
        directory = self._path.parent
        temporary_path: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            file_descriptor, temporary_path = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.chmod(temporary_path, self._FILE_MODE)
            os.replace(temporary_path, self._path)
            temporary_path = None

            if self._path.stat().st_size == 0:
                raise PersistenceFailedError(f"API token file {self._path} is empty")
            os.chmod(self._path, self._FILE_MODE)
        except OSError as error:
            raise PersistenceFailedError(f"Failed to write API token file {self._path}: {error}") from error
        finally:
            if temporary_path is not None and os.path.exists(temporary_path):
                os.unlink(temporary_path)

        logger.info("credentials_written", path=str(self._path))
        return self._path

    def persistence_remove(self) -> bool:
        """Delete the credential file if present.

        Returns:
            bool: True when a file was removed.

        Raises:
            PersistenceFailedError: Raised when an existing file cannot be removed.
        """

        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as error:
            raise PersistenceFailedError(f"Failed to remove API token file {self._path}: {error}") from error
        logger.info("credentials_removed", path=str(self._path))
        return True

    def _persistence_render(self, record: CredentialRecord) -> str:
        lines = [
            self._HEADER,
            f"# Generated on {record.generated_at.isoformat()}",
            "",
            "NocoDB API Key:",
            record.data_tool_token.strip(),
            "",
            "n8n API Key:",
            record.workflow_api_key.strip(),
        ]
        return "\n".join(lines) + "\n"
