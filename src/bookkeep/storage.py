"""Statement file storage.

Uploaded statements are addressed by a storage path of the form
``<user_id>/<account_id>/<timestamp>-<filename>``; the ingestion pipeline
only ever reads them.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from bookkeep.domain.errors import StorageError

logger = logging.getLogger(__name__)


class StatementStorage(ABC):
    """Read access to uploaded statement files."""

    @abstractmethod
    def read(self, storage_path: str) -> bytes:
        """Return the file bytes stored at storage_path.

        Raises:
            StorageError: If the file does not exist or cannot be read
        """


class LocalStatementStorage(StatementStorage):
    """Statement files kept under a local root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def resolve(self, storage_path: str) -> Path:
        """Map a storage path to a file under the root directory."""
        candidate = (self.root / storage_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.root):
            raise StorageError(f"Storage path '{storage_path}' escapes the storage root")
        return candidate

    def read(self, storage_path: str) -> bytes:
        file_path = self.resolve(storage_path)
        if not file_path.is_file():
            raise StorageError(f"File not found in storage: {storage_path}")
        try:
            return file_path.read_bytes()
        except OSError as e:
            logger.error("Failed to read statement file %s: %s", storage_path, e)
            raise StorageError(f"Failed to read file from storage: {storage_path}") from e

    def save(self, storage_path: str, data: bytes) -> Path:
        """Store file bytes at storage_path, creating directories as needed."""
        file_path = self.resolve(storage_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)
        return file_path
