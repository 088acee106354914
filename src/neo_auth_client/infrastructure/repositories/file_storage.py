"""File system local storage."""

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ...core.exceptions import StorageError

logger = logging.getLogger(__name__)


class FileLocalStorage:
    """Durable storage keeping one file per key inside a directory.

    Handles ONLY byte persistence on the local file system. Writes go to a
    temporary file first and are moved into place with os.replace, so a crash
    never leaves a truncated record behind.
    """

    def __init__(self, directory: Union[str, Path], file_mode: int = 0o600):
        """Initialize file storage.

        Args:
            directory: Directory holding the records, created when missing
            file_mode: Permission bits applied to every record
        """
        self.directory = Path(directory)
        self.file_mode = file_mode
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {self.directory}: {e}") from e

    def _path_for(self, key: str) -> Path:
        # Keys may contain characters that are not valid in file names.
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read storage key {key}: {e}")
            raise StorageError(f"Failed to read {key}: {e}", key=key) from e

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
            with os.fdopen(fd, "wb") as fp:
                fp.write(value)
                fp.flush()
                os.fsync(fp.fileno())
            os.chmod(tmp_name, self.file_mode)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Failed to write storage key {key}: {e}")
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise StorageError(f"Failed to write {key}: {e}", key=key) from e

    def remove(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove storage key {key}: {e}")
            raise StorageError(f"Failed to remove {key}: {e}", key=key) from e
