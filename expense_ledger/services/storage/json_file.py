"""
JSON File Storage Implementation

Each slot is one file, `<data_dir>/<key>.json`, holding exactly the
text the store saved.

TRADEOFFS:
- The whole collection is rewritten on every mutation (fine for a
  personal ledger)
- Writes go through a temp file and os.replace, so a crash leaves
  either the old or the new document, never half of one
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_ledger.services.storage.interface import PersistenceAdapter, StorageError


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonFileStorage(PersistenceAdapter):
    """
    File-backed slots.

    Transient OSErrors on write are retried; once attempts are
    exhausted the failure surfaces as StorageError.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        write_attempts: int = 3,
    ):
        self._data_dir = Path(data_dir)
        self._write_attempts = write_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File that backs a slot."""
        if not _KEY_PATTERN.match(key) or key in (".", ".."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read slot '{key}': {e}") from e

    def save(self, key: str, raw: str) -> None:
        path = self.path_for(key)
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_exponential(multiplier=0.1, max=1),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomic(path, raw)
        except OSError as e:
            raise StorageError(f"Failed to write slot '{key}': {e}") from e

    def _write_atomic(self, path: Path, raw: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(raw)
                tmp.flush()
                os.fsync(tmp.fileno())

            os.replace(tmp_path, path)
            tmp_path = None
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
