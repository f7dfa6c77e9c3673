"""File-backed storage for ledger records."""

import errno
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from nutri_ledger.domain.errors import CapacityExceeded, MalformedStoredRecord
from nutri_ledger.services.ledger import LedgerStorage

_OUT_OF_SPACE = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}
_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]")


@dataclass
class JsonFileStorage(LedgerStorage):
    """Stores each key as one file in a directory.

    ``quota_bytes`` caps the combined size of all stored values; ``0`` disables
    the cap.
    """

    directory: Path
    quota_bytes: int = 0

    @classmethod
    def create(cls, directory: str | Path, quota_bytes: int = 0) -> "JsonFileStorage":
        """Create storage rooted at a directory, creating it if needed."""
        path = Path(directory).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return cls(directory=path, quota_bytes=quota_bytes)

    def read(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedStoredRecord(f"{key} is not valid UTF-8") from exc

    def write(self, key: str, value: str) -> None:
        """Atomically replace the value for a key."""
        encoded = value.encode("utf-8")
        if self.quota_bytes:
            used = self._used_bytes(exclude=key)
            if used + len(encoded) > self.quota_bytes:
                raise CapacityExceeded(
                    f"Writing {key} needs {len(encoded)} bytes, "
                    f"{max(self.quota_bytes - used, 0)} available"
                )
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._path_for(key)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(encoded)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            if exc.errno in _OUT_OF_SPACE:
                raise CapacityExceeded(f"No space left writing {key}") from exc
            raise

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def _used_bytes(self, exclude: str) -> int:
        excluded = self._path_for(exclude)
        return sum(
            path.stat().st_size
            for path in self.directory.glob("*.json")
            if path != excluded
        )
