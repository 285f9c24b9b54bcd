"""Key-value storage backends the entity store persists through."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from rentdesk.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Key-value medium holding one serialized collection per key.

    Implementations raise ``StorageUnavailableError`` when the medium cannot
    be read or written. A failed ``write`` must leave the previous value of
    the key intact.
    """

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """Dict-backed storage with switchable failures for tests."""

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        fail_reads: bool = False,
        fail_writes: bool = False,
    ) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes: list[str] = []

    def read(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageUnavailableError(f"Storage unavailable while reading {key}")
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError(f"Storage unavailable while writing {key}")
        self.data[key] = value
        self.writes.append(key)


class JsonFileBackend:
    """Store each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which is then moved
    over the target, so readers see either the old or the new collection.
    """

    def __init__(self, directory: str | Path) -> None:
        """Initialize JSON file backend.

        Parameters
        ----------
        directory : str | Path
            Directory holding the collection files. Created if missing.
        """
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create data directory {self.directory}: {exc}") from exc

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StorageUnavailableError(f"Cannot decode {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            logger.error("Write of %s failed: %s", path, exc)
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc
