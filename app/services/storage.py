"""Key-value persistence used for share records and favorites."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")


class KeyValueStore(Protocol):
    """Protocol describing the string key-value store the services rely on."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is missing."""

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""


class InMemoryKeyValueStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """One file per key under a directory, written atomically."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except OSError:
            logger.error("Failed to write %s", path, exc_info=True)
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def create_store(storage_dir: str) -> KeyValueStore:
    """File-backed store when a directory is configured, in-memory otherwise."""
    if storage_dir:
        logger.info("Using file storage at %s", storage_dir)
        return JsonFileKeyValueStore(storage_dir)
    logger.info("Using in-memory storage")
    return InMemoryKeyValueStore()
