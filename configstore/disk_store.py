from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .json_store import DEFAULT_INDENT, atomic_write_json, read_json
from .interfaces import ConfigDocumentStore
from .paths import config_file_path, ensure_dir, require_dir

logger = logging.getLogger(__name__)


class DiskConfigStore(ConfigDocumentStore):
    """
    Stores named JSON documents as ``<config_dir>/<name>.json``.

    - Reads under a shared file lock; writes go through a same-directory temp
      file, an exclusive lock on the current target and an atomic rename.
    - Strict by default: a missing directory or file is an error. With
      ``create_missing=True`` both are created, the file holding ``{}``.
    - Keeps no documents in memory between calls.
    """

    def __init__(
        self,
        config_dir: Path | str,
        *,
        create_missing: bool = False,
        fsync: bool = True,
        indent: int = DEFAULT_INDENT,
    ):
        self._config_dir = Path(config_dir)
        self._create_missing = create_missing
        self._fsync = fsync
        self._indent = indent

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def create_missing(self) -> bool:
        return self._create_missing

    def path_for(self, name: str) -> Path:
        return config_file_path(self._config_dir, name)

    def _directory(self) -> Path:
        if self._create_missing:
            return ensure_dir(self._config_dir)
        return require_dir(self._config_dir)

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> dict[str, Any]:
        path = self.path_for(name)
        self._directory()
        if self._create_missing and not path.exists():
            logger.info("CONFIG LOAD: %s missing, creating empty configuration", path)
            atomic_write_json(path, {}, indent=self._indent, fsync=self._fsync)
            return {}
        doc = read_json(path)
        logger.debug("CONFIG LOAD: %s (%d keys)", path, len(doc))
        return doc

    def save(self, name: str, doc: dict[str, Any]) -> None:
        path = self.path_for(name)
        self._directory()
        atomic_write_json(path, doc, indent=self._indent, fsync=self._fsync)
        logger.debug("CONFIG SAVE: %s", path)
