from __future__ import annotations

from pathlib import Path
from typing import Any

from .interfaces import ConfigDocumentStore
from .settings import default_store
from .validation import RawSpec, validate


class ConfigFile:
    """
    One named configuration document: loaded on construction, optionally
    checked against a required spec, saved back on request.

    ``data`` is a plain dict owned by this handle. ``required()`` may rename
    aliased keys inside it; those renames are written by the next ``save()``.
    """

    def __init__(
        self,
        name: str,
        required: RawSpec | None = None,
        *,
        store: ConfigDocumentStore | None = None,
    ):
        self.name = name
        self._store = store if store is not None else default_store()
        self.data: dict[str, Any] = self._store.load(name)
        if required:
            self.required(required)

    @property
    def path(self) -> Path | None:
        path_for = getattr(self._store, "path_for", None)
        return path_for(self.name) if path_for is not None else None

    def _context(self) -> str:
        path = self.path
        return str(path) if path is not None else self.name

    def required(self, spec: RawSpec) -> dict[str, Any]:
        return validate(spec, self.data, self._context())

    def reload(self) -> dict[str, Any]:
        self.data = self._store.load(self.name)
        return self.data

    def save(self) -> None:
        self._store.save(self.name, self.data)


def load_config(name: str, *, store: ConfigDocumentStore | None = None) -> dict[str, Any]:
    return (store if store is not None else default_store()).load(name)


def save_config(name: str, document: dict[str, Any], *, store: ConfigDocumentStore | None = None) -> None:
    (store if store is not None else default_store()).save(name, document)


def get_config(
    name: str,
    required: RawSpec | None = None,
    *,
    store: ConfigDocumentStore | None = None,
) -> dict[str, Any]:
    """Load, validate and return only the document (no handle to save with)."""
    return ConfigFile(name, required, store=store).data
