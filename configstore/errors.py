from __future__ import annotations

from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Base class for every error raised by configstore."""


# -------------------------------------------------------------------
# Store layer
# -------------------------------------------------------------------
class StoreError(ConfigError):
    """
    File-level failure. ``path`` is the file or directory involved.
    """

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class DirectoryMissing(StoreError):
    """The configuration directory does not exist."""


class FileMissing(StoreError):
    """The named configuration file does not exist."""


class Unreadable(StoreError):
    """The configuration file could not be opened or read."""


class LockFailed(StoreError):
    """A shared or exclusive file lock could not be obtained."""


class InvalidJSON(StoreError):
    """The file content is not a valid JSON object."""


class EncodeError(StoreError):
    """The in-memory document cannot be represented as JSON."""


class TempFileError(StoreError):
    """The temporary file next to the target could not be created or written."""


class RenameFailed(StoreError):
    """The temp file could not be moved over the target."""


class InvalidName(StoreError):
    """The config name cannot be mapped to a file inside the config directory."""


# -------------------------------------------------------------------
# Schema layer
# -------------------------------------------------------------------
class SchemaError(ConfigError):
    """
    Raised by the validator. ``key`` is the key specifier as written in the
    required spec, ``context`` the chain of parents, e.g. ``root->database``.
    """

    def __init__(self, message: str, key: str, context: str):
        super().__init__(message)
        self.key = key
        self.context = context


class MissingKey(SchemaError):
    def __init__(self, key: str, context: str):
        super().__init__(
            f"Missing required configuration key '{key}' in {context}. Please add this key to the configuration.",
            key,
            context,
        )


class TypeMismatch(SchemaError):
    def __init__(self, key: str, context: str, expected: str, actual: str):
        label = f"'{key}'" if key else "document"
        super().__init__(
            f"Invalid type for configuration {label} in {context}: expected {expected}, got {actual}.",
            key,
            context,
        )
        self.expected = expected
        self.actual = actual


class PredicateFailed(SchemaError):
    def __init__(self, key: str, context: str, detail: str):
        super().__init__(f"Config validation failed for key '{key}' in {context}: {detail}", key, context)
        self.detail = detail


class UnknownExpectedType(SchemaError):
    def __init__(self, key: str, context: str, expected: Any):
        super().__init__(
            f"Unknown expected type {expected!r} for configuration key '{key}' in {context}.",
            key,
            context,
        )
        self.expected = expected


class ModelMismatch(SchemaError):
    """A stored document does not fit the pydantic model it was loaded into."""

    def __init__(self, key: str, context: str, errors: list[dict[str, Any]]):
        first = errors[0] if errors else {}
        loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        msg = first.get("msg", "invalid document")
        super().__init__(
            f"Configuration {context} does not match model {key}: {loc}: {msg} ({len(errors)} error(s))",
            key,
            context,
        )
        self.errors = errors


__all__ = [
    "ConfigError",
    "StoreError",
    "DirectoryMissing",
    "FileMissing",
    "Unreadable",
    "LockFailed",
    "InvalidJSON",
    "EncodeError",
    "TempFileError",
    "RenameFailed",
    "InvalidName",
    "SchemaError",
    "MissingKey",
    "TypeMismatch",
    "PredicateFailed",
    "UnknownExpectedType",
    "ModelMismatch",
]
