from __future__ import annotations

from .config import ConfigFile, get_config, load_config, save_config
from .disk_store import DiskConfigStore
from .errors import (
    ConfigError,
    DirectoryMissing,
    EncodeError,
    FileMissing,
    InvalidJSON,
    InvalidName,
    LockFailed,
    MissingKey,
    ModelMismatch,
    PredicateFailed,
    RenameFailed,
    SchemaError,
    StoreError,
    TempFileError,
    TypeMismatch,
    UnknownExpectedType,
    Unreadable,
)
from .interfaces import ConfigDocumentStore
from .models import load_model, save_model
from .settings import Settings, default_store, get_settings
from .validation import Nested, Predicate, Primitive, compile_spec, kind_of, normalize_kind, validate

__all__ = [
    "ConfigFile",
    "get_config",
    "load_config",
    "save_config",
    "DiskConfigStore",
    "ConfigDocumentStore",
    "load_model",
    "save_model",
    "Settings",
    "default_store",
    "get_settings",
    "Nested",
    "Predicate",
    "Primitive",
    "compile_spec",
    "kind_of",
    "normalize_kind",
    "validate",
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
