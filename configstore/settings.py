from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .disk_store import DiskConfigStore
from .paths import default_config_dir


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Where <name>.json files live
    config_dir: Path

    # Create the directory and an empty {} document on first load (default: strict)
    create_missing: bool

    # fsync temp files and the directory on save
    fsync: bool


def get_settings(env_file: str | None = "local.env") -> Settings:
    if env_file:
        load_dotenv(env_file)

    raw_dir = os.getenv("CONFIG_DIR", "").strip()
    config_dir = Path(raw_dir).expanduser() if raw_dir else default_config_dir()

    return Settings(
        config_dir=config_dir,
        create_missing=_env_bool("CONFIG_CREATE_MISSING", False),
        fsync=_env_bool("CONFIG_FSYNC", True),
    )


def default_store(settings: Settings | None = None) -> DiskConfigStore:
    s = settings or get_settings()
    return DiskConfigStore(s.config_dir, create_missing=s.create_missing, fsync=s.fsync)
