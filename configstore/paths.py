from __future__ import annotations

from pathlib import Path

from .errors import DirectoryMissing, InvalidName

CONFIG_SUFFIX = ".json"


def project_root() -> Path:
    # configstore/paths.py -> configstore -> project root
    return Path(__file__).resolve().parents[1]


def default_config_dir() -> Path:
    return project_root() / "config"


def ensure_dir(path: Path) -> Path:
    path.mkdir(mode=0o755, parents=True, exist_ok=True)
    return path


def require_dir(path: Path) -> Path:
    if not path.is_dir():
        raise DirectoryMissing(f"Configuration directory at {path} does not exist.", path)
    return path


def config_file_path(config_dir: Path, name: str) -> Path:
    """
    Map a config name to ``<config_dir>/<name>.json``.

    Names are plain file stems: no separators, no leading dot, not empty.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidName(f"Configuration name must be a non-empty string, got {name!r}.", config_dir)
    if "/" in name or "\\" in name or "\x00" in name or name.startswith("."):
        raise InvalidName(
            f"Configuration name {name!r} must not contain path separators or start with '.'.",
            config_dir,
        )
    return config_dir / f"{name}{CONFIG_SUFFIX}"
