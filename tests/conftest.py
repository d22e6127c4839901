from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for `import configstore` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


SETTINGS_ENV_VARS = ("CONFIG_DIR", "CONFIG_CREATE_MISSING", "CONFIG_FSYNC")


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    p = tmp_path / "config"
    p.mkdir()
    return p


@pytest.fixture
def store(config_dir: Path):
    from configstore.disk_store import DiskConfigStore

    return DiskConfigStore(config_dir, fsync=False)


@pytest.fixture
def sandbox_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_dir: Path) -> Path:
    """
    Point the default store at a temp config dir so tests never touch ./config,
    and run from tmp_path so no real local.env is picked up.
    """
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("CONFIG_FSYNC", "0")
    return config_dir
