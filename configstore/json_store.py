from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from .errors import EncodeError, FileMissing, InvalidJSON, RenameFailed, TempFileError, Unreadable
from .locks import GLOBAL_PATH_LOCKS, exclusive_lock, shared_lock

logger = logging.getLogger(__name__)

MAX_DEPTH = 512
DEFAULT_INDENT = 4


def nesting_depth_exceeds(text: str, limit: int = MAX_DEPTH) -> bool:
    """
    Return True when arrays/objects in ``text`` nest deeper than ``limit``.

    Single pass; brackets inside strings are not counted and an unterminated
    string just runs to the end of the text.
    """
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[" or ch == "{":
            depth += 1
            if depth > limit:
                return True
        elif ch == "]" or ch == "}":
            depth -= 1
    return False


def encode_document(doc: Any, path: Path, *, indent: int = DEFAULT_INDENT) -> bytes:
    """
    Pretty-printed UTF-8 JSON with a trailing newline.

    Forward slashes are written literally; NaN/Infinity are rejected so the
    output stays valid JSON.
    """
    try:
        text = json.dumps(doc, indent=indent, ensure_ascii=False, allow_nan=False)
        return (text + "\n").encode("utf-8")
    except (TypeError, ValueError, RecursionError) as e:
        # ValueError also covers circular references and lone surrogates.
        raise EncodeError(
            f"Failed to encode configuration data for {path} into JSON. Error: {e}. "
            "Make sure that the configuration contains only JSON-compatible values.",
            path,
        ) from e


def decode_document(raw: bytes, path: Path) -> dict[str, Any]:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidJSON(f"Invalid JSON in configuration file at {path}: not valid UTF-8 ({e.reason}).", path) from e

    if nesting_depth_exceeds(text):
        raise InvalidJSON(
            f"Invalid JSON in configuration file at {path}: maximum nesting depth of {MAX_DEPTH} exceeded.",
            path,
        )

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidJSON(
            f"Invalid JSON in configuration file at {path}: {e.msg} (line {e.lineno}, column {e.colno}). "
            "Please verify the file format.",
            path,
        ) from e
    except RecursionError as e:
        raise InvalidJSON(f"Invalid JSON in configuration file at {path}: structure too deep.", path) from e

    if not isinstance(doc, dict):
        raise InvalidJSON(
            f"Invalid JSON in configuration file at {path}: expected an object at the top level, "
            f"got {type(doc).__name__}.",
            path,
        )
    return doc


def read_locked(path: Path) -> bytes:
    """
    Read the whole file while holding a shared lock on it.
    """
    try:
        handle = path.open("rb")
    except FileNotFoundError as e:
        raise FileMissing(f"Configuration file at {path} does not exist.", path) from e
    except OSError as e:
        raise Unreadable(
            f"Unable to open configuration file at {path} for reading. Please verify file permissions.", path
        ) from e

    with handle, shared_lock(handle, path):
        try:
            return handle.read()
        except OSError as e:
            raise Unreadable(f"Unable to read the content from configuration file at {path}.", path) from e


def read_json(path: Path) -> dict[str, Any]:
    return decode_document(read_locked(path), path)


def discard_temp_file(tmp_path: Path) -> None:
    """Best-effort removal; never raises."""
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("CONFIG SAVE: failed to remove temp file %s: %r", tmp_path, e)


def _copy_mode(source: Path, dest: Path) -> None:
    try:
        mode = stat.S_IMODE(source.stat().st_mode)
    except FileNotFoundError:
        return
    os.chmod(dest, mode)


def write_temp_file(target: Path, payload: bytes, *, fsync: bool = True) -> Path:
    """
    Write ``payload`` to a fresh temp file in the target's directory so the
    following rename never crosses filesystems.
    """
    directory = target.parent
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise TempFileError(
            f"Failed to create a temporary file in directory {directory}. "
            "Please check permissions on the target directory.",
            directory,
        ) from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            if fsync:
                os.fsync(f.fileno())
        _copy_mode(target, tmp_path)
    except OSError as e:
        discard_temp_file(tmp_path)
        raise TempFileError(
            f"Failed to write configuration data to temporary file at {tmp_path}. "
            "Verify disk space and file permissions.",
            tmp_path,
        ) from e
    except BaseException:
        discard_temp_file(tmp_path)
        raise
    return tmp_path


def _fsync_dir(directory: Path) -> None:
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError as e:
        logger.debug("CONFIG SAVE: cannot open %s to sync: %r", directory, e)
        return
    try:
        os.fsync(fd)
    except OSError as e:
        logger.debug("CONFIG SAVE: fsync on %s not supported: %r", directory, e)
    finally:
        os.close(fd)


def replace_file(tmp_path: Path, target: Path, *, fsync: bool = True) -> None:
    try:
        os.replace(tmp_path, target)
    except OSError as e:
        raise RenameFailed(
            f"Atomic replacement failed. Unable to rename temporary file {tmp_path} to configuration file {target}. "
            "Ensure that both files are on the same filesystem and that you have the needed permissions.",
            target,
        ) from e
    if fsync:
        _fsync_dir(target.parent)


def atomic_write_json(path: Path, doc: Any, *, indent: int = DEFAULT_INDENT, fsync: bool = True) -> None:
    """
    Atomically write JSON to disk: temp file in the same directory, exclusive
    lock on the current target (if any), then rename over it.

    On failure the target is untouched and the temp file is removed.
    """
    payload = encode_document(doc, path, indent=indent)
    tmp_path = write_temp_file(path, payload, fsync=fsync)
    try:
        with GLOBAL_PATH_LOCKS.lock_for(path), exclusive_lock(path):
            replace_file(tmp_path, path, fsync=fsync)
    except BaseException:
        discard_temp_file(tmp_path)
        raise
