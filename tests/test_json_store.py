from __future__ import annotations

import json
import math
import os
import stat
import time
from pathlib import Path

import pytest

from configstore import json_store
from configstore.errors import EncodeError, FileMissing, InvalidJSON, RenameFailed, TempFileError, Unreadable
from configstore.json_store import (
    MAX_DEPTH,
    atomic_write_json,
    decode_document,
    encode_document,
    nesting_depth_exceeds,
    read_json,
)


def _leftovers(directory: Path, keep: str) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name != keep)


def test_encode_is_pretty_with_literal_slashes(tmp_path):
    raw = encode_document({"url": "https://example.com/a/b", "name": "café"}, tmp_path / "x.json")
    text = raw.decode("utf-8")
    assert '"url": "https://example.com/a/b"' in text
    assert "\\/" not in text
    assert "café" in text
    assert text.startswith('{\n    "url"')
    assert text.endswith("}\n")


@pytest.mark.parametrize(
    "doc",
    [
        {"bad": {1, 2}},
        {"nan": math.nan},
        {"inf": math.inf},
        {"obj": object()},
    ],
)
def test_encode_rejects_unrepresentable_values(tmp_path, doc):
    with pytest.raises(EncodeError) as exc:
        encode_document(doc, tmp_path / "x.json")
    assert exc.value.path == tmp_path / "x.json"


def test_encode_rejects_cycles(tmp_path):
    doc: dict = {"a": {}}
    doc["a"]["self"] = doc
    with pytest.raises(EncodeError):
        encode_document(doc, tmp_path / "x.json")


def test_decode_reports_position(tmp_path):
    with pytest.raises(InvalidJSON) as exc:
        decode_document(b'{\n  "a": 1,\n}', tmp_path / "x.json")
    assert "line 3" in str(exc.value)
    assert isinstance(exc.value.__cause__, json.JSONDecodeError)


@pytest.mark.parametrize("raw", [b"[1, 2]", b'"text"', b"42", b"null"])
def test_decode_requires_top_level_object(tmp_path, raw):
    with pytest.raises(InvalidJSON):
        decode_document(raw, tmp_path / "x.json")


def test_decode_rejects_invalid_utf8(tmp_path):
    with pytest.raises(InvalidJSON):
        decode_document(b'{"a": "\xff"}', tmp_path / "x.json")


def test_depth_limit_is_inclusive(tmp_path):
    ok = '{"a": ' + "[" * (MAX_DEPTH - 1) + "]" * (MAX_DEPTH - 1) + "}"
    too_deep = '{"a": ' + "[" * MAX_DEPTH + "]" * MAX_DEPTH + "}"

    doc = decode_document(ok.encode(), tmp_path / "x.json")
    assert isinstance(doc["a"], list)
    with pytest.raises(InvalidJSON) as exc:
        decode_document(too_deep.encode(), tmp_path / "x.json")
    assert "nesting depth" in str(exc.value)


def test_depth_ignores_brackets_inside_strings():
    text = json.dumps({"s": "[" * (MAX_DEPTH + 10), "t": 'quote \\" {{{'})
    assert nesting_depth_exceeds(text) is False


def test_depth_scan_is_linear_for_unterminated_strings(tmp_path):
    raw = ('{"a": "' + '\\"' * 200_000).encode()
    started = time.perf_counter()
    with pytest.raises(InvalidJSON):
        decode_document(raw, tmp_path / "x.json")
    assert time.perf_counter() - started < 2.0


def test_depth_scan_handles_escaped_backslash_before_quote():
    # "a\\" closes the string; the brackets after it count.
    text = '{"s": "a\\\\", "t": ' + "[" * (MAX_DEPTH + 1) + "]" * (MAX_DEPTH + 1) + "}"
    assert nesting_depth_exceeds(text) is True


def test_read_json_missing_and_unreadable(tmp_path):
    with pytest.raises(FileMissing):
        read_json(tmp_path / "nope.json")

    directory = tmp_path / "dir.json"
    directory.mkdir()
    with pytest.raises(Unreadable):
        read_json(directory)


def test_atomic_write_creates_and_replaces(tmp_path):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": 1}, fsync=False)
    atomic_write_json(target, {"v": 2})
    assert json.loads(target.read_text(encoding="utf-8")) == {"v": 2}
    assert _leftovers(tmp_path, "app.json") == []


def test_interrupted_rename_leaves_target_unchanged(tmp_path, monkeypatch):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": "old"}, fsync=False)
    before = target.read_bytes()

    def boom(src, dst):
        raise OSError("simulated crash before rename")

    monkeypatch.setattr(json_store.os, "replace", boom)
    with pytest.raises(RenameFailed):
        atomic_write_json(target, {"v": "new"}, fsync=False)

    assert target.read_bytes() == before
    assert _leftovers(tmp_path, "app.json") == []


def test_keyboard_interrupt_before_rename_cleans_up(tmp_path, monkeypatch):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": "old"}, fsync=False)

    def interrupted(src, dst):
        raise KeyboardInterrupt

    monkeypatch.setattr(json_store.os, "replace", interrupted)
    with pytest.raises(KeyboardInterrupt):
        atomic_write_json(target, {"v": "new"}, fsync=False)

    assert json.loads(target.read_text(encoding="utf-8")) == {"v": "old"}
    assert _leftovers(tmp_path, "app.json") == []


def test_cleanup_failure_does_not_mask_original_error(tmp_path, monkeypatch):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": "old"}, fsync=False)

    def boom(src, dst):
        raise OSError("rename failed")

    def no_unlink(self, missing_ok=False):
        raise PermissionError("cannot unlink")

    monkeypatch.setattr(json_store.os, "replace", boom)
    monkeypatch.setattr(Path, "unlink", no_unlink)
    with pytest.raises(RenameFailed):
        atomic_write_json(target, {"v": "new"}, fsync=False)


def test_temp_write_failure_removes_partial_file(tmp_path, monkeypatch):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": "old"}, fsync=False)

    def bad_fsync(fd):
        raise OSError("disk full")

    monkeypatch.setattr(json_store.os, "fsync", bad_fsync)
    with pytest.raises(TempFileError):
        atomic_write_json(target, {"v": "new"}, fsync=True)

    assert json.loads(target.read_text(encoding="utf-8")) == {"v": "old"}
    assert _leftovers(tmp_path, "app.json") == []


def test_temp_file_creation_failure(tmp_path):
    with pytest.raises(TempFileError):
        atomic_write_json(tmp_path / "missing" / "app.json", {"v": 1}, fsync=False)


def test_encode_error_writes_nothing(tmp_path):
    target = tmp_path / "app.json"
    with pytest.raises(EncodeError):
        atomic_write_json(target, {"bad": {1}}, fsync=False)
    assert list(tmp_path.iterdir()) == []


def test_existing_permissions_are_kept(tmp_path):
    target = tmp_path / "app.json"
    atomic_write_json(target, {"v": 1}, fsync=False)
    os.chmod(target, 0o640)
    atomic_write_json(target, {"v": 2}, fsync=False)
    assert stat.S_IMODE(target.stat().st_mode) == 0o640
