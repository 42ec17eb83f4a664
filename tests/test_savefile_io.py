from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

import d2s
import policies
import savefile_io


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        savefile_io.load(tmp_path / "missing.d2s")


def test_backup_name_format(tmp_path: Path):
    when = datetime(2024, 5, 6, 7, 8, 9, 123456)
    name = savefile_io.backup_name(tmp_path / "Hero.d2s", when)
    assert name == tmp_path / "Hero.d2s.20240506070809123.bak"


def test_backup_is_byte_identical_and_keeps_source(save_file: Path):
    original = save_file.read_bytes()
    target = savefile_io.backup(original, save_file)
    assert target != save_file
    assert target.parent == save_file.parent
    assert target.read_bytes() == original
    assert save_file.read_bytes() == original


def test_backup_replaces_same_named_file(save_file: Path):
    when = datetime(2024, 1, 1, 0, 0, 0, 0)
    stale = savefile_io.backup_name(save_file, when)
    stale.write_bytes(b"stale backup contents")
    target = savefile_io.backup(save_file.read_bytes(), save_file, when)
    assert target == stale
    assert target.read_bytes() == save_file.read_bytes()


def test_save_truncates(tmp_path: Path):
    path = tmp_path / "out.d2s"
    path.write_bytes(b"x" * 100)
    savefile_io.save(b"abc", path)
    assert path.read_bytes() == b"abc"


def test_patch_file(save_file: Path):
    original = save_file.read_bytes()
    outcome = savefile_io.patch_file(save_file, policies.MINIMAL_UNLOCK)

    patched = save_file.read_bytes()
    assert outcome.path == save_file
    assert outcome.policy == "minimal"
    assert outcome.backup_path is not None
    assert outcome.backup_path.read_bytes() == original
    assert patched[0x25] == 0x08
    assert d2s.has_valid_checksum(patched)
    assert outcome.checksum == d2s.stored_checksum(patched)


def test_patch_file_without_backup(save_file: Path):
    outcome = savefile_io.patch_file(save_file, policies.FULL_UNLOCK, make_backup=False)
    assert outcome.backup_path is None
    assert list(save_file.parent.glob("*.bak")) == []


def test_patch_file_rejects_unknown_files(tmp_path: Path):
    path = tmp_path / "notes.d2s"
    path.write_bytes(b"hello" * 200)
    with pytest.raises(d2s.UnrecognizedFormatError):
        savefile_io.patch_file(path, policies.MINIMAL_UNLOCK)
    assert path.read_bytes() == b"hello" * 200
    assert list(tmp_path.glob("*.bak")) == []
