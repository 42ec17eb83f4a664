import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path for test imports without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import d2s  # noqa: E402


def make_save(length: int = d2s.HEADER_LENGTH, version: int = 0x61) -> bytearray:
    data = bytearray(length)
    data[0:4] = d2s.SAVE_MAGIC
    data[d2s.VERSION_OFFSET] = version
    return data


@pytest.fixture
def blank_save() -> bytearray:
    return make_save()


@pytest.fixture
def save_file(tmp_path: Path) -> Path:
    data = make_save()
    d2s.recompute_checksum(data)
    path = tmp_path / "Sorceress.d2s"
    path.write_bytes(bytes(data))
    return path
