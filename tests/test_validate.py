import pytest

import d2s
from conftest import make_save


def test_blank_save_is_valid(blank_save):
    assert d2s.is_valid_save(blank_save) is True
    assert d2s.is_valid_save(bytes(blank_save)) is True


@pytest.mark.parametrize("length", [0, 4, 5, 764])
def test_short_buffers_are_rejected(length):
    data = make_save(max(length, 5))[:length]
    snapshot = bytes(data)
    assert d2s.is_valid_save(data) is False
    assert bytes(data) == snapshot


@pytest.mark.parametrize("index", [0, 1, 2, 3])
def test_wrong_magic_is_rejected(blank_save, index):
    blank_save[index] ^= 0xFF
    assert d2s.is_valid_save(blank_save) is False


def test_version_boundary():
    assert d2s.is_valid_save(make_save(version=0x60)) is False
    assert d2s.is_valid_save(make_save(version=0x61)) is True
    assert d2s.is_valid_save(make_save(version=0x62)) is True


def test_none_is_rejected():
    assert d2s.is_valid_save(None) is False
