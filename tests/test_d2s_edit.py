import pytest

pytest.importorskip("tkinter")
pytest.importorskip("ttkwidgets")

import d2s  # noqa: E402
import d2s_edit  # noqa: E402
import policies  # noqa: E402


def test_presets_reproduce_profiles(blank_save):
    for name, policy in policies.POLICIES.items():
        custom = d2s_edit.build_policy(list(d2s_edit.PRESETS[name]))
        assert d2s.unlock(blank_save, custom) == d2s.unlock(blank_save, policy)


def test_step_applied_reflects_save(blank_save):
    steps = list(d2s_edit.step_edits())
    assert not any(d2s_edit.step_applied(blank_save, step) for step in steps)

    patched = d2s.unlock(blank_save, d2s_edit.build_policy(steps))
    assert all(d2s_edit.step_applied(patched, step) for step in steps)


def test_minimal_preset_leaves_quest_table_unapplied(blank_save):
    patched = d2s.unlock(blank_save, d2s_edit.build_policy(list(d2s_edit.PRESETS["minimal"])))
    assert d2s_edit.step_applied(patched, "difficulty")
    assert d2s_edit.step_applied(patched, "waypoint:HELL")
    assert not d2s_edit.step_applied(patched, "quest_table")
    assert not d2s_edit.step_applied(patched, "act2:NORMAL")
