# tests/test_settings.py

from settings import DIFFICULTIES, BoardConfig, TutorMode, TutorSettings, node_budget, sanitize_depth


def test_sanitize_clamps_into_supported_range():
    assert BoardConfig.sanitize(3, 40, 5000) == BoardConfig(6, 30, 179)
    assert BoardConfig.sanitize(9, 9, 0) == BoardConfig(9, 9, 1)


def test_sanitize_accepts_typed_text():
    assert BoardConfig.sanitize("abc", "9", 10.6) == BoardConfig(6, 9, 11)
    assert BoardConfig.sanitize(None, "inf", "12") == BoardConfig(6, 6, 12)


def test_difficulty_presets():
    assert DIFFICULTIES["beginner"] == BoardConfig(9, 9, 10)
    assert DIFFICULTIES["intermediate"] == BoardConfig(16, 16, 40)
    assert DIFFICULTIES["expert"] == BoardConfig(16, 30, 99)


def test_tutor_depth_is_clamped():
    assert TutorSettings(depth=9).depth == 5
    assert TutorSettings(depth=0).depth == 1
    assert TutorSettings().depth == 2


def test_only_classic_mode_allows_flags():
    assert TutorMode.CLASSIC.allows_flags
    assert not TutorMode.NO_FLAG.allows_flags
    assert not TutorMode.OFF.allows_flags
    assert TutorMode("no-flag") is TutorMode.NO_FLAG


def test_depth_from_typed_text():
    assert sanitize_depth("4") == 4
    assert sanitize_depth("deep") == 1
    assert sanitize_depth("") == 1
    assert sanitize_depth(12) == 5
    assert TutorSettings(depth="3").depth == 3


def test_node_budget_scales_with_board_area():
    assert node_budget(6, 6) == 6000
    assert node_budget(9, 9) == 3703
    assert node_budget(16, 30) == 625
    assert node_budget(30, 30) == 333
