# tests/test_settings.py
import pytest
from pydantic import ValidationError

from repertoire_trainer.config.settings import DepthPreset, LoggingSettings, PracticeSettings, Settings
from repertoire_trainer.types import PracticeMode


def test_practice_defaults():
    practice = PracticeSettings()

    assert practice.reply_delay_s == 0.15
    assert practice.first_move_delay_s == pytest.approx(0.45)
    assert practice.completion_delay_s == 1.0
    assert practice.default_max_depth == 10
    assert practice.default_mode is PracticeMode.RANDOM
    assert [p.value for p in practice.depth_presets] == [6, 10, 14, 0]


def test_duplicate_depth_presets_are_rejected():
    with pytest.raises(ValidationError):
        PracticeSettings(depth_presets=[DepthPreset(label="a", value=6), DepthPreset(label="b", value=6)])


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        LoggingSettings(level="LOUD")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REPERTOIRE_TRAINER_PRACTICE__REPLY_DELAY_S", "0.3")
    monkeypatch.setenv("REPERTOIRE_TRAINER_PRACTICE__DEFAULT_MODE", "sequential")

    settings = Settings()

    assert settings.practice.reply_delay_s == 0.3
    assert settings.practice.default_mode is PracticeMode.SEQUENTIAL
