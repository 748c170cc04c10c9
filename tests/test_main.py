# tests/test_main.py
import pytest

from main import parse_args, settings_for_run
from repertoire_trainer.config.settings import PracticeSettings, Settings, StoreSettings
from repertoire_trainer.types import PracticeMode


@pytest.fixture
def base_settings(tmp_path):
    return Settings(
        practice=PracticeSettings(default_max_depth=10),
        store=StoreSettings(json_filepath=str(tmp_path / "openings.json")),
    )


def test_depth_must_be_a_preset():
    assert parse_args(["--depth", "14"]).depth == 14
    assert parse_args(["--depth", "0"]).depth == 0
    with pytest.raises(SystemExit):
        parse_args(["--depth", "7"])


def test_run_settings_do_not_touch_base(base_settings, tmp_path):
    args = parse_args(["Scotch_Game", "--mode", "sequential", "--depth", "6", "--store", str(tmp_path / "other.json")])

    run_settings = settings_for_run(args, base=base_settings)

    assert run_settings.practice.default_mode is PracticeMode.SEQUENTIAL
    assert run_settings.practice.default_max_depth == 6
    assert run_settings.store.json_filepath == str(tmp_path / "other.json")
    assert base_settings.practice.default_mode is PracticeMode.RANDOM
    assert base_settings.practice.default_max_depth == 10
    assert base_settings.store.json_filepath == str(tmp_path / "openings.json")


def test_run_settings_keep_store_without_override(base_settings):
    run_settings = settings_for_run(parse_args([]), base=base_settings)

    assert run_settings.store is base_settings.store
