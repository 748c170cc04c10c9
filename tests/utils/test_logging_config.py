# tests/utils/test_logging_config.py
import json
import logging

import pytest
import structlog

from repertoire_trainer.config.settings import LoggingSettings
from repertoire_trainer.utils.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_log_file_receives_json_lines(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "trainer.jsonl"
    setup_logging(LoggingSettings(level="INFO", log_file=str(log_file)))

    structlog.get_logger("trainer.test").info("Line completed.", plies=4)
    structlog.get_logger("trainer.test").debug("Filtered out.")

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert len(records) == 1
    assert records[0]["event"] == "Line completed."
    assert records[0]["plies"] == 4
    assert records[0]["level"] == "info"


def test_level_override_wins(restore_logging):
    setup_logging(LoggingSettings(level="WARNING"), level_override="debug")

    assert logging.getLogger().level == logging.DEBUG
