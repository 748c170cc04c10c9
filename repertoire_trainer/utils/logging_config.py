# repertoire_trainer/utils/logging_config.py
"""
Structured logging for the trainer.

structlog events are handed to the standard library so that records from
python-chess and asyncio share the same handlers and rendering. The terminal
drill prints the board on stdout, so console logs go to stderr.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

import structlog
from structlog.types import Processor

from repertoire_trainer.config.settings import LoggingSettings


def _pre_chain() -> List[Processor]:
    """Processors applied to every record, structlog-native or foreign."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=_pre_chain(), processor=renderer)


def _console_handler(as_json: bool) -> logging.Handler:
    renderer = structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(renderer))
    return handler


def _file_handler(log_file: Union[str, Path]) -> logging.Handler:
    """Log files always hold one JSON object per line."""
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def setup_logging(settings: LoggingSettings, level_override: Optional[str] = None) -> None:
    """
    Routes structlog through stdlib logging according to `settings`.

    Args:
        settings: Level, console format and optional log file.
        level_override: A level given on the command line; wins over `settings.level`.
    """
    structlog.configure(
        processors=_pre_chain() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers = [_console_handler(settings.json_console)]
    if settings.log_file:
        handlers.append(_file_handler(settings.log_file))

    level = (level_override or settings.level).upper()
    logging.basicConfig(handlers=handlers, level=level, force=True)
