"""Configuration for the expense tracker.

Document keys, defaults and logging setup live here. The core modules take
everything they need as arguments; only the app shell calls
:func:`load_settings`, which honours environment variable overrides.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from tracker.domain import DEFAULT_CATEGORIES

__all__ = [
    'EXPENSES_KEY', 'CATEGORIES_KEY', 'DEFAULT_CATEGORIES', 'LOG_FORMAT', 'LOG_DATEFMT',
    'Settings', 'load_settings', 'set_logging_level', 'setup_logging',
]

EXPENSES_KEY = "expenses"
CATEGORIES_KEY = "categories"

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"

LOG_LEVEL = logging.INFO
LOG_FORMAT = '[%(asctime)s] <%(module)s> %(levelname)s:  %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

_LEVELS = (
    logging.DEBUG,
    logging.INFO,
    logging.WARNING,
    logging.ERROR,
    logging.CRITICAL,
)


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: int = LOG_LEVEL


def _parse_level(value: str | None) -> int:
    if not value:
        return LOG_LEVEL
    if value.isdigit():
        level = int(value)
    else:
        level = logging.getLevelName(value.upper())
    if level not in _LEVELS:
        raise ValueError(f"Invalid logging level: {value!r}")
    return level


def load_settings() -> Settings:
    """Read settings from ``EXPENSE_TRACKER_DATA_DIR`` and ``EXPENSE_TRACKER_LOG_LEVEL``."""
    data_dir = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", DEFAULT_DATA_DIR)).expanduser().resolve()
    return Settings(
        data_dir=data_dir,
        log_level=_parse_level(os.getenv("EXPENSE_TRACKER_LOG_LEVEL")),
    )


def set_logging_level(level: int) -> None:
    """Set the root logger level.

    Args:
        level (int): One of the standard logging levels.
    """
    if not isinstance(level, int):
        raise ValueError("Logging level must be an integer.")
    if level not in _LEVELS:
        raise ValueError('Invalid logging level. Use one of the standard logging levels, e.g., logging.DEBUG.')

    logging.getLogger().setLevel(level)


def setup_logging(level: int = LOG_LEVEL) -> None:
    """Install a stream handler on the root logger, once."""
    root_logger = logging.getLogger()
    if not any(getattr(h, '_tracker_handler', False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        handler._tracker_handler = True
        root_logger.addHandler(handler)
    set_logging_level(level)
