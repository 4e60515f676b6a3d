import logging
from pathlib import Path

import pytest

from tracker.config import (
    DEFAULT_DATA_DIR, Settings, load_settings, set_logging_level, setup_logging,
)


def test_load_settings_defaults(monkeypatch):
    monkeypatch.delenv("EXPENSE_TRACKER_DATA_DIR", raising=False)
    monkeypatch.delenv("EXPENSE_TRACKER_LOG_LEVEL", raising=False)
    settings = load_settings()
    assert settings == Settings(data_dir=DEFAULT_DATA_DIR.resolve(), log_level=logging.INFO)


def test_load_settings_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("EXPENSE_TRACKER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("EXPENSE_TRACKER_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.data_dir == Path(tmp_path).resolve()
    assert settings.log_level == logging.DEBUG


def test_load_settings_bad_level(monkeypatch):
    monkeypatch.setenv("EXPENSE_TRACKER_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        load_settings()


def test_set_logging_level_validates():
    with pytest.raises(ValueError):
        set_logging_level("INFO")
    with pytest.raises(ValueError):
        set_logging_level(7)


def test_setup_logging_installs_one_handler():
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging(logging.WARNING)
        setup_logging(logging.WARNING)
        ours = [h for h in root.handlers if getattr(h, "_tracker_handler", False)]
        assert len(ours) == 1
        assert root.level == logging.WARNING
    finally:
        for h in [h for h in root.handlers if getattr(h, "_tracker_handler", False)]:
            root.removeHandler(h)
        root.setLevel(previous)
