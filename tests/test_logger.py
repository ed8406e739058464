"""Tests for channel logging configuration."""
from __future__ import annotations

import json
import logging
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evochess.engine.clock import MS_PER_HOUR, ms_to_hours, now_ms
from evochess.engine.logger import (
    DEFAULT_CHANNELS,
    ChannelLogger,
    GameLogger,
    LoggerConfig,
    init_logger,
)


def test_config_defaults_when_settings_missing(tmp_path) -> None:
    config = LoggerConfig.from_settings(tmp_path / "settings.json")
    assert config.level == logging.INFO
    assert config.channels == DEFAULT_CHANNELS


def test_config_defaults_on_broken_json(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{")
    config = LoggerConfig.from_settings(path)
    assert config.channels == DEFAULT_CHANNELS


def test_config_reads_level_and_channels(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logLevel": "debug", "logChannels": {"costs": True, "combinations": False}}))
    config = LoggerConfig.from_settings(path)
    assert config.level == logging.DEBUG
    assert config.channels["costs"] is True
    assert config.channels["combinations"] is False
    assert config.channels["evolution"] is True

    logger = init_logger(path)
    assert logger.channel("costs").enabled
    assert not logger.channel("combinations").enabled


def test_unknown_channels_start_disabled() -> None:
    logger = GameLogger(LoggerConfig(level=logging.WARNING))
    channel = logger.channel("replay")
    assert isinstance(channel, ChannelLogger)
    assert channel.name == "replay"
    assert not channel.enabled
    logger.set_enabled("replay", True)
    assert logger.channel("replay").enabled
    assert "replay" in logger.channels()


def test_disabled_channel_emits_nothing(caplog) -> None:
    channels = {name: False for name in DEFAULT_CHANNELS}
    logger = GameLogger(LoggerConfig(level=logging.DEBUG, channels=channels))
    caplog.set_level(logging.DEBUG, logger="evochess")
    logger.channel("evolution").warning("hidden")
    logger.set_enabled("evolution", True)
    logger.channel("evolution").warning("shown")
    messages = [record.getMessage() for record in caplog.records if record.name == "evochess.evolution"]
    assert messages == ["shown"]


def test_clock_helpers() -> None:
    assert isinstance(now_ms(), int)
    assert ms_to_hours(MS_PER_HOUR * 2) == 2.0
    assert ms_to_hours(-10) == 0.0


def test_exception_logs_traceback_on_enabled_channel(caplog) -> None:
    logger = GameLogger(LoggerConfig(level=logging.DEBUG))
    caplog.set_level(logging.DEBUG, logger="evochess")
    try:
        raise ValueError("broken save")
    except ValueError:
        logger.channel("persistence").exception("Load failed")
        logger.channel("costs").exception("Muted")
    records = [record for record in caplog.records if record.name.startswith("evochess.")]
    assert [record.getMessage() for record in records] == ["Load failed"]
    assert records[0].levelno == logging.ERROR
    assert records[0].exc_info is not None


def test_reload_applies_new_toggles(tmp_path) -> None:
    logger = GameLogger(LoggerConfig(level=logging.INFO))
    assert not logger.channel("costs").enabled
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logLevel": "WARNING", "logChannels": {"costs": True, "evolution": False}}))
    logger.reload(path)
    assert logger.channel("costs").enabled
    assert not logger.channel("evolution").enabled
    assert logger.channel("persistence").enabled
    assert not logger.channel("costs").is_active(logging.INFO)
    assert logger.channel("costs").is_active(logging.WARNING)
