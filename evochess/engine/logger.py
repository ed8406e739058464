"""Engine logging utilities with channel toggles."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

DEFAULT_CHANNELS = {
    "evolution": True,
    "costs": False,
    "trees": False,
    "persistence": True,
    "combinations": True,
}


@dataclass
class LoggerConfig:
    """Configuration for runtime logging."""

    level: int = logging.INFO
    channels: Dict[str, bool] = None

    def __post_init__(self) -> None:
        if self.channels is None:
            self.channels = DEFAULT_CHANNELS.copy()

    @classmethod
    def from_settings(cls, settings_path: Path) -> "LoggerConfig":
        if not settings_path.exists():
            return cls(level=logging.INFO, channels=DEFAULT_CHANNELS.copy())
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls(level=logging.INFO, channels=DEFAULT_CHANNELS.copy())
        level_name = str(data.get("logLevel", "INFO")).upper()
        level = getattr(logging, level_name, logging.INFO)
        channels = DEFAULT_CHANNELS.copy()
        channels.update(data.get("logChannels", {}))
        return cls(level=level, channels=channels)


ROOT_LOGGER = "evochess"


def channel_logger_name(channel: str) -> str:
    return f"{ROOT_LOGGER}.{channel}"


class ChannelLogger:
    """Wrapper that only emits records when the channel is enabled."""

    def __init__(self, name: str, logger: logging.Logger, enabled: bool) -> None:
        self._logger = logger
        self._enabled = enabled
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def is_active(self, level: int = logging.DEBUG) -> bool:
        """True when a record at ``level`` would actually be emitted."""

        return self._enabled and self._logger.isEnabledFor(level)

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        if self._enabled:
            self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


class GameLogger:
    """Central logging registry for the engine."""

    def __init__(self, config: Optional[LoggerConfig] = None) -> None:
        config = config or LoggerConfig()
        logging.basicConfig(
            level=config.level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            stream=sys.stdout,
        )
        self._root = logging.getLogger(ROOT_LOGGER)
        self._channels: Dict[str, ChannelLogger] = {}
        self.apply(config)

    def apply(self, config: LoggerConfig) -> None:
        """Apply a level and channel toggles; channels not named keep their state."""

        self._root.setLevel(config.level)
        for name, enabled in config.channels.items():
            self.set_enabled(name, bool(enabled))

    def reload(self, settings_path: Path) -> None:
        self.apply(LoggerConfig.from_settings(settings_path))

    def channel(self, name: str) -> ChannelLogger:
        if name not in self._channels:
            # Unknown channels start disabled until explicitly enabled.
            self._channels[name] = ChannelLogger(
                name,
                logging.getLogger(channel_logger_name(name)),
                False,
            )
        return self._channels[name]

    def set_enabled(self, name: str, enabled: bool) -> None:
        self.channel(name).enabled = enabled

    def channels(self) -> Iterable[str]:
        return self._channels.keys()


def init_logger(settings_path: Optional[Path] = None) -> GameLogger:
    """Initialise a logger from settings.json."""

    settings_path = settings_path or Path("settings.json")
    config = LoggerConfig.from_settings(settings_path)
    return GameLogger(config)


__all__ = [
    "ChannelLogger",
    "DEFAULT_CHANNELS",
    "GameLogger",
    "LoggerConfig",
    "ROOT_LOGGER",
    "channel_logger_name",
    "init_logger",
]
