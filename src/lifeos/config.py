"""Application settings: timer durations, timeline geometry, audio cues."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LIFEOS_CONFIG"

RAIN_SOUND_URL = "https://assets.mixkit.co/active_storage/sfx/212/212-preview.mp3"
ALARM_SOUND_URL = "https://assets.mixkit.co/active_storage/sfx/2869/2869-preview.mp3"


@dataclass(frozen=True)
class LifeConfig:
    """Session-wide settings shared by the timer, timeline and views."""

    pomodoro_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    presets: tuple[int, ...] = (15, 25, 45, 60, 90)
    hour_height: int = 60  # pixels per timeline hour
    day_start_hour: int = 4
    day_end_hour: int = 24
    min_block_height: int = 40
    tick_seconds: float = 1.0
    ambient_url: str = RAIN_SOUND_URL
    alarm_url: str = ALARM_SOUND_URL
    ambient_volume: float = 0.5
    alarm_volume: float = 0.7
    sound_on: bool = False

    def to_dict(self) -> dict:
        return {
            "pomodoro_minutes": self.pomodoro_minutes,
            "short_break_minutes": self.short_break_minutes,
            "long_break_minutes": self.long_break_minutes,
            "presets": list(self.presets),
            "hour_height": self.hour_height,
            "day_start_hour": self.day_start_hour,
            "day_end_hour": self.day_end_hour,
            "min_block_height": self.min_block_height,
            "tick_seconds": self.tick_seconds,
            "ambient_url": self.ambient_url,
            "alarm_url": self.alarm_url,
            "ambient_volume": self.ambient_volume,
            "alarm_volume": self.alarm_volume,
            "sound_on": self.sound_on,
        }

    @classmethod
    def from_dict(cls, d: dict) -> LifeConfig:
        unknown = set(d) - set(cls().to_dict())
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        cfg = cls(
            pomodoro_minutes=d.get("pomodoro_minutes", 25),
            short_break_minutes=d.get("short_break_minutes", 5),
            long_break_minutes=d.get("long_break_minutes", 15),
            presets=tuple(d.get("presets", (15, 25, 45, 60, 90))),
            hour_height=d.get("hour_height", 60),
            day_start_hour=d.get("day_start_hour", 4),
            day_end_hour=d.get("day_end_hour", 24),
            min_block_height=d.get("min_block_height", 40),
            tick_seconds=d.get("tick_seconds", 1.0),
            ambient_url=d.get("ambient_url", RAIN_SOUND_URL),
            alarm_url=d.get("alarm_url", ALARM_SOUND_URL),
            ambient_volume=d.get("ambient_volume", 0.5),
            alarm_volume=d.get("alarm_volume", 0.7),
            sound_on=d.get("sound_on", False),
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """Raise ValueError if durations or the timeline window are unusable."""
        for name in ("pomodoro_minutes", "short_break_minutes", "long_break_minutes"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if any(m <= 0 for m in self.presets):
            raise ValueError("presets must be positive minute counts")
        if self.hour_height <= 0:
            raise ValueError("hour_height must be positive")
        if not 0 <= self.day_start_hour < self.day_end_hour <= 24:
            raise ValueError("timeline window must satisfy 0 <= start < end <= 24")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")


DEFAULT_CONFIG = LifeConfig()


def load_config(path: str | Path | None = None) -> LifeConfig:
    """Load settings from *path*, or from $LIFEOS_CONFIG, or the defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return DEFAULT_CONFIG

    config_path = Path(path)
    if not config_path.exists():
        raise ValueError(f"Config file {config_path} does not exist")
    try:
        raw = json.loads(config_path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Config file {config_path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")

    logger.debug("Loaded config from %s", config_path)
    return LifeConfig.from_dict(raw)
