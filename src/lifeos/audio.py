"""Best-effort audio cues for the focus timer."""

from __future__ import annotations

import logging
from typing import Protocol

from rich.console import Console

from lifeos.config import DEFAULT_CONFIG, LifeConfig
from lifeos.timer import Ambient, Effect, PlayAlarm

logger = logging.getLogger(__name__)


class AudioPlayer(Protocol):
    def play(self, url: str, loop: bool = False, volume: float = 1.0) -> None: ...

    def stop(self, url: str) -> None: ...


class SilentPlayer:
    """Discards every cue."""

    def play(self, url: str, loop: bool = False, volume: float = 1.0) -> None:
        pass

    def stop(self, url: str) -> None:
        pass


class TerminalPlayer:
    """Rings the terminal bell for one-shot cues; loops are not audible."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def play(self, url: str, loop: bool = False, volume: float = 1.0) -> None:
        if not loop:
            self.console.bell()

    def stop(self, url: str) -> None:
        pass


class SoundBoard:
    """Runs audio effects through a player, swallowing any playback failure."""

    def __init__(self, player: AudioPlayer | None = None, config: LifeConfig = DEFAULT_CONFIG):
        self.player = player or SilentPlayer()
        self.config = config
        self.ambient_playing = False

    def handle(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, PlayAlarm):
                self.alarm()
            elif isinstance(effect, Ambient):
                self.ambient(effect.playing)

    def alarm(self) -> None:
        try:
            self.player.play(self.config.alarm_url, loop=False, volume=self.config.alarm_volume)
        except Exception as e:
            logger.warning("Alarm playback failed: %s", e)

    def ambient(self, playing: bool) -> None:
        try:
            if playing:
                self.player.play(self.config.ambient_url, loop=True, volume=self.config.ambient_volume)
            else:
                self.player.stop(self.config.ambient_url)
        except Exception as e:
            logger.warning("Ambient playback failed: %s", e)
            return
        self.ambient_playing = playing

    def silence(self) -> None:
        if self.ambient_playing:
            self.ambient(False)
