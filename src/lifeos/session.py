"""The impure shell around the store: clock, ticker, audio and listeners."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable

from lifeos.audio import SoundBoard
from lifeos.store import AppState, SelectTask, Tick, ToggleHabit, apply
from lifeos.ticker import CancellationToken, Ticker

logger = logging.getLogger(__name__)

Listener = Callable[[AppState], None]


class Session:
    """Owns the current ``AppState`` and executes the side effects of commands.

    Commands may arrive from the caller's thread and from the ticker thread;
    both go through one lock so there is a single writer at a time.
    """

    def __init__(
        self,
        state: AppState,
        sounds: SoundBoard | None = None,
        clock: Callable[[], datetime] = datetime.now,
        tick_seconds: float | None = None,
    ):
        self._state = state
        self.sounds = sounds or SoundBoard(config=state.config)
        self.clock = clock
        interval = tick_seconds if tick_seconds is not None else state.config.tick_seconds
        self.ticker = Ticker(interval, self._tick)
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def today(self) -> str:
        return self.clock().strftime("%Y-%m-%d")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, command: object) -> AppState:
        return self._dispatch(self._stamp(command))

    def _dispatch(self, command: object, token: CancellationToken | None = None) -> AppState:
        with self._lock:
            if token is not None and token.cancelled:
                logger.debug("Dropping %s from a cancelled ticker", type(command).__name__)
                return self._state
            self._state, effects = apply(self._state, command)
            state = self._state
            self._sync_ticker(state)
        self.sounds.handle(effects)
        for listener in list(self._listeners):
            listener(state)
        return state

    def close(self) -> None:
        """Stop the countdown thread and any ambient loop."""
        self.ticker.cancel()
        self.sounds.silence()

    def _stamp(self, command: object) -> object:
        """Fill the clock-dependent fields a view left blank."""
        if isinstance(command, SelectTask) and not (command.today and command.now):
            now = self.clock()
            return replace(
                command,
                today=command.today or now.strftime("%Y-%m-%d"),
                now=command.now or now.strftime("%H:%M"),
            )
        if isinstance(command, ToggleHabit) and not command.day:
            return replace(command, day=self.today())
        return command

    def _sync_ticker(self, state: AppState) -> None:
        if state.timer.active:
            self.ticker.start()
        else:
            self.ticker.cancel()

    def _tick(self, token: CancellationToken) -> None:
        self._dispatch(Tick(), token)
