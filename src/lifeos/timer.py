"""Pomodoro focus timer as a pure state machine.

Every transition takes the current ``TimerState`` and returns the next one
together with a list of effects. Effects that touch the task collection
(``CreditMinutes``, ``MarkDone``) are applied by the store; audio effects
(``PlayAlarm``, ``Ambient``) are executed best-effort by the session.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from lifeos.config import DEFAULT_CONFIG, LifeConfig
from lifeos.models import Task, TimerMode

MODE_CYCLE: dict[TimerMode, TimerMode] = {
    TimerMode.POMODORO: TimerMode.SHORT_BREAK,
    TimerMode.SHORT_BREAK: TimerMode.LONG_BREAK,
    TimerMode.LONG_BREAK: TimerMode.POMODORO,
}


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlayAlarm:
    """One-shot alarm at natural completion."""


@dataclass(frozen=True)
class Ambient:
    """Start or stop the ambient loop."""

    playing: bool


@dataclass(frozen=True)
class CreditMinutes:
    task_id: str
    minutes: int


@dataclass(frozen=True)
class MarkDone:
    task_id: str


Effect = PlayAlarm | Ambient | CreditMinutes | MarkDone


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PendingSelection:
    """A task switch held until the user acknowledges an overdue fixed task."""

    task_id: str
    overdue_task_id: str


@dataclass(frozen=True)
class TimerState:
    mode: TimerMode = TimerMode.POMODORO
    initial_time: int = DEFAULT_CONFIG.pomodoro_minutes * 60  # seconds
    time_left: int = DEFAULT_CONFIG.pomodoro_minutes * 60
    active: bool = False
    active_task_id: str | None = None
    sound_on: bool = False
    pending: PendingSelection | None = None

    @property
    def ambient_playing(self) -> bool:
        return self.active and self.sound_on


def duration_for(mode: TimerMode, config: LifeConfig = DEFAULT_CONFIG) -> int:
    """Default countdown length of *mode*, in seconds."""
    minutes = {
        TimerMode.POMODORO: config.pomodoro_minutes,
        TimerMode.SHORT_BREAK: config.short_break_minutes,
        TimerMode.LONG_BREAK: config.long_break_minutes,
    }[mode]
    return minutes * 60


def new_timer(config: LifeConfig = DEFAULT_CONFIG) -> TimerState:
    seconds = duration_for(TimerMode.POMODORO, config)
    return TimerState(initial_time=seconds, time_left=seconds, sound_on=config.sound_on)


def _settle(old: TimerState, new: TimerState, effects: list[Effect] | None = None) -> tuple[TimerState, list[Effect]]:
    """Append an Ambient effect when the loop should start or stop."""
    effects = list(effects or [])
    if old.ambient_playing != new.ambient_playing:
        effects.append(Ambient(new.ambient_playing))
    return new, effects


def _load_mode(state: TimerState, mode: TimerMode, config: LifeConfig) -> TimerState:
    seconds = duration_for(mode, config)
    return replace(state, mode=mode, initial_time=seconds, time_left=seconds, active=False)


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


def start(state: TimerState) -> tuple[TimerState, list[Effect]]:
    if state.time_left == 0:
        return state, []
    return _settle(state, replace(state, active=True))


def pause(state: TimerState) -> tuple[TimerState, list[Effect]]:
    return _settle(state, replace(state, active=False))


def toggle(state: TimerState) -> tuple[TimerState, list[Effect]]:
    return pause(state) if state.active else start(state)


def reset(state: TimerState) -> tuple[TimerState, list[Effect]]:
    return _settle(state, replace(state, time_left=state.initial_time, active=False))


def skip(state: TimerState, config: LifeConfig = DEFAULT_CONFIG) -> tuple[TimerState, list[Effect]]:
    """Advance to the next mode in the cycle and stop."""
    return _settle(state, _load_mode(state, MODE_CYCLE[state.mode], config))


def set_preset(state: TimerState, minutes: int) -> tuple[TimerState, list[Effect]]:
    """Override the countdown length. Non-positive values are ignored."""
    if minutes <= 0:
        return state, []
    seconds = minutes * 60
    return _settle(state, replace(state, initial_time=seconds, time_left=seconds))


def set_sound(state: TimerState, on: bool) -> tuple[TimerState, list[Effect]]:
    return _settle(state, replace(state, sound_on=on))


def tick(state: TimerState, config: LifeConfig = DEFAULT_CONFIG) -> tuple[TimerState, list[Effect]]:
    """One second of countdown. Completion credits the active task."""
    if not state.active:
        return state, []
    if state.time_left > 1:
        return replace(state, time_left=state.time_left - 1), []

    effects: list[Effect] = [PlayAlarm()]
    if state.mode == TimerMode.POMODORO and state.active_task_id:
        effects.append(CreditMinutes(state.active_task_id, state.initial_time // 60))

    next_mode = TimerMode.SHORT_BREAK if state.mode == TimerMode.POMODORO else TimerMode.POMODORO
    return _settle(state, _load_mode(state, next_mode, config), effects)


# ---------------------------------------------------------------------------
# Dial dragging
# ---------------------------------------------------------------------------


def time_from_pointer(dx: float, dy: float, initial_time: int) -> int:
    """Map a pointer offset from the dial center to a countdown value.

    The angle is measured clockwise from 12 o'clock, so a pointer straight
    above the center means zero and a full turn means *initial_time*.
    """
    angle = math.atan2(dy, dx) + math.pi / 2
    if angle < 0:
        angle += 2 * math.pi
    progress = angle / (2 * math.pi)
    seconds = math.floor(progress * initial_time + 0.5)
    return max(0, min(initial_time, seconds))


def drag_to(state: TimerState, dx: float, dy: float) -> tuple[TimerState, list[Effect]]:
    return replace(state, time_left=time_from_pointer(dx, dy, state.initial_time)), []


def dial_progress(state: TimerState) -> float:
    """Fraction of the countdown still remaining, for drawing the ring."""
    if state.initial_time <= 0:
        return 0.0
    return state.time_left / state.initial_time


def format_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


# ---------------------------------------------------------------------------
# Task selection
# ---------------------------------------------------------------------------


def is_overdue(task: Task, now_hhmm: str) -> bool:
    return bool(task.is_fixed and task.start_time and task.start_time <= now_hhmm)


def find_overdue_task(tasks: list[Task], target_id: str, today: str, now_hhmm: str) -> Task | None:
    """Another fixed, unfinished task of today whose start time has passed."""
    for t in tasks:
        if t.id == target_id or t.is_done or t.date != today:
            continue
        if is_overdue(t, now_hhmm):
            return t
    return None


def _activate(state: TimerState, task_id: str, config: LifeConfig) -> tuple[TimerState, list[Effect]]:
    fresh = _load_mode(state, TimerMode.POMODORO, config)
    return _settle(state, replace(fresh, active_task_id=task_id, pending=None))


def select_task(
    state: TimerState,
    task_id: str,
    tasks: list[Task],
    today: str,
    now_hhmm: str,
    config: LifeConfig = DEFAULT_CONFIG,
) -> tuple[TimerState, list[Effect]]:
    """Make *task_id* the active task, unless an overdue task needs acknowledging."""
    overdue = find_overdue_task(tasks, task_id, today, now_hhmm)
    if overdue is not None:
        return replace(state, pending=PendingSelection(task_id, overdue.id)), []
    return _activate(state, task_id, config)


def confirm_selection(state: TimerState, config: LifeConfig = DEFAULT_CONFIG) -> tuple[TimerState, list[Effect]]:
    if state.pending is None:
        return state, []
    return _activate(state, state.pending.task_id, config)


def cancel_selection(state: TimerState) -> tuple[TimerState, list[Effect]]:
    return replace(state, pending=None), []


def early_finish(state: TimerState) -> tuple[TimerState, list[Effect]]:
    """Finish the active task now, crediting the whole minutes spent."""
    if state.active_task_id is None:
        return state, []
    elapsed = (state.initial_time - state.time_left) // 60
    effects: list[Effect] = [
        CreditMinutes(state.active_task_id, elapsed),
        MarkDone(state.active_task_id),
    ]
    finished = replace(state, active_task_id=None, active=False, time_left=state.initial_time)
    return _settle(state, finished, effects)


def complete_from_list(state: TimerState, task_id: str) -> tuple[TimerState, list[Effect]]:
    """Tick a task off the list. The countdown keeps its running state."""
    if state.active_task_id == task_id:
        state = replace(state, active_task_id=None)
    return state, [MarkDone(task_id)]


# ---------------------------------------------------------------------------
# Task lists shown beside the timer
# ---------------------------------------------------------------------------


def today_queue(tasks: list[Task], today: str) -> list[Task]:
    """Unfinished tasks of today, untimed first, then by start time."""
    return sorted(
        (t for t in tasks if t.date == today and not t.is_done),
        key=lambda t: t.start_time or "",
    )


def backlog(tasks: list[Task], today: str) -> list[Task]:
    return [t for t in tasks if t.date != today and not t.is_done]
