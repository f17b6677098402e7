"""Application state container: typed commands and a pure reducer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from lifeos import journal, tasks as task_ops, timeline, timer
from lifeos.config import DEFAULT_CONFIG, LifeConfig
from lifeos.models import Area, Habit, Project, ReflectionContent, ReflectionLog, Task, TaskStatus
from lifeos.timer import CreditMinutes, Effect, MarkDone, TimerState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    """Everything one session knows. Replaced wholesale on every command."""

    tasks: list[Task] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    habits: list[Habit] = field(default_factory=list)
    reflections: list[ReflectionLog] = field(default_factory=list)
    timer: TimerState = field(default_factory=TimerState)
    config: LifeConfig = DEFAULT_CONFIG

    @property
    def active_task(self) -> Task | None:
        if self.timer.active_task_id is None:
            return None
        return task_ops.find_task(self.tasks, self.timer.active_task_id)

    @property
    def overdue_task(self) -> Task | None:
        """The task a pending selection is waiting on, if any."""
        if self.timer.pending is None:
            return None
        return task_ops.find_task(self.tasks, self.timer.pending.overdue_task_id)


def initial_state(
    tasks: list[Task] | None = None,
    projects: list[Project] | None = None,
    habits: list[Habit] | None = None,
    reflections: list[ReflectionLog] | None = None,
    config: LifeConfig = DEFAULT_CONFIG,
) -> AppState:
    return AppState(
        tasks=list(tasks or []),
        projects=list(projects or []),
        habits=list(habits or []),
        reflections=list(reflections or []),
        timer=timer.new_timer(config),
        config=config,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToggleTaskStatus:
    task_id: str


@dataclass(frozen=True)
class UpdateTask:
    task_id: str
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class AddTask:
    draft: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddProject:
    title: str
    area: Area = Area.WORK


@dataclass(frozen=True)
class UpdateProject:
    project_id: str
    title: str
    area: Area


@dataclass(frozen=True)
class DeleteProject:
    project_id: str


@dataclass(frozen=True)
class ScheduleTask:
    task_id: str
    date: str
    hour: float


@dataclass(frozen=True)
class MoveToFlexible:
    task_id: str
    date: str


@dataclass(frozen=True)
class RemoveFromSchedule:
    task_id: str
    clear_date: bool = False


@dataclass(frozen=True)
class AddHabit:
    title: str


@dataclass(frozen=True)
class ToggleHabit:
    habit_id: str
    day: str = ""  # filled with today's date by the session


@dataclass(frozen=True)
class RenameHabit:
    habit_id: str
    title: str


@dataclass(frozen=True)
class DeleteHabit:
    habit_id: str


@dataclass(frozen=True)
class SaveReflection:
    day: str
    content: ReflectionContent


@dataclass(frozen=True)
class StartTimer:
    pass


@dataclass(frozen=True)
class PauseTimer:
    pass


@dataclass(frozen=True)
class ToggleTimer:
    pass


@dataclass(frozen=True)
class ResetTimer:
    pass


@dataclass(frozen=True)
class SkipMode:
    pass


@dataclass(frozen=True)
class SetPreset:
    minutes: int


@dataclass(frozen=True)
class SetSound:
    on: bool


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class DragDial:
    dx: float
    dy: float


@dataclass(frozen=True)
class SelectTask:
    task_id: str
    today: str = ""  # "YYYY-MM-DD"
    now: str = ""  # "HH:MM"


@dataclass(frozen=True)
class ConfirmSelection:
    pass


@dataclass(frozen=True)
class CancelSelection:
    pass


@dataclass(frozen=True)
class EarlyFinish:
    pass


@dataclass(frozen=True)
class CompleteTask:
    """Tick a task off from the focus list rather than through the timer."""

    task_id: str


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

Result = tuple[AppState, list[Effect]]


def _apply_timer(state: AppState, outcome: tuple[TimerState, list[Effect]]) -> Result:
    """Fold task-facing timer effects into the task list; return the rest."""
    new_timer, effects = outcome
    tasks = state.tasks
    remaining: list[Effect] = []
    for effect in effects:
        if isinstance(effect, CreditMinutes):
            tasks = task_ops.credit_minutes(tasks, effect.task_id, effect.minutes)
        elif isinstance(effect, MarkDone):
            tasks = task_ops.set_task_status(tasks, effect.task_id, TaskStatus.DONE)
        else:
            remaining.append(effect)
    return replace(state, tasks=tasks, timer=new_timer), remaining


def _with_task(state: AppState, task_id: str, change: Callable[[Task], Task]) -> AppState:
    if task_ops.find_task(state.tasks, task_id) is None:
        logger.debug("No task %s, ignoring", task_id)
        return state
    return replace(state, tasks=[change(t) if t.id == task_id else t for t in state.tasks])


def _forget_active(state: AppState) -> AppState:
    """Drop the active task reference if that task no longer exists."""
    active_id = state.timer.active_task_id
    if active_id is not None and task_ops.find_task(state.tasks, active_id) is None:
        return replace(state, timer=replace(state.timer, active_task_id=None))
    return state


def _toggle_task_status(state: AppState, cmd: ToggleTaskStatus) -> Result:
    return replace(state, tasks=task_ops.toggle_status(state.tasks, cmd.task_id)), []


def _update_task(state: AppState, cmd: UpdateTask) -> Result:
    return replace(state, tasks=task_ops.update_task(state.tasks, cmd.task_id, **cmd.changes)), []


def _delete_task(state: AppState, cmd: DeleteTask) -> Result:
    return _forget_active(replace(state, tasks=task_ops.delete_task(state.tasks, cmd.task_id))), []


def _add_task(state: AppState, cmd: AddTask) -> Result:
    return replace(state, tasks=task_ops.add_task(state.tasks, state.projects, cmd.draft)), []


def _add_project(state: AppState, cmd: AddProject) -> Result:
    return replace(state, projects=task_ops.add_project(state.projects, cmd.title, cmd.area)), []


def _update_project(state: AppState, cmd: UpdateProject) -> Result:
    projects = task_ops.update_project(state.projects, cmd.project_id, cmd.title, cmd.area)
    return replace(state, projects=projects), []


def _delete_project(state: AppState, cmd: DeleteProject) -> Result:
    projects, tasks = task_ops.delete_project(state.projects, state.tasks, cmd.project_id)
    return _forget_active(replace(state, projects=projects, tasks=tasks)), []


def _schedule_task(state: AppState, cmd: ScheduleTask) -> Result:
    change = lambda t: timeline.schedule_task(t, cmd.date, cmd.hour, state.config)
    return _with_task(state, cmd.task_id, change), []


def _move_to_flexible(state: AppState, cmd: MoveToFlexible) -> Result:
    return _with_task(state, cmd.task_id, lambda t: timeline.move_to_flexible(t, cmd.date)), []


def _remove_from_schedule(state: AppState, cmd: RemoveFromSchedule) -> Result:
    change = lambda t: timeline.remove_from_schedule(t, clear_date=cmd.clear_date)
    return _with_task(state, cmd.task_id, change), []


def _add_habit(state: AppState, cmd: AddHabit) -> Result:
    return replace(state, habits=journal.add_habit(state.habits, cmd.title)), []


def _toggle_habit(state: AppState, cmd: ToggleHabit) -> Result:
    return replace(state, habits=journal.toggle_habit(state.habits, cmd.habit_id, cmd.day)), []


def _rename_habit(state: AppState, cmd: RenameHabit) -> Result:
    return replace(state, habits=journal.rename_habit(state.habits, cmd.habit_id, cmd.title)), []


def _delete_habit(state: AppState, cmd: DeleteHabit) -> Result:
    return replace(state, habits=journal.delete_habit(state.habits, cmd.habit_id)), []


def _save_reflection(state: AppState, cmd: SaveReflection) -> Result:
    logs = journal.save_reflection(state.reflections, cmd.day, cmd.content)
    return replace(state, reflections=logs), []


def _select_task(state: AppState, cmd: SelectTask) -> Result:
    outcome = timer.select_task(state.timer, cmd.task_id, state.tasks, cmd.today, cmd.now, state.config)
    return _apply_timer(state, outcome)


_HANDLERS: dict[type, Callable[[AppState, Any], Result]] = {
    ToggleTaskStatus: _toggle_task_status,
    UpdateTask: _update_task,
    DeleteTask: _delete_task,
    AddTask: _add_task,
    AddProject: _add_project,
    UpdateProject: _update_project,
    DeleteProject: _delete_project,
    ScheduleTask: _schedule_task,
    MoveToFlexible: _move_to_flexible,
    RemoveFromSchedule: _remove_from_schedule,
    AddHabit: _add_habit,
    ToggleHabit: _toggle_habit,
    RenameHabit: _rename_habit,
    DeleteHabit: _delete_habit,
    SaveReflection: _save_reflection,
    StartTimer: lambda s, c: _apply_timer(s, timer.start(s.timer)),
    PauseTimer: lambda s, c: _apply_timer(s, timer.pause(s.timer)),
    ToggleTimer: lambda s, c: _apply_timer(s, timer.toggle(s.timer)),
    ResetTimer: lambda s, c: _apply_timer(s, timer.reset(s.timer)),
    SkipMode: lambda s, c: _apply_timer(s, timer.skip(s.timer, s.config)),
    SetPreset: lambda s, c: _apply_timer(s, timer.set_preset(s.timer, c.minutes)),
    SetSound: lambda s, c: _apply_timer(s, timer.set_sound(s.timer, c.on)),
    Tick: lambda s, c: _apply_timer(s, timer.tick(s.timer, s.config)),
    DragDial: lambda s, c: _apply_timer(s, timer.drag_to(s.timer, c.dx, c.dy)),
    SelectTask: _select_task,
    ConfirmSelection: lambda s, c: _apply_timer(s, timer.confirm_selection(s.timer, s.config)),
    CancelSelection: lambda s, c: _apply_timer(s, timer.cancel_selection(s.timer)),
    EarlyFinish: lambda s, c: _apply_timer(s, timer.early_finish(s.timer)),
    CompleteTask: lambda s, c: _apply_timer(s, timer.complete_from_list(s.timer, c.task_id)),
}


def apply(state: AppState, command: object) -> Result:
    """Pure transition: the next state plus audio effects for the caller."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown command {type(command).__name__}")
    return handler(state, command)


def reduce(state: AppState, command: object) -> AppState:
    return apply(state, command)[0]
