from dataclasses import replace
from datetime import date

import pytest

from lifeos import store
from lifeos.models import Area, ReflectionContent, TaskStatus, TimerMode
from lifeos.seed import demo_seed
from lifeos.store import (
    AddHabit,
    AddProject,
    AddTask,
    CancelSelection,
    CompleteTask,
    ConfirmSelection,
    DeleteProject,
    DeleteTask,
    DragDial,
    EarlyFinish,
    MoveToFlexible,
    RemoveFromSchedule,
    SaveReflection,
    ScheduleTask,
    SelectTask,
    SetPreset,
    SetSound,
    SkipMode,
    StartTimer,
    Tick,
    ToggleHabit,
    ToggleTaskStatus,
    UpdateTask,
)
from lifeos.timer import Ambient, PlayAlarm, TimerState

TODAY = "2026-10-19"


def _state(**timer_fields):
    seed = demo_seed(date(2026, 10, 19))
    state = store.initial_state(seed.tasks, seed.projects, seed.habits)
    if timer_fields:
        state = replace(state, timer=replace(state.timer, **timer_fields))
    return state


def _task(state, task_id):
    return next(t for t in state.tasks if t.id == task_id)


def test_unknown_command_raises():
    with pytest.raises(TypeError, match="Unknown command"):
        store.apply(_state(), object())


def test_toggle_task_status_is_an_involution_for_todo():
    state = _state()
    twice = store.reduce(store.reduce(state, ToggleTaskStatus("t3")), ToggleTaskStatus("t3"))
    assert _task(twice, "t3").status == TaskStatus.TODO
    assert _task(state, "t3").status == TaskStatus.TODO


def test_update_and_add_task():
    state = store.reduce(_state(), UpdateTask("t4", {"title": "Buy oats"}))
    assert _task(state, "t4").title == "Buy oats"
    state = store.reduce(state, AddTask({"title": "New one", "project_id": "p3"}))
    assert _task(state, "t6").project_id == "p3"


def test_delete_project_cascades_and_forgets_active_task():
    state = _state(active_task_id="t1")
    state = store.reduce(state, DeleteProject("p1"))
    assert all(t.project_id != "p1" for t in state.tasks)
    assert state.timer.active_task_id is None
    assert state.active_task is None


def test_delete_task_forgets_active_task():
    state = store.reduce(_state(active_task_id="t4"), DeleteTask("t4"))
    assert state.timer.active_task_id is None


def test_add_project():
    state = store.reduce(_state(), AddProject("Friends", Area.RELATIONSHIP))
    assert state.projects[-1].id == "p5"
    assert state.projects[-1].color == "text-rose-600"


def test_schedule_move_and_unpin():
    state = store.reduce(_state(), ScheduleTask("t5", TODAY, 10))
    t = _task(state, "t5")
    assert (t.date, t.start_time, t.end_time, t.is_fixed) == (TODAY, "10:00", "11:00", True)

    state = store.reduce(state, MoveToFlexible("t5", "2026-10-20"))
    t = _task(state, "t5")
    assert (t.date, t.start_time, t.is_fixed) == ("2026-10-20", None, False)

    state = store.reduce(state, ScheduleTask("t5", TODAY, 22))
    state = store.reduce(state, RemoveFromSchedule("t5"))
    t = _task(state, "t5")
    assert (t.date, t.start_time, t.end_time) == (TODAY, None, None)

    same = store.reduce(state, ScheduleTask("missing", TODAY, 9))
    assert same == state


def test_habits_and_reflections():
    state = store.reduce(_state(), ToggleHabit("h1", TODAY))
    assert TODAY in state.habits[0].completed_dates
    assert state.habits[0].streak == 12
    state = store.reduce(state, AddHabit("Stretch"))
    assert state.habits[-1].id == "h4"

    state = store.reduce(state, SaveReflection(TODAY, ReflectionContent(well_done="A")))
    state = store.reduce(state, SaveReflection(TODAY, ReflectionContent(well_done="B")))
    assert [r.content.well_done for r in state.reflections] == ["B"]


def test_countdown_completion_credits_active_task():
    state = _state(active_task_id="t2", active=True, time_left=1)
    before = _task(state, "t2").actual_minutes
    state, effects = store.apply(state, Tick())
    assert _task(state, "t2").actual_minutes == before + 25
    assert effects == [PlayAlarm()]
    assert state.timer.mode == TimerMode.SHORT_BREAK
    assert state.timer.time_left == 300


def test_early_finish_credits_and_marks_done():
    state = _state(active_task_id="t4", active=True, time_left=1000)
    state = store.reduce(state, EarlyFinish())
    t = _task(state, "t4")
    assert t.actual_minutes == 8
    assert t.status == TaskStatus.DONE
    assert state.timer.active_task_id is None
    assert state.timer.time_left == 1500
    assert not state.timer.active


def test_overdue_selection_flow():
    # t2 is a fixed task starting at 14:00 and not done
    pending = store.reduce(_state(active_task_id="t4"), SelectTask("t3", TODAY, "14:30"))
    assert pending.timer.pending is not None
    assert pending.overdue_task.id == "t2"
    assert pending.active_task.id == "t4"

    confirmed = store.reduce(pending, ConfirmSelection())
    assert confirmed.active_task.id == "t3"
    assert confirmed.timer.pending is None

    cancelled = store.reduce(pending, CancelSelection())
    assert cancelled.active_task.id == "t4"
    assert cancelled.overdue_task is None


def test_select_before_fixed_start_activates_immediately():
    state = store.reduce(_state(), SelectTask("t3", TODAY, "10:00"))
    assert state.active_task.id == "t3"


def test_complete_task_from_list():
    state = _state(active_task_id="t3", active=True)
    state = store.reduce(state, CompleteTask("t3"))
    assert _task(state, "t3").status == TaskStatus.DONE
    assert state.timer.active_task_id is None
    assert state.timer.active


def test_timer_controls_report_audio_effects():
    state = store.reduce(_state(), SetSound(True))
    state, effects = store.apply(state, StartTimer())
    assert effects == [Ambient(True)]
    state, effects = store.apply(state, SkipMode())
    assert effects == [Ambient(False)]
    assert state.timer.mode == TimerMode.SHORT_BREAK

    state = store.reduce(state, SetPreset(45))
    assert state.timer.time_left == 2700
    state = store.reduce(state, DragDial(0, 100))
    assert state.timer.time_left == 1350


def test_initial_state_uses_config_timer():
    state = store.initial_state()
    assert state.timer == TimerState()
    assert state.tasks == []
