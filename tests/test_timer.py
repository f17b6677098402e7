from dataclasses import replace

from lifeos import timer
from lifeos.config import LifeConfig
from lifeos.models import Task, TaskStatus, TimerMode
from lifeos.timer import (
    Ambient,
    CreditMinutes,
    MarkDone,
    PendingSelection,
    PlayAlarm,
    TimerState,
)

TODAY = "2026-10-19"


def _running(time_left=1500, task_id="a", **kw) -> TimerState:
    return TimerState(initial_time=1500, time_left=time_left, active=True, active_task_id=task_id, **kw)


def _standup(**kw) -> Task:
    return Task("s", "p1", "Standup", is_fixed=True, start_time="09:00", end_time="09:15", date=TODAY, **kw)


def test_new_timer_uses_config():
    state = timer.new_timer(LifeConfig(pomodoro_minutes=50, sound_on=True))
    assert state.mode == TimerMode.POMODORO
    assert state.initial_time == 3000
    assert state.time_left == 3000
    assert state.sound_on is True
    assert not state.active


def test_tick_counts_down():
    state, effects = timer.tick(_running(time_left=10))
    assert state.time_left == 9
    assert state.active
    assert effects == []


def test_tick_while_paused_is_a_no_op():
    paused = replace(_running(), active=False)
    assert timer.tick(paused) == (paused, [])


def test_pomodoro_completion_credits_task_and_starts_break():
    state, effects = timer.tick(_running(time_left=1))
    assert PlayAlarm() in effects
    assert CreditMinutes("a", 25) in effects
    assert state.mode == TimerMode.SHORT_BREAK
    assert state.initial_time == 300
    assert state.time_left == 300
    assert state.active is False
    assert state.active_task_id == "a"


def test_break_completion_returns_to_pomodoro_without_credit():
    brk = TimerState(mode=TimerMode.SHORT_BREAK, initial_time=300, time_left=1, active=True, active_task_id="a")
    state, effects = timer.tick(brk)
    assert effects == [PlayAlarm()]
    assert state.mode == TimerMode.POMODORO
    assert state.time_left == 1500


def test_completion_without_task_only_alarms():
    state, effects = timer.tick(_running(time_left=1, task_id=None))
    assert effects == [PlayAlarm()]
    assert state.mode == TimerMode.SHORT_BREAK


def test_start_at_zero_does_nothing():
    state = TimerState(time_left=0)
    assert timer.start(state) == (state, [])


def test_toggle_and_reset():
    state, _ = timer.toggle(TimerState())
    assert state.active
    state, _ = timer.tick(state)
    state, _ = timer.toggle(state)
    assert not state.active
    assert state.time_left == 1499
    state, _ = timer.reset(state)
    assert state.time_left == 1500
    assert not state.active


def test_skip_cycles_modes():
    state = TimerState()
    seen = []
    for _ in range(3):
        state, _ = timer.skip(state)
        seen.append((state.mode, state.time_left))
    assert seen == [
        (TimerMode.SHORT_BREAK, 300),
        (TimerMode.LONG_BREAK, 900),
        (TimerMode.POMODORO, 1500),
    ]


def test_set_preset_ignores_non_positive():
    state, _ = timer.set_preset(TimerState(), 45)
    assert state.initial_time == 2700
    assert state.time_left == 2700
    assert timer.set_preset(state, 0) == (state, [])


def test_ambient_follows_sound_and_activity():
    state, effects = timer.set_sound(TimerState(), True)
    assert effects == []
    state, effects = timer.start(state)
    assert effects == [Ambient(True)]
    state, effects = timer.set_sound(state, False)
    assert effects == [Ambient(False)]
    state, effects = timer.set_sound(state, True)
    state, effects = timer.pause(state)
    assert effects == [Ambient(False)]


def test_early_finish_credits_elapsed_minutes():
    state, effects = timer.early_finish(_running(time_left=1000))
    assert effects == [CreditMinutes("a", 8), MarkDone("a")]
    assert state.active_task_id is None
    assert state.time_left == 1500
    assert not state.active


def test_early_finish_without_task_is_a_no_op():
    state = _running(task_id=None)
    assert timer.early_finish(state) == (state, [])


def test_complete_from_list_keeps_countdown_running():
    state, effects = timer.complete_from_list(_running(), "a")
    assert effects == [MarkDone("a")]
    assert state.active_task_id is None
    assert state.active

    other, _ = timer.complete_from_list(_running(), "b")
    assert other.active_task_id == "a"


def test_time_from_pointer():
    assert timer.time_from_pointer(0, -100, 1500) == 0
    assert timer.time_from_pointer(100, 0, 1500) == 375
    assert timer.time_from_pointer(0, 100, 1500) == 750
    assert timer.time_from_pointer(-100, 0, 1500) == 1125
    # just left of 12 o'clock is almost a full turn
    assert 1125 < timer.time_from_pointer(-100, -1, 1500) <= 1500


def test_drag_to_sets_time_left():
    state, effects = timer.drag_to(TimerState(), 0, 100)
    assert state.time_left == 750
    assert effects == []
    assert timer.dial_progress(state) == 0.5


def test_format_time():
    assert timer.format_time(1500) == "25:00"
    assert timer.format_time(65) == "01:05"
    assert timer.format_time(0) == "00:00"


def test_select_task_without_overdue_activates():
    state, _ = timer.select_task(_running(time_left=100), "b", [_standup()], TODAY, "08:59")
    assert state.active_task_id == "b"
    assert state.mode == TimerMode.POMODORO
    assert state.time_left == 1500
    assert state.active is False
    assert state.pending is None


def test_select_task_with_overdue_waits_for_confirmation():
    before = _running(time_left=100)
    state, _ = timer.select_task(before, "b", [_standup()], TODAY, "09:15")
    assert state.pending == PendingSelection("b", "s")
    assert state.active_task_id == "a"
    assert state.time_left == 100

    confirmed, _ = timer.confirm_selection(state)
    assert confirmed.active_task_id == "b"
    assert confirmed.pending is None
    assert confirmed.time_left == 1500

    cancelled, _ = timer.cancel_selection(state)
    assert cancelled.active_task_id == "a"
    assert cancelled.pending is None


def test_overdue_ignores_done_target_and_other_days():
    assert timer.find_overdue_task([_standup(status=TaskStatus.DONE)], "b", TODAY, "10:00") is None
    assert timer.find_overdue_task([_standup()], "s", TODAY, "10:00") is None
    assert timer.find_overdue_task([_standup()], "b", "2026-10-20", "10:00") is None
    assert timer.find_overdue_task([_standup()], "b", TODAY, "09:00").id == "s"


def test_today_queue_and_backlog():
    tasks = [
        Task("x", "p1", "Late", start_time="15:00", date=TODAY),
        Task("y", "p1", "Loose", date=TODAY),
        Task("z", "p1", "Done", date=TODAY, status=TaskStatus.DONE),
        Task("w", "p1", "Someday"),
    ]
    assert [t.id for t in timer.today_queue(tasks, TODAY)] == ["y", "x"]
    assert [t.id for t in timer.backlog(tasks, TODAY)] == ["w"]
