import threading
import time
from dataclasses import replace
from datetime import datetime

from lifeos.audio import SoundBoard
from lifeos.models import Habit, Task, TimerMode
from lifeos.session import Session
from lifeos.store import PauseTimer, SelectTask, SetSound, StartTimer, ToggleHabit, initial_state
from lifeos.timer import TimerState

NOW = datetime(2026, 10, 19, 9, 15)


def _state():
    tasks = [
        Task("s", "p1", "Standup", is_fixed=True, start_time="09:00", end_time="09:15", date="2026-10-19"),
        Task("a", "p1", "Report"),
    ]
    return initial_state(tasks, habits=[Habit("h1", "Run")])


class BrokenPlayer:
    def play(self, url, loop=False, volume=1.0):
        raise OSError("no audio device")

    def stop(self, url):
        raise OSError("no audio device")


def test_select_task_is_stamped_with_clock():
    session = Session(_state(), clock=lambda: NOW, tick_seconds=10)
    state = session.dispatch(SelectTask("a"))
    assert state.timer.pending is not None
    assert state.overdue_task.id == "s"
    session.close()


def test_toggle_habit_defaults_to_today():
    session = Session(_state(), clock=lambda: NOW, tick_seconds=10)
    state = session.dispatch(ToggleHabit("h1"))
    assert state.habits[0].completed_dates == ["2026-10-19"]
    assert session.today() == "2026-10-19"
    session.close()


def test_listeners_see_every_state_until_unsubscribed():
    session = Session(_state(), clock=lambda: NOW, tick_seconds=10)
    seen = []
    unsubscribe = session.subscribe(seen.append)
    session.dispatch(ToggleHabit("h1"))
    unsubscribe()
    unsubscribe()
    session.dispatch(ToggleHabit("h1"))
    assert len(seen) == 1
    session.close()


def test_running_countdown_ticks_to_completion():
    state = replace(_state(), timer=TimerState(initial_time=120, time_left=5, active_task_id="a"))
    session = Session(state, clock=lambda: NOW, tick_seconds=0.01)
    done = threading.Event()
    session.subscribe(lambda s: done.set() if not s.timer.active else None)

    session.dispatch(StartTimer())
    assert session.ticker.running
    assert done.wait(5)

    final = session.state
    assert final.timer.mode == TimerMode.SHORT_BREAK
    assert next(t for t in final.tasks if t.id == "a").actual_minutes == 2
    assert not session.ticker.running
    session.close()


def test_close_stops_ticker():
    session = Session(_state(), clock=lambda: NOW, tick_seconds=10)
    session.dispatch(StartTimer())
    assert session.ticker.running
    session.close()
    session.close()
    assert not session.ticker.running


def test_audio_failures_do_not_break_dispatch():
    state = _state()
    session = Session(state, sounds=SoundBoard(BrokenPlayer(), state.config), clock=lambda: NOW, tick_seconds=10)
    session.dispatch(SetSound(True))
    after = session.dispatch(StartTimer())
    assert after.timer.active
    assert after.timer.ambient_playing
    session.close()


def test_tick_from_cancelled_run_is_dropped():
    state = replace(_state(), timer=TimerState(initial_time=1500, time_left=1000))
    session = Session(state, clock=lambda: NOW, tick_seconds=0.05)
    session.dispatch(StartTimer())
    with session._lock:
        # the first run wakes up meanwhile and blocks on the lock
        time.sleep(0.08)
        session.dispatch(PauseTimer())
        session.dispatch(StartTimer())
        session.ticker.cancel()
    time.sleep(0.1)
    assert session.state.timer.time_left == 1000
    session.close()
