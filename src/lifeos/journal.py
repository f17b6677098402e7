"""Habits, daily reflections, and the statistics on the reflect view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta

from lifeos.models import Habit, Project, ReflectionContent, ReflectionLog, Task, generate_id

logger = logging.getLogger(__name__)

HEATMAP_DAYS = 84


@dataclass(frozen=True)
class HeatmapCell:
    date: str
    count: int
    level: int  # 0 = none, 1 = some, 2 = >2, 3 = >5 tasks done


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


def add_habit(habits: list[Habit], title: str) -> list[Habit]:
    title = (title or "").strip()
    if not title:
        logger.debug("add_habit: blank title, ignoring")
        return list(habits)
    habit = Habit(id=generate_id((h.id for h in habits), "h"), title=title)
    return [*habits, habit]


def toggle_habit(habits: list[Habit], habit_id: str, day: str) -> list[Habit]:
    """Mark or unmark *day* as completed. ``streak`` is left untouched."""
    result = []
    for h in habits:
        if h.id == habit_id:
            if day in h.completed_dates:
                dates = [d for d in h.completed_dates if d != day]
            else:
                dates = [*h.completed_dates, day]
            h = replace(h, completed_dates=dates)
        result.append(h)
    return result


def rename_habit(habits: list[Habit], habit_id: str, title: str) -> list[Habit]:
    return [replace(h, title=title) if h.id == habit_id else h for h in habits]


def delete_habit(habits: list[Habit], habit_id: str) -> list[Habit]:
    return [h for h in habits if h.id != habit_id]


def is_done_on(habit: Habit, day: str) -> bool:
    return day in habit.completed_dates


# ---------------------------------------------------------------------------
# Reflections
# ---------------------------------------------------------------------------


def save_reflection(logs: list[ReflectionLog], day: str, content: ReflectionContent) -> list[ReflectionLog]:
    """Upsert the reflection for *day*; an earlier log for that date is replaced."""
    kept = [r for r in logs if r.date != day]
    log = ReflectionLog(id=generate_id((r.id for r in logs), "r"), date=day, content=content)
    return [*kept, log]


def reflection_for(logs: list[ReflectionLog], day: str) -> ReflectionLog | None:
    return next((r for r in logs if r.date == day), None)


def empty_reflection() -> ReflectionContent:
    """Blank form content for a day that has no log yet."""
    return ReflectionContent()


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def completion_percent(tasks: list[Task]) -> int:
    if not tasks:
        return 0
    done = sum(1 for t in tasks if t.is_done)
    return round(done / len(tasks) * 100)


def work_minutes_on(tasks: list[Task], day: str) -> int:
    return sum(t.actual_minutes for t in tasks if t.date == day)


def habits_progress(habits: list[Habit], day: str) -> int:
    if not habits:
        return 0
    done = sum(1 for h in habits if is_done_on(h, day))
    return round(done / len(habits) * 100)


def project_hours(projects: list[Project]) -> dict[str, float]:
    """Logged hours per project title, for the area breakdown."""
    return {p.title: p.total_actual_hours for p in projects}


def _heat_level(count: int) -> int:
    if count > 5:
        return 3
    if count > 2:
        return 2
    if count > 0:
        return 1
    return 0


def activity_heatmap(tasks: list[Task], today: date, days: int = HEATMAP_DAYS) -> list[HeatmapCell]:
    """Completed-task counts for the *days* ending on *today*, oldest first."""
    counts: dict[str, int] = {}
    for t in tasks:
        if t.is_done:
            counts[t.date] = counts.get(t.date, 0) + 1

    cells = []
    for offset in range(days - 1, -1, -1):
        key = (today - timedelta(days=offset)).isoformat()
        count = counts.get(key, 0)
        cells.append(HeatmapCell(date=key, count=count, level=_heat_level(count)))
    return cells
