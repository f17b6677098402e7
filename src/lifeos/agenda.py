"""Calendar grids and navigation for the month and week views."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from lifeos.models import Area, CalendarView, Project, Task
from lifeos.tasks import filter_by_area, tasks_on


def start_of_week(day: date) -> date:
    """The Sunday on or before *day*."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_days(day: date) -> list[date]:
    first = start_of_week(day)
    return [first + timedelta(days=i) for i in range(7)]


def month_grid(day: date) -> list[list[date]]:
    """Full Sunday-first weeks covering the month of *day*."""
    first = day.replace(day=1)
    last = day.replace(day=calendar.monthrange(day.year, day.month)[1])
    current = start_of_week(first)
    end = start_of_week(last) + timedelta(days=6)

    weeks: list[list[date]] = []
    while current <= end:
        weeks.append([current + timedelta(days=i) for i in range(7)])
        current += timedelta(days=7)
    return weeks


def shift(day: date, view: CalendarView, step: int) -> date:
    """Move *step* months (MONTH view) or weeks (WEEK view) from *day*."""
    if view == CalendarView.WEEK:
        return day + timedelta(weeks=step)
    month_index = day.year * 12 + day.month - 1 + step
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def month_days(year: int, month: int) -> list[int | None]:
    """Day numbers of a Monday-first mini calendar, with leading blanks."""
    leading, count = calendar.monthrange(year, month)
    return [None] * leading + list(range(1, count + 1))


def tasks_for_day(
    tasks: list[Task],
    projects: list[Project],
    day: date,
    area: Area | None = None,
) -> list[Task]:
    return tasks_on(filter_by_area(tasks, projects, area), day.isoformat())
