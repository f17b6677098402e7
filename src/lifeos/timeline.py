"""Planning timeline: clock time <-> pixel conversions and drop scheduling."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime

from lifeos.config import DEFAULT_CONFIG, LifeConfig
from lifeos.models import Task

logger = logging.getLogger(__name__)

HOUR_HEIGHT = DEFAULT_CONFIG.hour_height
DAY_START_HOUR = DEFAULT_CONFIG.day_start_hour
DAY_END_HOUR = DEFAULT_CONFIG.day_end_hour


@dataclass
class DayPlan:
    """Tasks of one date split the way the planning view lays them out."""

    date: str
    scheduled: list[Task]
    flexible: list[Task]
    unscheduled: list[Task]


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def time_to_fraction(time: str) -> float:
    """Parse ``"HH:MM"`` into a real-valued hour of day."""
    hours, minutes = (int(part) for part in time.split(":"))
    return hours + minutes / 60


def fraction_to_time(hour: float) -> str:
    """Inverse of time_to_fraction; minutes round to the nearest integer."""
    h = math.floor(hour)
    m = _round_half_up((hour - h) * 60)
    if m == 60:
        h, m = h + 1, 0
    return f"{h:02d}:{m:02d}"


def hour_to_pixel(hour: float, config: LifeConfig = DEFAULT_CONFIG) -> float:
    return (hour - config.day_start_hour) * config.hour_height


def pixel_to_hour(y: float, config: LifeConfig = DEFAULT_CONFIG) -> int:
    """Hour slot under vertical offset *y*, clamped to the visible window."""
    hour = math.floor(y / config.hour_height) + config.day_start_hour
    return max(config.day_start_hour, min(config.day_end_hour - 1, hour))


def timeline_hours(config: LifeConfig = DEFAULT_CONFIG) -> list[int]:
    """Hour gridlines drawn on the timeline, end hour included."""
    return list(range(config.day_start_hour, config.day_end_hour + 1))


def end_time_for(start_time: str, estimate_minutes: int, config: LifeConfig = DEFAULT_CONFIG) -> str:
    """End of a slot starting at *start_time*, capped at the end of the day."""
    start = time_to_fraction(start_time)
    return fraction_to_time(min(config.day_end_hour, start + estimate_minutes / 60))


# ---------------------------------------------------------------------------
# Drop operations
# ---------------------------------------------------------------------------


def schedule_task(task: Task, date: str, hour: float, config: LifeConfig = DEFAULT_CONFIG) -> Task:
    """Pin *task* to the slot starting at *hour* on *date*."""
    start_time = fraction_to_time(hour)
    end_hour = min(config.day_end_hour, hour + task.estimate_minutes / 60)
    logger.debug("Scheduling %s on %s at %s", task.id, date, start_time)
    return replace(
        task,
        date=date,
        start_time=start_time,
        end_time=fraction_to_time(end_hour),
        is_fixed=True,
    )


def move_to_flexible(task: Task, date: str) -> Task:
    """Keep *task* on *date* without a time slot."""
    return replace(task, date=date, start_time=None, end_time=None, is_fixed=False)


def remove_from_schedule(task: Task, clear_date: bool = False) -> Task:
    """Unpin *task* from its slot. The date survives unless *clear_date*."""
    return replace(
        task,
        date="" if clear_date else task.date,
        start_time=None,
        end_time=None,
        is_fixed=False,
    )


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def block_geometry(task: Task, config: LifeConfig = DEFAULT_CONFIG) -> tuple[float, float] | None:
    """(top, height) in pixels of a timed task's block, or None if untimed."""
    if not task.start_time:
        return None
    top = hour_to_pixel(time_to_fraction(task.start_time), config)
    duration_hours = task.estimate_minutes / 60
    height = max(config.min_block_height, duration_hours * config.hour_height - 4)
    return top, height


def now_indicator_offset(now: datetime, config: LifeConfig = DEFAULT_CONFIG) -> float | None:
    """Pixel offset of the current-time line, None outside the window."""
    hour = now.hour + now.minute / 60
    if not config.day_start_hour <= hour < config.day_end_hour:
        return None
    return hour_to_pixel(hour, config)


def partition_day(tasks: list[Task], date: str) -> DayPlan:
    """Split tasks into timed slots, flexible tasks, and the unscheduled pool."""
    scheduled = sorted(
        (t for t in tasks if t.date == date and t.start_time),
        key=lambda t: t.start_time or "",
    )
    flexible = [t for t in tasks if t.date == date and not t.start_time]
    unscheduled = [t for t in tasks if t.date != date and not t.is_done]
    return DayPlan(date=date, scheduled=scheduled, flexible=flexible, unscheduled=unscheduled)
