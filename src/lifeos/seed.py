"""Starting data for a session: the built-in demo set or a JSON seed file.

Seed files are read once at start-up and never written back.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path

from lifeos.models import (
    Area,
    Habit,
    Priority,
    Project,
    ReflectionLog,
    Task,
    TaskStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class Seed:
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    habits: list[Habit] = field(default_factory=list)
    reflections: list[ReflectionLog] = field(default_factory=list)


def demo_seed(today: date | None = None) -> Seed:
    """A small sample workspace dated relative to *today*."""
    today = today or date.today()
    today_str = today.isoformat()
    yesterday_str = (today - timedelta(days=1)).isoformat()

    projects = [
        Project("p1", "LifeOS Development", Area.WORK, "text-blue-600", "bg-blue-100", 120.5),
        Project("p2", "Marketing Campaign", Area.WORK, "text-indigo-600", "bg-indigo-100", 45.2),
        Project("p3", "Health & Training", Area.SELF, "text-emerald-600", "bg-emerald-100", 80.0),
        Project("p4", "Family & Friends", Area.RELATIONSHIP, "text-rose-600", "bg-rose-100", 30.0),
    ]
    tasks = [
        Task(
            "t1", "p1", "Daily Scrum Meeting",
            description="Progress sync with the dev team",
            status=TaskStatus.DONE, estimate_minutes=30, actual_minutes=32,
            is_fixed=True, start_time="09:00", end_time="09:30",
            date=today_str, order=0, priority=Priority.HIGH,
        ),
        Task(
            "t2", "p1", "Deep Work: Coding Core",
            description="Timer module and drag/drop logic",
            status=TaskStatus.IN_PROGRESS, estimate_minutes=120, actual_minutes=45,
            is_fixed=True, start_time="14:00", end_time="16:00",
            date=today_str, order=1, priority=Priority.HIGH,
        ),
        Task(
            "t3", "p2", "Write campaign posts",
            description="Posts for next month's campaign",
            estimate_minutes=60, date=today_str, due_time="18:00",
            order=2, priority=Priority.MEDIUM,
        ),
        Task(
            "t4", "p3", "Buy protein powder",
            estimate_minutes=15, date=today_str, order=3, priority=Priority.LOW,
        ),
        Task(
            "t5", "p3", "Plan next year",
            description="No date yet",
            estimate_minutes=60, order=4, priority=Priority.MEDIUM,
        ),
    ]
    habits = [
        Habit("h1", "Run 30 minutes", 12, [yesterday_str]),
        Habit("h2", "Read 20 pages", 5, [yesterday_str, today_str]),
        Habit("h3", "Meditate 10 minutes", 8, [yesterday_str]),
    ]
    return Seed(projects=projects, tasks=tasks, habits=habits)


def load_seed(path: str | Path) -> Seed:
    """Read projects, tasks, habits and reflections from a JSON file."""
    seed_path = Path(path)
    if not seed_path.exists():
        raise ValueError(f"Seed file {seed_path} does not exist")
    try:
        raw = json.loads(seed_path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Seed file {seed_path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"Seed file {seed_path} must contain a JSON object")

    try:
        seed = Seed(
            projects=[Project.from_dict(d) for d in raw.get("projects", [])],
            tasks=[Task.from_dict(d) for d in raw.get("tasks", [])],
            habits=[Habit.from_dict(d) for d in raw.get("habits", [])],
            reflections=[ReflectionLog.from_dict(d) for d in raw.get("reflections", [])],
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise ValueError(f"Seed file {seed_path} has an invalid record: {e}") from e

    logger.debug(
        "Loaded %d project(s), %d task(s) from %s",
        len(seed.projects), len(seed.tasks), seed_path,
    )
    return seed
