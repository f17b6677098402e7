"""Task, project, habit and reflection records plus their enums."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable


class TaskStatus(enum.StrEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    COMPLETING = "COMPLETING"


class Area(enum.StrEnum):
    WORK = "WORK"
    RELATIONSHIP = "RELATIONSHIP"
    SELF = "SELF"


class Priority(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimerMode(enum.StrEnum):
    POMODORO = "POMODORO"
    SHORT_BREAK = "SHORT_BREAK"
    LONG_BREAK = "LONG_BREAK"


class TaskFilter(enum.StrEnum):
    ALL = "ALL"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"


class CalendarView(enum.StrEnum):
    MONTH = "MONTH"
    WEEK = "WEEK"


# Display color / background classes derived from a project's area.
AREA_STYLES: dict[Area, tuple[str, str]] = {
    Area.WORK: ("text-blue-600", "bg-blue-100"),
    Area.RELATIONSHIP: ("text-rose-600", "bg-rose-100"),
    Area.SELF: ("text-emerald-600", "bg-emerald-100"),
}


@dataclass
class Project:
    """A container for tasks, classified under one life area."""

    id: str
    title: str
    area: Area = Area.WORK
    color: str = "text-blue-600"
    bg: str = "bg-blue-100"
    total_actual_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "area": self.area.value,
            "color": self.color,
            "bg": self.bg,
            "totalActualHours": self.total_actual_hours,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        area = Area(d.get("area", "WORK"))
        color, bg = AREA_STYLES[area]
        return cls(
            id=d["id"],
            title=d["title"],
            area=area,
            color=d.get("color", color),
            bg=d.get("bg", bg),
            total_actual_hours=d.get("totalActualHours", 0.0),
        )


@dataclass
class Task:
    """A unit of work, optionally pinned to a time slot on a date."""

    id: str
    project_id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    estimate_minutes: int = 30
    actual_minutes: int = 0
    is_fixed: bool = False
    start_time: str | None = None  # "HH:MM"
    end_time: str | None = None
    due_time: str | None = None
    date: str = ""  # "YYYY-MM-DD"; empty means unscheduled
    order: int = 0
    priority: Priority | None = Priority.MEDIUM

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    @property
    def is_scheduled(self) -> bool:
        return bool(self.date)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "status": self.status.value,
            "estimateMinutes": self.estimate_minutes,
            "actualMinutes": self.actual_minutes,
            "isFixed": self.is_fixed,
            "date": self.date,
            "order": self.order,
        }
        if self.description is not None:
            d["description"] = self.description
        if self.start_time is not None:
            d["startTime"] = self.start_time
        if self.end_time is not None:
            d["endTime"] = self.end_time
        if self.due_time is not None:
            d["dueTime"] = self.due_time
        if self.priority is not None:
            d["priority"] = self.priority.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        priority = d.get("priority")
        return cls(
            id=d["id"],
            project_id=d.get("projectId", ""),
            title=d["title"],
            description=d.get("description"),
            status=TaskStatus(d.get("status", "TODO")),
            estimate_minutes=d.get("estimateMinutes", 30),
            actual_minutes=d.get("actualMinutes", 0),
            is_fixed=d.get("isFixed", False),
            start_time=d.get("startTime") or None,
            end_time=d.get("endTime") or None,
            due_time=d.get("dueTime") or None,
            date=d.get("date", ""),
            order=d.get("order", 0),
            priority=Priority(priority) if priority else None,
        )


@dataclass
class Habit:
    """A daily habit. ``streak`` is a stored display number."""

    id: str
    title: str
    streak: int = 0
    completed_dates: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "streak": self.streak,
            "completedDates": self.completed_dates,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Habit:
        # completedDates has set semantics; keep first occurrence order
        dates = list(dict.fromkeys(d.get("completedDates", [])))
        return cls(
            id=d["id"],
            title=d["title"],
            streak=d.get("streak", 0),
            completed_dates=dates,
        )


@dataclass(frozen=True)
class ReflectionContent:
    well_done: str = ""
    kaizen: str = ""
    observer: str = ""
    analyzer: str = ""

    def is_empty(self) -> bool:
        return not any((self.well_done, self.kaizen, self.observer, self.analyzer))

    def to_dict(self) -> dict:
        return {
            "wellDone": self.well_done,
            "kaizen": self.kaizen,
            "observer": self.observer,
            "analyzer": self.analyzer,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ReflectionContent:
        return cls(
            well_done=d.get("wellDone", ""),
            kaizen=d.get("kaizen", ""),
            observer=d.get("observer", ""),
            analyzer=d.get("analyzer", ""),
        )


@dataclass
class ReflectionLog:
    """End-of-day reflection, at most one per date."""

    id: str
    date: str
    content: ReflectionContent = field(default_factory=ReflectionContent)

    def to_dict(self) -> dict:
        return {"id": self.id, "date": self.date, "content": self.content.to_dict()}

    @classmethod
    def from_dict(cls, d: dict) -> ReflectionLog:
        return cls(
            id=d["id"],
            date=d["date"],
            content=ReflectionContent.from_dict(d.get("content", {})),
        )


def generate_id(existing: Iterable[str], prefix: str) -> str:
    """Next ``<prefix>N`` id after the highest numeric suffix in *existing*."""
    numbers = []
    for record_id in existing:
        suffix = record_id[len(prefix):] if record_id.startswith(prefix) else ""
        if suffix.isdigit():
            numbers.append(int(suffix))
    return f"{prefix}{max(numbers, default=0) + 1}"
