"""Task and project collection operations shared by every view.

All functions are pure: they return new lists and never mutate their
inputs. Unknown ids and blank titles leave the collection unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any

from lifeos.models import (
    AREA_STYLES,
    Area,
    Priority,
    Project,
    Task,
    TaskFilter,
    TaskStatus,
    generate_id,
)

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATE_MINUTES = 30

_TASK_FIELDS = {f.name for f in fields(Task)} - {"id"}


@dataclass
class ProjectGroup:
    """A project together with the tasks shown under it."""

    project: Project
    tasks: list[Task] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)


def find_project(projects: list[Project], project_id: str) -> Project | None:
    return next((p for p in projects if p.id == project_id), None)


# ---------------------------------------------------------------------------
# Task mutations
# ---------------------------------------------------------------------------


def update_task(tasks: list[Task], task_id: str, **changes: Any) -> list[Task]:
    """Shallow-merge *changes* into the matching task. No cross-field checks."""
    unknown = set(changes) - _TASK_FIELDS
    if unknown:
        raise TypeError(f"Unknown task fields: {', '.join(sorted(unknown))}")
    if find_task(tasks, task_id) is None:
        logger.debug("update_task: no task %s", task_id)
        return list(tasks)
    return [replace(t, **changes) if t.id == task_id else t for t in tasks]


def toggle_status(tasks: list[Task], task_id: str) -> list[Task]:
    """DONE goes back to TODO; every other status becomes DONE."""
    result = []
    for t in tasks:
        if t.id == task_id:
            status = TaskStatus.TODO if t.status == TaskStatus.DONE else TaskStatus.DONE
            t = replace(t, status=status)
        result.append(t)
    return result


def set_task_status(tasks: list[Task], task_id: str, status: TaskStatus) -> list[Task]:
    return update_task(tasks, task_id, status=status)


def credit_minutes(tasks: list[Task], task_id: str, minutes: int) -> list[Task]:
    """Add focused minutes to a task's actual time."""
    return [
        replace(t, actual_minutes=t.actual_minutes + minutes) if t.id == task_id else t
        for t in tasks
    ]


def delete_task(tasks: list[Task], task_id: str) -> list[Task]:
    return [t for t in tasks if t.id != task_id]


def add_task(tasks: list[Task], projects: list[Project], draft: dict[str, Any]) -> list[Task]:
    """Append a new task built from *draft*. Blank titles are rejected."""
    title = (draft.get("title") or "").strip()
    if not title:
        logger.debug("add_task: blank title, ignoring")
        return list(tasks)

    default_project = projects[0].id if projects else ""
    priority = draft.get("priority") or Priority.MEDIUM
    task = Task(
        id=generate_id((t.id for t in tasks), "t"),
        project_id=draft.get("project_id") or default_project,
        title=title,
        description=draft.get("description") or "",
        status=TaskStatus.TODO,
        estimate_minutes=draft.get("estimate_minutes") or DEFAULT_ESTIMATE_MINUTES,
        actual_minutes=0,
        is_fixed=draft.get("is_fixed", False),
        start_time=draft.get("start_time"),
        end_time=draft.get("end_time"),
        due_time=draft.get("due_time"),
        date=draft.get("date") or "",
        order=len(tasks),
        priority=Priority(priority),
    )
    return [*tasks, task]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def add_project(projects: list[Project], title: str, area: Area = Area.WORK) -> list[Project]:
    """Append a project styled after its area. Blank titles are rejected."""
    title = (title or "").strip()
    if not title:
        logger.debug("add_project: blank title, ignoring")
        return list(projects)
    area = Area(area)
    color, bg = AREA_STYLES[area]
    project = Project(
        id=generate_id((p.id for p in projects), "p"),
        title=title,
        area=area,
        color=color,
        bg=bg,
        total_actual_hours=0.0,
    )
    return [*projects, project]


def update_project(projects: list[Project], project_id: str, title: str, area: Area) -> list[Project]:
    """Rename / re-area a project, re-deriving its colors."""
    title = (title or "").strip()
    if not title:
        return list(projects)
    area = Area(area)
    color, bg = AREA_STYLES[area]
    return [
        replace(p, title=title, area=area, color=color, bg=bg) if p.id == project_id else p
        for p in projects
    ]


def delete_project(
    projects: list[Project],
    tasks: list[Task],
    project_id: str,
) -> tuple[list[Project], list[Task]]:
    """Remove a project and every task that belongs to it."""
    remaining_projects = [p for p in projects if p.id != project_id]
    remaining_tasks = [t for t in tasks if t.project_id != project_id]
    removed = len(tasks) - len(remaining_tasks)
    if removed:
        logger.debug("delete_project %s cascaded to %d task(s)", project_id, removed)
    return remaining_projects, remaining_tasks


# ---------------------------------------------------------------------------
# Filtering / grouping
# ---------------------------------------------------------------------------


def tasks_on(tasks: list[Task], date: str) -> list[Task]:
    return [t for t in tasks if t.date == date]


def filter_by_status(tasks: list[Task], task_filter: TaskFilter) -> list[Task]:
    if task_filter == TaskFilter.ONGOING:
        return [t for t in tasks if not t.is_done]
    if task_filter == TaskFilter.COMPLETED:
        return [t for t in tasks if t.is_done]
    return list(tasks)


def filter_by_area(tasks: list[Task], projects: list[Project], area: Area | None) -> list[Task]:
    """Tasks whose owning project is in *area*; None means every area."""
    if area is None:
        return list(tasks)
    project_ids = {p.id for p in projects if p.area == area}
    return [t for t in tasks if t.project_id in project_ids]


def group_by_project(
    tasks: list[Task],
    projects: list[Project],
    task_filter: TaskFilter = TaskFilter.ONGOING,
    area: Area | None = None,
) -> list[ProjectGroup]:
    """Group filtered tasks under their projects, in project list order.

    Empty projects stay visible only in the ONGOING view, where they are
    still a place to add work.
    """
    visible = filter_by_status(tasks, task_filter)
    groups = []
    for project in projects:
        if area is not None and project.area != area:
            continue
        group = ProjectGroup(project, [t for t in visible if t.project_id == project.id])
        if group.tasks or task_filter == TaskFilter.ONGOING:
            groups.append(group)
    return groups
