"""Typer CLI for LifeOS."""

from __future__ import annotations

import logging
import threading
from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lifeos import agenda, journal, timeline
from lifeos.audio import SilentPlayer, SoundBoard, TerminalPlayer
from lifeos.config import load_config
from lifeos.models import Area, CalendarView, ReflectionContent, Task, TaskFilter, TaskStatus, TimerMode
from lifeos.seed import demo_seed, load_seed
from lifeos.session import Session
from lifeos.store import (
    AppState,
    CancelSelection,
    ConfirmSelection,
    EarlyFinish,
    MoveToFlexible,
    PauseTimer,
    RemoveFromSchedule,
    SaveReflection,
    ScheduleTask,
    SelectTask,
    SetPreset,
    SetSound,
    SkipMode,
    StartTimer,
    ToggleHabit,
    ToggleTaskStatus,
    initial_state,
)
from lifeos.tasks import find_project, find_task, group_by_project
from lifeos.timer import backlog, dial_progress, format_time, is_overdue, today_queue

app = typer.Typer(
    name="lifeos",
    help="Personal planning, habits and pomodoro focus in the terminal.",
    no_args_is_help=True,
)
console = Console()

STATUS_MARK = {
    TaskStatus.TODO: "○",
    TaskStatus.IN_PROGRESS: "[yellow]◐[/yellow]",
    TaskStatus.COMPLETING: "[cyan]◑[/cyan]",
    TaskStatus.DONE: "[green]✔[/green]",
}
PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "green"}
AREA_STYLE = {Area.WORK: "blue", Area.RELATIONSHIP: "magenta", Area.SELF: "green"}
HEAT_CHARS = ["[dim]·[/dim]", "[green]░[/green]", "[green]▒[/green]", "[bold green]█[/bold green]"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session(ctx: typer.Context) -> Session:
    return ctx.obj


def _parse_day(value: Optional[str], session: Session) -> date:
    if value is None:
        return session.clock().date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid date '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _parse_area(value: Optional[str]) -> Area | None:
    if value is None or value.upper() == "ALL":
        return None
    try:
        return Area(value.upper())
    except ValueError:
        console.print(f"[red]Invalid area '{value}'. Use: work, relationship, self, all[/red]")
        raise typer.Exit(1)


def _require_task(state: AppState, task_id: str) -> Task:
    task = find_task(state.tasks, task_id)
    if task is None:
        console.print(f"[red]Task {task_id} not found.[/red]")
        raise typer.Exit(1)
    return task


def _bar(pct: float, width: int = 30) -> str:
    filled = int(width * pct / 100)
    return f"[green]{'█' * filled}[/green][dim]{'░' * (width - filled)}[/dim]"


def _project_label(state: AppState, task: Task) -> str:
    project = find_project(state.projects, task.project_id)
    if project is None:
        return ""
    return f"[{AREA_STYLE[project.area]}]{project.title}[/{AREA_STYLE[project.area]}]"


def _slot(task: Task) -> str:
    if task.start_time:
        return f"{task.start_time}-{task.end_time or '?'}"
    if task.due_time:
        return f"due {task.due_time}"
    return ""


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


@app.callback()
def main(
    ctx: typer.Context,
    data: Annotated[Optional[Path], typer.Option("--data", help="JSON seed file (read-only)")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", help="JSON settings file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Load settings and seed data into an in-memory session."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    try:
        settings = load_config(config)
        seed = load_seed(data) if data is not None else demo_seed()
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    state = initial_state(seed.tasks, seed.projects, seed.habits, seed.reflections, settings)
    session = Session(state, sounds=SoundBoard(SilentPlayer(), settings))
    ctx.obj = session
    ctx.call_on_close(session.close)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("tasks")
def list_tasks(
    ctx: typer.Context,
    status_filter: Annotated[str, typer.Option("--filter", "-f", help="ongoing, completed or all")] = "ongoing",
    area: Annotated[Optional[str], typer.Option("--area", "-a", help="work, relationship, self or all")] = None,
    toggle: Annotated[Optional[list[str]], typer.Option("--toggle", help="Flip a task between done and todo")] = None,
) -> None:
    """Tasks grouped by project."""
    session = _session(ctx)
    try:
        task_filter = TaskFilter(status_filter.upper())
    except ValueError:
        console.print(f"[red]Invalid filter '{status_filter}'. Use: ongoing, completed, all[/red]")
        raise typer.Exit(1)
    area_filter = _parse_area(area)

    for task_id in toggle or []:
        _require_task(session.state, task_id)
        session.dispatch(ToggleTaskStatus(task_id))

    state = session.state
    groups = group_by_project(state.tasks, state.projects, task_filter, area_filter)
    if not groups:
        console.print("No tasks match the filter.")
        return

    for group in groups:
        project = group.project
        style = AREA_STYLE[project.area]
        table = Table(
            title=f"[{style}]{project.title}[/{style}] [dim]({project.area.value.lower()})[/dim]",
            title_justify="left",
        )
        table.add_column("", width=3)
        table.add_column("ID", style="bold")
        table.add_column("Task")
        table.add_column("Priority")
        table.add_column("Est / Actual", justify="right")
        table.add_column("Date")
        table.add_column("Slot")
        if not group.tasks:
            table.add_row("", "", "[dim]No tasks[/dim]", "", "", "", "")
        for t in group.tasks:
            prio = t.priority.value if t.priority else ""
            table.add_row(
                STATUS_MARK[t.status],
                t.id,
                t.title,
                f"[{PRIORITY_STYLE.get(prio, 'white')}]{prio}[/]" if prio else "",
                f"{t.estimate_minutes}m / {t.actual_minutes}m",
                t.date or "[dim]unscheduled[/dim]",
                _slot(t),
            )
        console.print(table)


def _parse_drop(slot: str) -> tuple[str, float]:
    """'t4@10' or 't4@10:30' -> ('t4', 10.0) / ('t4', 10.5)."""
    if "@" not in slot:
        console.print(f"[red]Invalid slot '{slot}'. Use TASK@HH or TASK@HH:MM.[/red]")
        raise typer.Exit(1)
    task_id, _, when = slot.partition("@")
    try:
        hour = timeline.time_to_fraction(when) if ":" in when else float(when)
    except ValueError:
        console.print(f"[red]Invalid time '{when}'.[/red]")
        raise typer.Exit(1)
    return task_id.strip(), hour


@app.command()
def plan(
    ctx: typer.Context,
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Day to plan (YYYY-MM-DD)")] = None,
    schedule: Annotated[Optional[list[str]], typer.Option("--schedule", "-s", help="Pin a task: TASK@HH[:MM]")] = None,
    flex: Annotated[Optional[list[str]], typer.Option("--flex", help="Put a task on the day without a time")] = None,
    unpin: Annotated[Optional[list[str]], typer.Option("--unpin", help="Remove a task from its time slot")] = None,
) -> None:
    """Daily timeline with fixed slots, flexible tasks and the unscheduled pool."""
    session = _session(ctx)
    target = _parse_day(day, session)
    date_str = target.isoformat()
    config = session.state.config

    for slot in schedule or []:
        task_id, hour = _parse_drop(slot)
        _require_task(session.state, task_id)
        if not config.day_start_hour <= hour < config.day_end_hour:
            console.print(f"[red]{slot}: time is outside the timeline.[/red]")
            raise typer.Exit(1)
        session.dispatch(ScheduleTask(task_id, date_str, hour))
    for task_id in flex or []:
        _require_task(session.state, task_id)
        session.dispatch(MoveToFlexible(task_id, date_str))
    for task_id in unpin or []:
        _require_task(session.state, task_id)
        session.dispatch(RemoveFromSchedule(task_id))

    state = session.state
    day_plan = timeline.partition_day(state.tasks, date_str)

    now = session.clock()
    now_hour = None
    if target == now.date():
        offset = timeline.now_indicator_offset(now, config)
        if offset is not None:
            now_hour = timeline.pixel_to_hour(offset, config)

    by_hour: dict[int, list[Task]] = {}
    for t in day_plan.scheduled:
        by_hour.setdefault(int(timeline.time_to_fraction(t.start_time or "00:00")), []).append(t)

    table = Table(title=f"Plan for {target.strftime('%A, %d/%m')}", title_justify="left")
    table.add_column("Hour", style="dim")
    table.add_column("Scheduled")
    for hour in timeline.timeline_hours(config)[:-1]:
        cells = []
        for t in by_hour.get(hour, []):
            mark = "[strike]" if t.is_done else ""
            end = "[/strike]" if t.is_done else ""
            cells.append(f"{mark}{t.start_time}-{t.end_time} {t.title}{end} [dim]{t.id}[/dim] {_project_label(state, t)}")
        label = f"{hour:02d}:00"
        if hour == now_hour:
            label = f"[bold red]{label} ◀ now[/bold red]"
        table.add_row(label, "\n".join(cells))
    console.print(table)

    console.print("\n[bold underline]Flexible[/bold underline]")
    if not day_plan.flexible:
        console.print("  [dim]Nothing flexible on this day.[/dim]")
    for t in day_plan.flexible:
        due = f"  [dim]due {t.due_time}[/dim]" if t.due_time else ""
        console.print(f"  {STATUS_MARK[t.status]} [bold]{t.id}[/bold]  {t.title}  ({t.estimate_minutes}m){due}")

    console.print("\n[bold underline]Unscheduled[/bold underline]")
    if not day_plan.unscheduled:
        console.print("  [dim]All tasks are planned.[/dim]")
    for t in day_plan.unscheduled:
        when = f"  [dim]{t.date}[/dim]" if t.date else ""
        console.print(f"  [bold]{t.id}[/bold]  {t.title}  ({t.estimate_minutes}m){when}")


@app.command()
def calendar(
    ctx: typer.Context,
    view: Annotated[str, typer.Option("--view", help="month or week")] = "month",
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Any day in the period (YYYY-MM-DD)")] = None,
    area: Annotated[Optional[str], typer.Option("--area", "-a", help="work, relationship, self or all")] = None,
    step: Annotated[int, typer.Option("--step", help="Periods to move forward (negative for back)")] = 0,
) -> None:
    """Month or week calendar of dated tasks."""
    session = _session(ctx)
    try:
        mode = CalendarView(view.upper())
    except ValueError:
        console.print(f"[red]Invalid view '{view}'. Use: month, week[/red]")
        raise typer.Exit(1)
    current = agenda.shift(_parse_day(day, session), mode, step)
    area_filter = _parse_area(area)
    state = session.state
    today = session.clock().date()

    weeks = agenda.month_grid(current) if mode == CalendarView.MONTH else [agenda.week_days(current)]
    shown = 2 if mode == CalendarView.MONTH else 4

    title = current.strftime("%B %Y") if mode == CalendarView.MONTH else f"Week of {weeks[0][0].isoformat()}"
    table = Table(title=title, show_lines=True)
    for name in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"):
        table.add_column(name, width=16, overflow="ellipsis")

    for week in weeks:
        cells = []
        for d in week:
            day_tasks = agenda.tasks_for_day(state.tasks, state.projects, d, area_filter)
            number = f"{d.day}"
            if d == today:
                number = f"[reverse]{number}[/reverse]"
            elif mode == CalendarView.MONTH and d.month != current.month:
                number = f"[dim]{number}[/dim]"
            lines = [number]
            for t in day_tasks[:shown]:
                lines.append(f"[strike]{t.title}[/strike]" if t.is_done else t.title)
            if len(day_tasks) > shown:
                lines.append(f"[dim]+{len(day_tasks) - shown} more[/dim]")
            cells.append("\n".join(lines))
        table.add_row(*cells)
    console.print(table)


@app.command()
def reflect(
    ctx: typer.Context,
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Reflection date (YYYY-MM-DD)")] = None,
    well_done: Annotated[Optional[str], typer.Option(help="What went well")] = None,
    kaizen: Annotated[Optional[str], typer.Option(help="What to improve")] = None,
    observer: Annotated[Optional[str], typer.Option(help="What you noticed")] = None,
    analyzer: Annotated[Optional[str], typer.Option(help="Why it happened")] = None,
) -> None:
    """Daily review: progress, habits, activity heatmap and reflection notes."""
    session = _session(ctx)
    target = _parse_day(day, session)
    date_str = target.isoformat()

    if any(v is not None for v in (well_done, kaizen, observer, analyzer)):
        content = ReflectionContent(
            well_done=well_done or "",
            kaizen=kaizen or "",
            observer=observer or "",
            analyzer=analyzer or "",
        )
        session.dispatch(SaveReflection(date_str, content))

    state = session.state
    today = session.clock().date()
    today_str = today.isoformat()
    pct = journal.completion_percent(state.tasks)
    done_count = sum(1 for t in state.tasks if t.is_done)
    work_hrs = journal.work_minutes_on(state.tasks, today_str) / 60

    console.print("\n[bold underline]Review[/bold underline]\n")
    console.print(f"  Tasks:    {_bar(pct)} {pct}%  ({done_count}/{len(state.tasks)} done)")
    console.print(f"  Focused today: [bold]{work_hrs:.1f}h[/bold]")
    habit_pct = journal.habits_progress(state.habits, today_str)
    console.print(f"  Habits:   {_bar(habit_pct)} {habit_pct}%")

    hours = journal.project_hours(state.projects)
    if hours:
        console.print("\n[bold underline]Hours by project[/bold underline]")
        for title, logged in hours.items():
            console.print(f"  {title:<28} {logged:>7.1f}h")

    cells = journal.activity_heatmap(state.tasks, today)
    console.print("\n[bold underline]Activity (12 weeks)[/bold underline]")
    for row in range(7):
        console.print("  " + " ".join(HEAT_CHARS[c.level] for c in cells[row::7]))

    console.print()
    console.print(_mini_calendar(target, state))

    log = journal.reflection_for(state.reflections, date_str)
    content = log.content if log is not None else journal.empty_reflection()
    if content.is_empty():
        console.print(f"\n[dim]No reflection for {date_str}.[/dim]")
        return
    body = Table.grid(padding=(0, 2))
    body.add_row("[bold]Well done[/bold]", content.well_done)
    body.add_row("[bold]Kaizen[/bold]", content.kaizen)
    body.add_row("[bold]Observer[/bold]", content.observer)
    body.add_row("[bold]Analyzer[/bold]", content.analyzer)
    console.print(Panel(body, title=f"Reflection {date_str}", title_align="left"))


def _mini_calendar(target: date, state: AppState) -> Table:
    """Monday-first month with the selected day reversed and logged days green."""
    logged = {r.date for r in state.reflections if not r.content.is_empty()}
    table = Table(title=target.strftime("%B %Y"), box=None, title_justify="left")
    for name in ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"):
        table.add_column(name, justify="right")

    cells = []
    for number in agenda.month_days(target.year, target.month):
        if number is None:
            cells.append("")
            continue
        label = str(number)
        if number == target.day:
            label = f"[reverse]{label}[/reverse]"
        elif target.replace(day=number).isoformat() in logged:
            label = f"[green]{label}[/green]"
        cells.append(label)
    cells.extend([""] * (-len(cells) % 7))
    for i in range(0, len(cells), 7):
        table.add_row(*cells[i:i + 7])
    return table


@app.command()
def habits(
    ctx: typer.Context,
    toggle: Annotated[Optional[list[str]], typer.Option("--toggle", help="Tick or untick a habit for today")] = None,
) -> None:
    """Today's habit checklist."""
    session = _session(ctx)
    for habit_id in toggle or []:
        if not any(h.id == habit_id for h in session.state.habits):
            console.print(f"[red]Habit {habit_id} not found.[/red]")
            raise typer.Exit(1)
        session.dispatch(ToggleHabit(habit_id))

    state = session.state
    today_str = session.today()
    if not state.habits:
        console.print("No habits yet.")
        return
    table = Table(title="Habits")
    table.add_column("", width=3)
    table.add_column("ID", style="bold")
    table.add_column("Habit")
    table.add_column("Streak", justify="right")
    for h in state.habits:
        done = journal.is_done_on(h, today_str)
        table.add_row(STATUS_MARK[TaskStatus.DONE] if done else STATUS_MARK[TaskStatus.TODO], h.id, h.title, f"{h.streak}d")
    console.print(table)


# ---------------------------------------------------------------------------
# Focus
# ---------------------------------------------------------------------------


def _render_focus(state: AppState) -> Panel:
    t = state.timer
    pct = (1 - dial_progress(t)) * 100
    clock = Text(format_time(t.time_left), style="bold", justify="center")
    mode = Text(t.mode.value.replace("_", " "), style="dim", justify="center")
    active = state.active_task
    working = f"Working on: [bold]{active.title}[/bold]" if active else "[dim]No task selected[/dim]"
    sound = "  [dim]♪ rain[/dim]" if t.ambient_playing else ""
    return Panel(
        Group(clock, mode, Text.from_markup(f"{_bar(pct, 40)}"), Text.from_markup(working + sound)),
        title="Zen Focus Mode",
        width=50,
    )


def _print_queue(session: Session) -> None:
    state = session.state
    today_str = session.today()
    now_hhmm = session.clock().strftime("%H:%M")
    console.print("[bold underline]Today[/bold underline]")
    queue = today_queue(state.tasks, today_str)
    if not queue:
        console.print("  [dim]Nothing scheduled today.[/dim]")
    for t in queue:
        flag = "  [bold yellow]OVERDUE[/bold yellow]" if is_overdue(t, now_hhmm) else ""
        console.print(f"  [bold]{t.id}[/bold]  {_slot(t) or '--:--'}  {t.title}{flag}")
    later = backlog(state.tasks, today_str)
    if later:
        console.print("[bold underline]Other[/bold underline]")
        for t in later:
            console.print(f"  [bold]{t.id}[/bold]  {t.title}  [dim]{t.date or 'unscheduled'}[/dim]")


@app.command()
def focus(
    ctx: typer.Context,
    task_id: Annotated[Optional[str], typer.Option("--task", "-t", help="Task to focus on")] = None,
    minutes: Annotated[Optional[int], typer.Option("--minutes", "-m", help="Countdown length (preset: 15, 25, 45, 60, 90)")] = None,
    sound: Annotated[bool, typer.Option("--sound/--no-sound", help="Ambient rain while running; bell at the end")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Switch even if a fixed task is overdue")] = False,
    mode: Annotated[str, typer.Option("--mode", help="pomodoro, short_break or long_break")] = "pomodoro",
    show_list: Annotated[bool, typer.Option("--list", help="Only show today's focus queue")] = False,
) -> None:
    """Run a pomodoro or break countdown. Only pomodoros credit the task."""
    session = _session(ctx)
    if show_list:
        _print_queue(session)
        return

    if sound:
        session.sounds = SoundBoard(TerminalPlayer(console), session.state.config)
        session.dispatch(SetSound(True))

    if task_id is not None:
        task = _require_task(session.state, task_id)
        if task.is_done:
            console.print(f"[yellow]{task_id} is already done.[/yellow]")
            raise typer.Exit(1)
        state = session.dispatch(SelectTask(task_id))
        overdue = state.overdue_task
        if overdue is not None:
            console.print(
                f"[bold yellow]⚠ '{overdue.title}' was scheduled for {overdue.start_time} "
                f"and is not done yet.[/bold yellow]"
            )
            if yes or typer.confirm("Switch anyway?", default=False):
                session.dispatch(ConfirmSelection())
            else:
                session.dispatch(CancelSelection())
                console.print("Selection cancelled.")
                raise typer.Exit(0)

    try:
        timer_mode = TimerMode(mode.upper())
    except ValueError:
        console.print(f"[red]Invalid mode '{mode}'. Use: pomodoro, short_break, long_break[/red]")
        raise typer.Exit(1)
    while session.state.timer.mode != timer_mode:
        session.dispatch(SkipMode())

    if minutes is not None:
        if minutes <= 0:
            console.print("[red]Minutes must be positive.[/red]")
            raise typer.Exit(1)
        if minutes not in session.state.config.presets:
            console.print(f"[dim]{minutes} min is not a preset; using it anyway.[/dim]")
        session.dispatch(SetPreset(minutes))

    started_mode = session.state.timer.mode
    finished = threading.Event()
    with Live(_render_focus(session.state), console=console, refresh_per_second=4, transient=True) as live:

        def on_change(state: AppState) -> None:
            live.update(_render_focus(state))
            if not state.timer.active:
                finished.set()

        unsubscribe = session.subscribe(on_change)
        session.dispatch(StartTimer())
        try:
            while not finished.wait(0.1):
                pass
        except KeyboardInterrupt:
            session.dispatch(PauseTimer())
        finally:
            unsubscribe()

    _report_focus(session, task_id, completed=session.state.timer.mode != started_mode)


def _report_focus(session: Session, task_id: Optional[str], completed: bool) -> None:
    t = session.state.timer
    if completed:
        console.print(f"[green]Countdown complete.[/green] Next: {t.mode.value.replace('_', ' ').lower()} ({format_time(t.time_left)})")
    else:
        console.print(f"Paused at {format_time(t.time_left)}.")
        if task_id is not None and t.active_task_id == task_id and typer.confirm("Mark task done now?", default=False):
            session.dispatch(EarlyFinish())

    if task_id is not None:
        task = find_task(session.state.tasks, task_id)
        if task is not None:
            status = "[green]done[/green]" if task.is_done else task.status.value.lower()
            console.print(f"  {task.id}  {task.title}: {task.actual_minutes}m logged of {task.estimate_minutes}m ({status})")
