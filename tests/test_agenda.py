from datetime import date

from lifeos import agenda
from lifeos.models import Area, CalendarView, Project, Task


def test_start_of_week_is_sunday():
    assert agenda.start_of_week(date(2026, 10, 19)) == date(2026, 10, 18)
    assert agenda.start_of_week(date(2026, 10, 18)) == date(2026, 10, 18)
    days = agenda.week_days(date(2026, 10, 21))
    assert days[0] == date(2026, 10, 18)
    assert days[-1] == date(2026, 10, 24)


def test_month_grid_covers_whole_weeks():
    weeks = agenda.month_grid(date(2026, 10, 19))
    assert len(weeks) == 5
    assert weeks[0][0] == date(2026, 9, 27)
    assert weeks[-1][-1] == date(2026, 10, 31)
    assert all(len(w) == 7 for w in weeks)


def test_shift():
    assert agenda.shift(date(2026, 1, 31), CalendarView.MONTH, 1) == date(2026, 2, 28)
    assert agenda.shift(date(2026, 1, 15), CalendarView.MONTH, -1) == date(2025, 12, 15)
    assert agenda.shift(date(2026, 10, 19), CalendarView.WEEK, 2) == date(2026, 11, 2)


def test_month_days_has_monday_first_blanks():
    days = agenda.month_days(2026, 10)
    assert days[:4] == [None, None, None, 1]
    assert days[-1] == 31


def test_tasks_for_day_filters_by_area():
    projects = [Project("p1", "Dev", Area.WORK), Project("p2", "Gym", Area.SELF)]
    tasks = [
        Task("a", "p1", "Code", date="2026-10-19"),
        Task("b", "p2", "Lift", date="2026-10-19"),
        Task("c", "p2", "Swim", date="2026-10-20"),
    ]
    day = date(2026, 10, 19)
    assert [t.id for t in agenda.tasks_for_day(tasks, projects, day)] == ["a", "b"]
    assert [t.id for t in agenda.tasks_for_day(tasks, projects, day, Area.SELF)] == ["b"]
