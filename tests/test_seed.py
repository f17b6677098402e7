import json
from datetime import date

import pytest

from lifeos.models import TaskStatus
from lifeos.seed import demo_seed, load_seed


def test_demo_seed_is_dated_from_today():
    seed = demo_seed(date(2026, 10, 19))
    assert [p.id for p in seed.projects] == ["p1", "p2", "p3", "p4"]
    assert [t.id for t in seed.tasks] == ["t1", "t2", "t3", "t4", "t5"]
    t2 = seed.tasks[1]
    assert t2.status == TaskStatus.IN_PROGRESS
    assert (t2.date, t2.start_time, t2.end_time) == ("2026-10-19", "14:00", "16:00")
    assert seed.tasks[4].date == ""
    assert seed.habits[1].completed_dates == ["2026-10-18", "2026-10-19"]


def test_load_seed(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({
        "projects": [{"id": "p1", "title": "Dev", "area": "WORK"}],
        "tasks": [{"id": "t1", "projectId": "p1", "title": "Code", "status": "IN_PROGRESS"}],
        "reflections": [{"id": "r1", "date": "2026-10-19", "content": {"wellDone": "Focus"}}],
    }))
    seed = load_seed(path)
    assert seed.projects[0].title == "Dev"
    assert seed.tasks[0].status == TaskStatus.IN_PROGRESS
    assert seed.habits == []
    assert seed.reflections[0].content.well_done == "Focus"


def test_load_seed_errors(tmp_path):
    with pytest.raises(ValueError, match="does not exist"):
        load_seed(tmp_path / "missing.json")

    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"tasks": [{"id": "t1"}]}))
    with pytest.raises(ValueError, match="invalid record"):
        load_seed(path)

    path.write_text(json.dumps({"tasks": [{"id": "t1", "title": "x", "status": "LATER"}]}))
    with pytest.raises(ValueError, match="invalid record"):
        load_seed(path)


def test_load_seed_rejects_misshapen_collections(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"tasks": {"t1": {"id": "t1", "title": "x"}}}))
    with pytest.raises(ValueError, match="invalid record"):
        load_seed(path)

    path.write_text(json.dumps({"habits": ["Run", "Read"]}))
    with pytest.raises(ValueError, match="invalid record"):
        load_seed(path)
