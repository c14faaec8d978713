"""Shared fixtures: a small plan document dated relative to today."""

import json
from datetime import date, datetime, time, timedelta

import pytest


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def local_now(today):
    return datetime.combine(today, time(12, 0)).astimezone()


@pytest.fixture
def plan_doc(today):
    """Two active projects and one archived; Thesis has a dependency chain."""
    return {
        "profile": {"baseline_daily_min": 60, "buffer_pct": 0.1, "weights": {"risk": 1.0}},
        "projects": [
            {
                "id": "p1",
                "name": "Thesis",
                "start_date": (today - timedelta(days=14)).isoformat(),
                "target_date": (today + timedelta(days=75)).isoformat(),
                "status": "active",
            },
            {"id": "p2", "name": "Blog", "start_date": (today - timedelta(days=30)).isoformat()},
            {"id": "p3", "name": "Old", "start_date": "2020-01-01", "status": "archived"},
        ],
        "nodes": [
            {"id": "n1", "project_id": "p1", "title": "Chapter 1", "due_date": (today + timedelta(days=31)).isoformat()},
            {"id": "n2", "project_id": "p2", "title": "Posts"},
        ],
        "work_items": [
            {"id": "w1", "node_id": "n1", "title": "Outline", "planned_min": 60, "logged_min": 60, "status": "done"},
            {
                "id": "w2",
                "node_id": "n1",
                "title": "Draft",
                "planned_min": 100,
                "logged_min": 60,
                "units_total": 10,
                "units_done": 3,
                "status": "in_progress",
                "depends_on": ["w1"],
            },
            {"id": "w3", "node_id": "n1", "title": "Edit", "planned_min": 90, "depends_on": ["w2"]},
            {
                "id": "w4",
                "node_id": "n2",
                "title": "Write post",
                "planned_min": 45,
                "min_session_min": 15,
                "max_session_min": 45,
                "preferred_session_min": 45,
            },
            {"id": "w5", "node_id": "n2", "title": "Old draft", "planned_min": 30, "status": "archived"},
        ],
        "sessions": [
            {
                "id": "s1",
                "work_item_id": "w2",
                "started_at": datetime.combine(today - timedelta(days=1), time(9, 0)).isoformat(),
                "minutes": 60,
            },
        ],
    }


@pytest.fixture
def plan_file(tmp_path, plan_doc):
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(plan_doc, indent=2))
    return path
