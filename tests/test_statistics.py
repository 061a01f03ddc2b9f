# tests/test_statistics.py

from __future__ import annotations

from datetime import timedelta

import pytest

from mirutasu.clock import utcnow
from mirutasu.models import Task
from mirutasu.routes.statistics import weekly_trend


@pytest.mark.parametrize(
    "completed, total, expected",
    [(0, 0, "+0%"), (1, 2, "+0%"), (7, 10, "+20%"), (1, 3, "-17%"), (0, 4, "-50%"), (4, 4, "+50%")],
)
def test_weekly_trend(completed, total, expected):
    assert weekly_trend(completed, total) == expected


def test_statistics_require_auth(client):
    res = client.get("/api/statistics")
    assert res.status_code == 401
    assert res.json() == {"error": "Authentication required"}


def test_empty_statistics(client, user):
    data = client.get("/api/statistics").json()["data"]
    assert data["today"] == {"total": 0, "completed": 0, "completionRate": 0}
    assert data["week"]["trend"] == "+0%"
    assert data["byType"]["gameTasks"] == {"total": 0, "completed": 0, "completionRate": 0}
    assert data["games"] == {"active": 0}


def test_statistics_counts(client, user, db):
    ids = [client.post("/api/tasks", json={"type": "anime", "title": f"ep {i}"}).json()["id"] for i in range(3)]
    client.post(f"/api/tasks/{ids[0]}/complete")
    book = client.post("/api/tasks", json={"type": "book-release", "title": "Vol. 12"}).json()
    # a month old: counted by type, outside today and this week
    row = db.get(Task, book["id"])
    row.created_at = utcnow() - timedelta(days=30)
    db.commit()
    client.post("/api/games/user", json={"gameId": "fgo"})

    res = client.get("/api/statistics")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    data = body["data"]
    assert data["today"] == {"total": 3, "completed": 1, "completionRate": 33}
    assert data["week"] == {"total": 3, "completed": 1, "completionRate": 33, "trend": "-17%"}
    assert data["byType"]["anime"] == {"total": 3, "completed": 1, "completionRate": 33}
    assert data["byType"]["bookReleases"] == {"total": 1, "completed": 0, "completionRate": 0}
    assert data["games"]["active"] == 1
