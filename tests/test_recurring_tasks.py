# tests/test_recurring_tasks.py

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from mirutasu import recurrence
from mirutasu.clock import local_today, utcnow
from mirutasu.models import RecurringTask, Task
from mirutasu.recurrence import materialize_recurring_tasks, recurring_external_id, weekday_code
from mirutasu.security import new_uuid


def add_recurring(client, recurrence_type="daily", data=None, **template) -> dict:
    body = {
        "taskTemplate": {"type": "anime", "title": "Watch the simulcast", **template},
        "recurrenceType": recurrence_type,
        "recurrenceData": data or {},
    }
    res = client.post("/api/recurring-tasks", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_and_list(client, user):
    rt = add_recurring(client, data={"time": "21:30"}, priority="high", metadata={"channel": "TOKYO MX"})
    assert rt["userId"] == user["id"]
    assert rt["active"] is True
    assert rt["lastGenerated"] is None
    assert rt["taskTemplate"]["priority"] == "high"
    assert rt["taskTemplate"]["metadata"] == {"channel": "TOKYO MX"}
    assert rt["recurrenceData"]["time"] == "21:30"

    rows = client.get("/api/recurring-tasks").json()["recurringTasks"]
    assert [r["id"] for r in rows] == [rt["id"]]


def test_create_validation(client, user):
    res = client.post("/api/recurring-tasks", json={
        "taskTemplate": {"type": "anime", "title": "x"},
        "recurrenceType": "daily",
        "recurrenceData": {"time": "25:00"},
    })
    assert res.status_code == 400

    res = client.post("/api/recurring-tasks", json={
        "taskTemplate": {"type": "anime", "title": "x"},
        "recurrenceType": "monthly",
        "recurrenceData": {},
    })
    assert res.status_code == 400

    res = client.post("/api/recurring-tasks", json={
        "taskTemplate": {"type": "anime", "title": "x"},
        "recurrenceType": "weekly",
        "recurrenceData": {"days": ["funday"]},
    })
    assert res.status_code == 400


def test_update_and_delete(client, user):
    rt = add_recurring(client)
    res = client.put(f"/api/recurring-tasks/{rt['id']}", json={
        "recurrenceType": "weekly",
        "recurrenceData": {"days": ["sat", "sun"]},
        "active": False,
    })
    assert res.status_code == 200
    body = res.json()
    assert body["recurrenceType"] == "weekly"
    assert body["recurrenceData"]["days"] == ["sat", "sun"]
    assert body["active"] is False
    assert body["taskTemplate"]["title"] == "Watch the simulcast"

    assert client.delete(f"/api/recurring-tasks/{rt['id']}").json() == {"message": "Recurring task deleted"}
    res = client.put(f"/api/recurring-tasks/{rt['id']}", json={"active": True})
    assert res.status_code == 404
    assert res.json() == {"error": "Recurring task not found"}


def test_recurring_tasks_are_private(client, user, other_client, other_user):
    rt = add_recurring(client)
    assert other_client.get("/api/recurring-tasks").json()["recurringTasks"] == []
    assert other_client.delete(f"/api/recurring-tasks/{rt['id']}").status_code == 404
    assert other_client.post("/api/recurring-tasks/generate").json()["count"] == 0


def test_generate_today_is_idempotent(client, user, settings):
    rt = add_recurring(client, data={"time": "21:00"}, description="Episode drops at 21:00")
    today = local_today(settings.timezone)

    res = client.post("/api/recurring-tasks/generate")
    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 1
    assert body["date"] == today.isoformat()

    task = body["tasks"][0]
    assert task["title"] == "Watch the simulcast"
    assert task["description"] == "Episode drops at 21:00"
    assert task["source"] == "recurring"
    assert task["externalId"] == f"recurring:{rt['id']}:{today.isoformat()}"
    assert task["metadata"]["recurringTaskId"] == rt["id"]
    assert task["deadline"] == f"{today.isoformat()}T21:00:00Z"

    assert client.post("/api/recurring-tasks/generate").json()["count"] == 0
    assert client.get("/api/tasks/today").json()["summary"]["total"] == 1

    stored = client.get("/api/recurring-tasks").json()["recurringTasks"][0]
    assert stored["lastGenerated"] is not None


def test_generate_for_future_date(client, user, settings):
    add_recurring(client)
    day = local_today(settings.timezone) + timedelta(days=3)

    body = client.post("/api/recurring-tasks/generate", json={"date": day.isoformat()}).json()
    assert body["count"] == 1
    assert body["tasks"][0]["createdAt"] == f"{day.isoformat()}T00:00:00Z"
    assert body["tasks"][0]["deadline"] is None


def test_weekly_only_on_listed_days(client, user, settings):
    day = local_today(settings.timezone) + timedelta(days=1)
    other = weekday_code(day + timedelta(days=1))
    add_recurring(client, recurrence_type="weekly", data={"days": [other]})

    assert client.post("/api/recurring-tasks/generate", json={"date": day.isoformat()}).json()["count"] == 0
    nxt = (day + timedelta(days=1)).isoformat()
    assert client.post("/api/recurring-tasks/generate", json={"date": nxt}).json()["count"] == 1


def test_inactive_templates_are_skipped(client, user):
    rt = add_recurring(client)
    client.put(f"/api/recurring-tasks/{rt['id']}", json={"active": False})
    assert client.post("/api/recurring-tasks/generate").json()["count"] == 0


def test_materialize_for_every_user(client, user, other_client, other_user, db, settings):
    add_recurring(client)
    add_recurring(other_client, title="Other show")
    day = local_today(settings.timezone)

    created = materialize_recurring_tasks(db, day, settings.timezone)
    assert len(created) == 2
    assert {t.user_id for t in created} == {user["id"], other_user["id"]}
    assert all(rt.last_generated is not None for rt in db.query(RecurringTask).all())
    assert materialize_recurring_tasks(db, day, settings.timezone) == []


def test_generation_skips_rows_stored_by_a_concurrent_run(client, user, db, settings, monkeypatch):
    rt = add_recurring(client)
    day = local_today(settings.timezone)
    assert len(materialize_recurring_tasks(db, day, settings.timezone)) == 1

    # both runs passed the existence check; the second insert must lose
    monkeypatch.setattr(recurrence, "_already_generated", lambda *args: False)
    assert materialize_recurring_tasks(db, day, settings.timezone) == []
    assert client.post("/api/recurring-tasks/generate").json()["count"] == 0

    ext_id = recurring_external_id(rt["id"], day)
    assert db.query(Task).filter(Task.external_id == ext_id).count() == 1


def test_game_generation_skips_rows_stored_by_a_concurrent_run(client, user, monkeypatch):
    client.post("/api/games/user", json={"gameId": "genshin"})
    assert client.post("/api/games/user/generate-tasks").json()["count"] == 3

    monkeypatch.setattr(recurrence, "_already_generated", lambda *args: False)
    assert client.post("/api/games/user/generate-tasks").json()["count"] == 0
    assert client.get("/api/tasks", params={"type": "game-daily"}).json()["pagination"]["count"] == 3


def test_external_id_is_unique_per_user(client, user, other_client, other_user, db):
    now = utcnow()

    def generated(user_id):
        return Task(id=new_uuid(), user_id=user_id, type="anime", title="x", external_id="recurring:abc:2026-10-18",
                    created_at=now, updated_at=now)

    db.add_all([generated(user["id"]), generated(other_user["id"])])
    db.commit()

    db.add(generated(user["id"]))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    # manual tasks have no external_id and never collide
    db.add_all([Task(id=new_uuid(), user_id=user["id"], type="anime", title=f"m{i}", created_at=now, updated_at=now)
                for i in range(2)])
    db.commit()
