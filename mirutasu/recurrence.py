"""Turn recurring task templates and game dailies into concrete tasks.

Materialization is idempotent per day: every generated task carries an
``external_id`` naming its origin and date, and a second run for the same day
finds it and skips.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .clock import day_bounds, local_date_of, local_to_utc, local_today, utcnow
from .models import WEEKDAYS, GameMaster, RecurringTask, Task, UserGame
from .security import new_uuid

logger = logging.getLogger(__name__)


def weekday_code(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def is_due(recurrence_type: str, data: Optional[Dict[str, Any]], day: date, anchor: date) -> bool:
    """Whether a recurrence fires on ``day``; ``anchor`` is the local creation date."""
    if day < anchor:
        return False
    data = data or {}
    days = data.get("days") or []

    if recurrence_type == "daily":
        return True
    if recurrence_type == "weekly":
        if days:
            return weekday_code(day) in days
        return day.weekday() == anchor.weekday()
    if recurrence_type == "custom":
        interval = data.get("interval") or 1
        if (day - anchor).days % interval != 0:
            return False
        return not days or weekday_code(day) in days
    logger.warning("Unknown recurrence type %r", recurrence_type)
    return False


def _parse_hhmm(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    hh, mm = value.split(":")
    return time(int(hh), int(mm))


def _created_at_for(day: date, tz_name: str, now: datetime) -> datetime:
    # tasks are listed by creation day, so a task for another day is dated to it
    if day == local_today(tz_name, now):
        return now
    return day_bounds(day, tz_name)[0]


def _already_generated(db: Session, user_id: str, external_id: str) -> bool:
    return (
        db.query(Task.id)
        .filter(Task.user_id == user_id, Task.external_id == external_id)
        .first()
        is not None
    )


def _insert_once(db: Session, task: Task) -> bool:
    """Add a generated task unless a concurrent run already stored its external_id."""
    try:
        with db.begin_nested():
            db.add(task)
    except IntegrityError:
        logger.debug("Task %s already generated elsewhere", task.external_id)
        return False
    return True


def recurring_external_id(recurring_id: str, day: date) -> str:
    return f"recurring:{recurring_id}:{day.isoformat()}"


def game_external_id(game_id: str, task_id: str, day: date) -> str:
    return f"game:{game_id}:{task_id}:{day.isoformat()}"


def materialize_recurring_tasks(
    db: Session,
    day: date,
    tz_name: str,
    user_id: Optional[str] = None,
) -> List[Task]:
    """Create the tasks due on ``day``; ``user_id=None`` processes every user."""
    now = utcnow()
    q = db.query(RecurringTask).filter(RecurringTask.active.is_(True))
    if user_id is not None:
        q = q.filter(RecurringTask.user_id == user_id)

    created: List[Task] = []
    for rt in q.order_by(RecurringTask.created_at).all():
        anchor = local_date_of(rt.created_at, tz_name)
        if not is_due(rt.recurrence_type, rt.recurrence_data, day, anchor):
            continue
        ext_id = recurring_external_id(rt.id, day)
        if _already_generated(db, rt.user_id, ext_id):
            continue

        template = rt.task_template or {}
        at = _parse_hhmm((rt.recurrence_data or {}).get("time"))
        meta = dict(template.get("metadata") or {})
        meta.update({"recurringTaskId": rt.id, "date": day.isoformat()})
        task = Task(
            id=new_uuid(),
            user_id=rt.user_id,
            type=template.get("type", "anime"),
            title=template.get("title", "Untitled"),
            description=template.get("description"),
            priority=template.get("priority", "medium"),
            deadline=local_to_utc(day, at, tz_name) if at else None,
            completed=False,
            source="recurring",
            external_id=ext_id,
            meta=meta,
            created_at=_created_at_for(day, tz_name, now),
            updated_at=now,
        )
        if _insert_once(db, task):
            rt.last_generated = now
            created.append(task)

    db.commit()
    for t in created:
        db.refresh(t)
    logger.info("Materialized %d recurring task(s) for %s", len(created), day.isoformat())
    return created


def materialize_game_tasks(db: Session, user_id: str, day: date, tz_name: str) -> List[Task]:
    """Create today's game-daily tasks for each game the user has active."""
    now = utcnow()
    rows = (
        db.query(UserGame, GameMaster)
        .join(GameMaster, UserGame.game_id == GameMaster.id)
        .filter(UserGame.user_id == user_id, UserGame.active.is_(True))
        .order_by(GameMaster.name)
        .all()
    )

    created: List[Task] = []
    for ug, game in rows:
        settings = ug.settings or {}
        enabled = settings.get("enabledTasks")
        priorities = settings.get("customPriorities") or {}
        for dt in game.daily_tasks or []:
            if enabled is not None and dt["id"] not in enabled:
                continue
            ext_id = game_external_id(game.id, dt["id"], day)
            if _already_generated(db, user_id, ext_id):
                continue
            meta = {"gameId": game.id, "gameTaskId": dt["id"]}
            for key in ("category", "resetTime"):
                if dt.get(key):
                    meta[key] = dt[key]
            task = Task(
                id=new_uuid(),
                user_id=user_id,
                type="game-daily",
                title=f"{game.name}: {dt['name']}",
                description=dt.get("description"),
                priority=priorities.get(dt["id"], dt.get("priority", "medium")),
                completed=False,
                source="recurring",
                external_id=ext_id,
                meta=meta,
                created_at=_created_at_for(day, tz_name, now),
                updated_at=now,
            )
            if _insert_once(db, task):
                created.append(task)

    db.commit()
    for t in created:
        db.refresh(t)
    logger.info("Materialized %d game task(s) for user %s on %s", len(created), user_id, day.isoformat())
    return created
