from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ..auth import get_app_settings, require_user
from ..clock import completion_rate, day_bounds, local_today, week_bounds
from ..config import Settings
from ..db import get_db
from ..models import Task, User, UserGame
from ..schemas import GameStats, RateStats, StatisticsData, StatisticsOut, TypeStats, WeekStats

router = APIRouter(prefix="/api/statistics", tags=["statistics"])

_COMPLETED = func.sum(case((Task.completed.is_(True), 1), else_=0))

TYPE_KEYS = {"anime": "anime", "game-daily": "game_tasks", "book-release": "book_releases"}


def weekly_trend(completed: int, total: int) -> str:
    """Distance of the week's completion rate from 50%, e.g. "+20%" or "-15%"."""
    if total == 0:
        return "+0%"
    rate = completed * 100 / total
    if rate >= 50:
        return f"+{int(rate - 50 + 0.5)}%"
    return f"-{int(50 - rate + 0.5)}%"


def _rate_stats(db: Session, user_id: str, start: datetime, end: datetime) -> RateStats:
    total, completed = (
        db.query(func.count(Task.id), _COMPLETED)
        .filter(Task.user_id == user_id, Task.created_at >= start, Task.created_at < end)
        .one()
    )
    total, completed = int(total or 0), int(completed or 0)
    return RateStats(total=total, completed=completed, completion_rate=completion_rate(completed, total))


@router.get("", response_model=StatisticsOut)
def get_statistics(
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    today = local_today(settings.timezone)
    day_stats = _rate_stats(db, user.id, *day_bounds(today, settings.timezone))
    week = _rate_stats(db, user.id, *week_bounds(today, settings.timezone))
    week_stats = WeekStats(**week.model_dump(), trend=weekly_trend(week.completed, week.total))

    by_type = {}
    rows = (
        db.query(Task.type, func.count(Task.id), _COMPLETED)
        .filter(Task.user_id == user.id)
        .group_by(Task.type)
        .all()
    )
    for task_type, total, completed in rows:
        key = TYPE_KEYS.get(task_type)
        if key is None:
            continue
        total, completed = int(total or 0), int(completed or 0)
        by_type[key] = RateStats(total=total, completed=completed, completion_rate=completion_rate(completed, total))

    active_games = (
        db.query(func.count())
        .select_from(UserGame)
        .filter(UserGame.user_id == user.id, UserGame.active.is_(True))
        .scalar()
    )

    data = StatisticsData(
        today=day_stats,
        week=week_stats,
        by_type=TypeStats(**by_type),
        games=GameStats(active=active_games or 0),
    )
    return StatisticsOut(data=data)
