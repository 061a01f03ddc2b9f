from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_app_settings, require_user
from ..clock import local_today, utcnow
from ..config import Settings
from ..db import get_db
from ..models import GameMaster, User, UserGame
from ..recurrence import materialize_game_tasks
from ..schemas import (
    AddUserGameIn,
    GameDetailOut,
    GamesOut,
    GenerateIn,
    GeneratedOut,
    MessageOut,
    UserGameOut,
    UserGamesOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/games", tags=["games"])


# ---- Catalog (no auth) ----
@router.get("", response_model=GamesOut)
def list_games(db: Session = Depends(get_db)):
    return GamesOut(games=db.query(GameMaster).order_by(GameMaster.name).all())


# ---- Per-user settings ----
@router.get("/user", response_model=UserGamesOut)
def list_user_games(user: User = Depends(require_user), db: Session = Depends(get_db)):
    rows = (
        db.query(UserGame)
        .join(GameMaster, UserGame.game_id == GameMaster.id)
        .filter(UserGame.user_id == user.id)
        .order_by(GameMaster.name)
        .all()
    )
    return UserGamesOut(user_games=rows)


@router.post("/user", response_model=UserGameOut)
def add_user_game(
    body: AddUserGameIn,
    response: Response,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    game = db.get(GameMaster, body.game_id)
    if not game:
        raise HTTPException(404, "Game not found")

    settings = body.settings.model_dump(by_alias=True, exclude_none=True) if body.settings else None
    now = utcnow()
    ug = db.get(UserGame, (user.id, body.game_id))
    if ug:
        ug.active = True
        ug.settings = settings
        ug.updated_at = now
        response.status_code = 200
    else:
        ug = UserGame(user_id=user.id, game_id=game.id, active=True, settings=settings,
                      created_at=now, updated_at=now)
        db.add(ug)
        response.status_code = 201
    db.commit(); db.refresh(ug)
    return ug


@router.post("/user/generate-tasks", response_model=GeneratedOut)
def generate_game_tasks(
    body: Optional[GenerateIn] = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_app_settings),
):
    day = (body.target_date if body else None) or local_today(app_settings.timezone)
    tasks = materialize_game_tasks(db, user.id, day, app_settings.timezone)
    return GeneratedOut(tasks=tasks, count=len(tasks), date=day.isoformat())


@router.delete("/user/{game_id}", response_model=MessageOut)
def remove_user_game(game_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    ug = db.get(UserGame, (user.id, game_id))
    if not ug:
        raise HTTPException(404, "Game settings not found")
    # soft delete keeps the user's settings for re-activation
    ug.active = False
    ug.updated_at = utcnow()
    db.commit()
    logger.info("User %s removed game %s", user.id, game_id)
    return MessageOut(message="Game removed")


@router.get("/{game_id}", response_model=GameDetailOut)
def get_game(game_id: str, db: Session = Depends(get_db)):
    game = db.get(GameMaster, game_id)
    if not game:
        raise HTTPException(404, "Game not found")
    return game
