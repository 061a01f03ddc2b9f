from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import require_user
from ..clock import utcnow
from ..db import get_db
from ..models import ANIME_STATUSES, Anime, User
from ..schemas import AnimeDeletedOut, AnimeIn, AnimeItemOut, AnimeListOut, AnimePatch, ProgressIn
from ..security import new_uuid

router = APIRouter(prefix="/api/anime", tags=["anime"])


def get_user_anime(db: Session, user: User, anime_id: str) -> Anime:
    anime = db.query(Anime).filter(Anime.id == anime_id, Anime.user_id == user.id).first()
    if not anime:
        raise HTTPException(404, "Anime not found")
    return anime


@router.get("", response_model=AnimeListOut)
def list_anime(user: User = Depends(require_user), db: Session = Depends(get_db)):
    rows = db.query(Anime).filter(Anime.user_id == user.id).order_by(Anime.updated_at.desc()).all()
    return AnimeListOut(data=rows)


@router.get("/status/{status}", response_model=AnimeListOut)
def list_anime_by_status(status: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    if status not in ANIME_STATUSES:
        raise HTTPException(400, "Invalid status")
    rows = (
        db.query(Anime)
        .filter(Anime.user_id == user.id, Anime.status == status)
        .order_by(Anime.updated_at.desc())
        .all()
    )
    return AnimeListOut(data=rows)


@router.post("", response_model=AnimeItemOut, status_code=201)
def create_anime(body: AnimeIn, user: User = Depends(require_user), db: Session = Depends(get_db)):
    now = utcnow()
    anime = Anime(
        id=new_uuid(),
        user_id=user.id,
        title=body.title,
        mal_id=body.mal_id,
        image_url=str(body.image_url) if body.image_url else None,
        status=body.status,
        current_episode=body.current_episode,
        total_episodes=body.total_episodes,
        rating=body.rating,
        notes=body.notes or None,
        started_at=now if body.status == "watching" else None,
        completed_at=now if body.status == "completed" else None,
        created_at=now,
        updated_at=now,
    )
    db.add(anime); db.commit(); db.refresh(anime)
    return AnimeItemOut(data=anime)


@router.put("/{anime_id}", response_model=AnimeItemOut)
def update_anime(anime_id: str, body: AnimePatch, user: User = Depends(require_user), db: Session = Depends(get_db)):
    anime = get_user_anime(db, user, anime_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "image_url" in changes:
        changes["image_url"] = str(changes["image_url"])

    now = utcnow()
    new_status = changes.get("status")
    if new_status and new_status != anime.status:
        if new_status == "watching":
            anime.started_at = now
        elif new_status == "completed":
            anime.completed_at = now

    for field, value in changes.items():
        setattr(anime, field, value)
    anime.updated_at = now
    db.commit(); db.refresh(anime)
    return AnimeItemOut(data=anime)


@router.delete("/{anime_id}", response_model=AnimeDeletedOut)
def delete_anime(anime_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    anime = get_user_anime(db, user, anime_id)
    db.delete(anime); db.commit()
    return AnimeDeletedOut(message="Anime deleted")


@router.post("/{anime_id}/progress", response_model=AnimeItemOut)
def update_progress(anime_id: str, body: ProgressIn, user: User = Depends(require_user), db: Session = Depends(get_db)):
    anime = get_user_anime(db, user, anime_id)
    now = utcnow()
    anime.current_episode = body.current_episode
    # reaching the last episode finishes the show; any progress starts a planned one
    if anime.total_episodes and body.current_episode >= anime.total_episodes:
        anime.status = "completed"
        anime.completed_at = now
    elif anime.status == "planned":
        anime.status = "watching"
        anime.started_at = now
    anime.updated_at = now
    db.commit(); db.refresh(anime)
    return AnimeItemOut(data=anime)
