from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import require_user
from ..db import get_db
from ..models import Anime, RecurringTask, Task, User, UserGame
from ..schemas import ProfileCounts, ProfileData, ProfileOut

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=ProfileOut)
def profile(user: User = Depends(require_user), db: Session = Depends(get_db)):
    counts = ProfileCounts(
        tasks=db.query(Task).filter(Task.user_id == user.id).count(),
        anime=db.query(Anime).filter(Anime.user_id == user.id).count(),
        games=db.query(UserGame).filter(UserGame.user_id == user.id, UserGame.active.is_(True)).count(),
        recurring_tasks=db.query(RecurringTask).filter(RecurringTask.user_id == user.id).count(),
    )
    data = ProfileData(
        id=user.id,
        email=user.email,
        username=user.username,
        created_at=user.created_at,
        counts=counts,
    )
    return ProfileOut(data=data)
