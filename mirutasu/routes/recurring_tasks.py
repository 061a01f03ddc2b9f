from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_app_settings, require_user
from ..clock import local_today, utcnow
from ..config import Settings
from ..db import get_db
from ..models import RecurringTask, User
from ..recurrence import materialize_recurring_tasks
from ..schemas import (
    GenerateIn,
    GeneratedOut,
    MessageOut,
    RecurringTaskIn,
    RecurringTaskListOut,
    RecurringTaskOut,
    RecurringTaskPatch,
)
from ..security import new_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recurring-tasks", tags=["recurring-tasks"])


def _dump(model) -> dict:
    return model.model_dump(by_alias=True, exclude_none=True)


def get_user_recurring(db: Session, user: User, recurring_id: str) -> RecurringTask:
    rt = db.query(RecurringTask).filter(RecurringTask.id == recurring_id, RecurringTask.user_id == user.id).first()
    if not rt:
        raise HTTPException(404, "Recurring task not found")
    return rt


@router.get("", response_model=RecurringTaskListOut)
def list_recurring(user: User = Depends(require_user), db: Session = Depends(get_db)):
    rows = (
        db.query(RecurringTask)
        .filter(RecurringTask.user_id == user.id)
        .order_by(RecurringTask.created_at.desc())
        .all()
    )
    return RecurringTaskListOut(recurring_tasks=rows)


@router.post("", response_model=RecurringTaskOut, status_code=201)
def create_recurring(body: RecurringTaskIn, user: User = Depends(require_user), db: Session = Depends(get_db)):
    now = utcnow()
    rt = RecurringTask(
        id=new_uuid(),
        user_id=user.id,
        task_template=_dump(body.task_template),
        recurrence_type=body.recurrence_type,
        recurrence_data=_dump(body.recurrence_data),
        active=body.active,
        last_generated=None,
        created_at=now,
        updated_at=now,
    )
    db.add(rt); db.commit(); db.refresh(rt)
    logger.debug("Recurring task %s created (%s)", rt.id, rt.recurrence_type)
    return rt


@router.post("/generate", response_model=GeneratedOut)
def generate_recurring(
    body: Optional[GenerateIn] = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    day = (body.target_date if body else None) or local_today(settings.timezone)
    tasks = materialize_recurring_tasks(db, day, settings.timezone, user_id=user.id)
    return GeneratedOut(tasks=tasks, count=len(tasks), date=day.isoformat())


@router.put("/{recurring_id}", response_model=RecurringTaskOut)
def update_recurring(
    recurring_id: str,
    body: RecurringTaskPatch,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    rt = get_user_recurring(db, user, recurring_id)
    if body.task_template is not None: rt.task_template = _dump(body.task_template)
    if body.recurrence_type is not None: rt.recurrence_type = body.recurrence_type
    if body.recurrence_data is not None: rt.recurrence_data = _dump(body.recurrence_data)
    if body.active is not None: rt.active = body.active
    rt.updated_at = utcnow()
    db.commit(); db.refresh(rt)
    return rt


@router.delete("/{recurring_id}", response_model=MessageOut)
def delete_recurring(recurring_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    rt = get_user_recurring(db, user, recurring_id)
    db.delete(rt); db.commit()
    return MessageOut(message="Recurring task deleted")
