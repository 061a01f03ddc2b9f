from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case
from sqlalchemy.orm import Session

from ..auth import get_app_settings, require_user
from ..clock import completion_rate, day_bounds, local_today, to_utc_naive, utcnow
from ..config import Settings
from ..db import get_db
from ..models import Task, User
from ..schemas import (
    BulkCompleteIn,
    MessageOut,
    Pagination,
    TaskBatchOut,
    TaskIn,
    TaskListOut,
    TaskOut,
    TaskPatch,
    TaskSummary,
    TaskType,
    TodayOut,
)
from ..security import new_uuid

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

PRIORITY_ORDER = case({"high": 1, "medium": 2, "low": 3}, value=Task.priority, else_=4)


# ---------- Helpers ----------
def get_user_task(db: Session, user: User, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user.id).first()
    if not task:
        raise HTTPException(404, "Task not found")
    return task


# ---------- Routes ----------
@router.get("/today", response_model=TodayOut)
def today_tasks(
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    start, end = day_bounds(local_today(settings.timezone), settings.timezone)
    tasks = (
        db.query(Task)
        .filter(Task.user_id == user.id, Task.created_at >= start, Task.created_at < end)
        .order_by(PRIORITY_ORDER, Task.created_at.desc())
        .all()
    )
    done = sum(1 for t in tasks if t.completed)
    summary = TaskSummary(total=len(tasks), completed=done, completion_rate=completion_rate(done, len(tasks)))
    return TodayOut(tasks=tasks, summary=summary)


@router.get("", response_model=TaskListOut)
def list_tasks(
    type: Optional[TaskType] = None,
    completed: Optional[str] = None,
    date: Optional[date] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    q = db.query(Task).filter(Task.user_id == user.id)
    if type:
        q = q.filter(Task.type == type)
    if completed is not None:
        q = q.filter(Task.completed.is_(completed == "true"))
    if date:
        start, end = day_bounds(date, settings.timezone)
        q = q.filter(Task.created_at >= start, Task.created_at < end)
    tasks = q.order_by(Task.created_at.desc()).limit(limit).offset(offset).all()
    return TaskListOut(tasks=tasks, pagination=Pagination(limit=limit, offset=offset, count=len(tasks)))


@router.post("", response_model=TaskOut, status_code=201)
def create_task(body: TaskIn, user: User = Depends(require_user), db: Session = Depends(get_db)):
    now = utcnow()
    task = Task(
        id=new_uuid(),
        user_id=user.id,
        type=body.type,
        title=body.title,
        description=body.description or None,
        priority=body.priority,
        deadline=to_utc_naive(body.deadline),
        completed=False,
        source="manual",
        created_at=now,
        updated_at=now,
    )
    db.add(task); db.commit(); db.refresh(task)
    return task


@router.post("/bulk-complete", response_model=TaskBatchOut)
def bulk_complete(body: BulkCompleteIn, user: User = Depends(require_user), db: Session = Depends(get_db)):
    tasks = db.query(Task).filter(Task.user_id == user.id, Task.id.in_(body.task_ids)).all()
    now = utcnow()
    for t in tasks:
        t.completed = True
        t.updated_at = now
    db.commit()
    for t in tasks:
        db.refresh(t)
    return TaskBatchOut(tasks=tasks, count=len(tasks))


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return get_user_task(db, user, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: str, body: TaskPatch, user: User = Depends(require_user), db: Session = Depends(get_db)):
    task = get_user_task(db, user, task_id)
    if body.title is not None: task.title = body.title
    if body.description is not None: task.description = body.description
    if body.priority is not None: task.priority = body.priority
    if body.completed is not None: task.completed = body.completed
    if body.deadline is not None: task.deadline = to_utc_naive(body.deadline)
    task.updated_at = utcnow()
    db.commit(); db.refresh(task)
    return task


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    task = get_user_task(db, user, task_id)
    db.delete(task); db.commit()
    return MessageOut(message="Task deleted")


@router.post("/{task_id}/complete", response_model=TaskOut)
def complete_task(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    task = get_user_task(db, user, task_id)
    task.completed = True
    task.updated_at = utcnow()
    db.commit(); db.refresh(task)
    return task
