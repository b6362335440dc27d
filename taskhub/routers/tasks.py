import logging
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, Query, status as http_status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from taskhub.database import get_db
from taskhub.models.task import Task, TaskPriority, TaskStatus
from taskhub.schemas.task import (
    SweepOut,
    TaskCreate,
    TaskOut,
    TaskShareUpdate,
    TaskStats,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskhub.schemas.user import CurrentUser
from taskhub.utils.access import (
    derive_priority,
    get_owned_task,
    get_readable_task,
    owns_task,
    validate_schedule,
    validate_status,
)
from taskhub.utils.auth import get_current_user
from taskhub.utils.overdue import sweep_overdue

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def task_out(task: Task, user: CurrentUser) -> TaskOut:
    return TaskOut(
        id=task.id,
        user_id=task.user_id,
        name=task.name,
        description=task.description or "",
        start_date=task.start_date,
        start_time=task.start_time,
        end_date=task.end_date,
        end_time=task.end_time,
        status=task.status,
        priority=task.priority,
        derived_priority=derive_priority(task.status),
        category=task.category,
        is_shared=task.is_shared,
        owner_username=task.owner.username,
        is_owner=owns_task(task, user.id),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _visible_tasks(db: Session, user: CurrentUser):
    return (
        db.query(Task)
        .options(joinedload(Task.owner))
        .filter(or_(Task.user_id == user.id, Task.is_shared.is_(True)))
    )


def _apply_fields(task: Task, data: TaskCreate) -> None:
    validate_schedule(data.start_date, data.start_time, data.end_date, data.end_time)
    task.status = validate_status(data.status)
    task.name = data.name
    task.description = data.description or ""
    task.start_date = data.start_date
    task.start_time = data.start_time
    task.end_date = data.end_date
    task.end_time = data.end_time
    # stored priority is independent of status; derived_priority is computed on output
    task.priority = data.priority
    task.category = data.category


@router.post("/add_task", response_model=TaskOut, status_code=http_status.HTTP_201_CREATED)
def create_task(data: TaskCreate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    new = Task(user_id=user.id, is_shared=False)
    _apply_fields(new, data)
    db.add(new)
    db.commit()
    db.refresh(new)
    logger.info("User %s created task %s", user.id, new.id)
    return task_out(new, user)


@router.get("/tasks")
def list_tasks(
    status: Optional[str] = Query(None, description="Only tasks with this status"),
    q: Optional[str] = Query(None, description="Search by name"),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Own tasks plus every shared task.

    If page and limit are provided, return paginated result dict {items,page,limit,total,pages}.
    Otherwise return plain list.
    """
    query = _visible_tasks(db, user)
    if status:
        query = query.filter(Task.status == validate_status(status))
    if q:
        query = query.filter(Task.name.ilike(f"%{q}%"))
    query = query.order_by(Task.end_date, Task.end_time, Task.id)
    if page is None or limit is None:
        return [task_out(t, user) for t in query.all()]

    # normalize page/limit
    if page < 1:
        page = 1
    if limit < 1:
        limit = 10
    total = query.count()
    pages = ceil(total / limit) if total > 0 else 1
    items = query.limit(limit).offset((page - 1) * limit).all()
    return {"items": [task_out(t, user) for t in items], "page": page, "limit": limit, "total": total, "pages": pages}


@router.get("/tasks/stats", response_model=TaskStats)
def task_stats(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    tasks = _visible_tasks(db, user).all()
    by_status = {s: 0 for s in TaskStatus}
    for t in tasks:
        by_status[t.status] += 1
    return TaskStats(
        total=len(tasks),
        pending=by_status[TaskStatus.PENDING],
        in_progress=by_status[TaskStatus.IN_PROGRESS],
        completed=by_status[TaskStatus.COMPLETED],
        overdue=by_status[TaskStatus.OVERDUE],
        high_priority=sum(1 for t in tasks if t.priority == TaskPriority.HIGH),
    )


@router.post("/tasks/check-overdue", response_model=SweepOut)
def check_overdue(db: Session = Depends(get_db)):
    result = sweep_overdue(db)
    return SweepOut(message=result.message, checked=result.checked, updated=result.updated, failed=result.failed)


@router.get("/tasks/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return task_out(get_readable_task(db, task_id, user.id), user)


@router.put("/tasks/{task_id}", response_model=TaskOut)
def update_task(task_id: int, data: TaskUpdate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = get_owned_task(db, task_id, user.id)
    _apply_fields(task, data)
    db.commit()
    db.refresh(task)
    logger.info("User %s updated task %s", user.id, task.id)
    return task_out(task, user)


@router.put("/tasks/{task_id}/status", response_model=TaskOut)
def update_task_status(task_id: int, data: TaskStatusUpdate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    new_status = validate_status(data.status)
    task = get_owned_task(db, task_id, user.id)
    task.status = new_status
    db.commit()
    db.refresh(task)
    logger.info("User %s set task %s status to %s", user.id, task.id, new_status.value)
    return task_out(task, user)


@router.put("/tasks/{task_id}/share", response_model=TaskOut)
def share_task(task_id: int, data: TaskShareUpdate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = get_owned_task(db, task_id, user.id)
    task.is_shared = data.is_shared
    db.commit()
    db.refresh(task)
    logger.info("User %s set task %s shared=%s", user.id, task.id, task.is_shared)
    return task_out(task, user)


@router.delete("/tasks/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = get_owned_task(db, task_id, user.id)
    db.delete(task)
    db.commit()
    logger.info("User %s deleted task %s", user.id, task_id)
    return {"detail": "deleted"}
