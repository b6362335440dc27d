"""Authorization and status rules for tasks and comments.

Read access: the owner, or anyone once the task is shared.
Mutation (edit, delete, status change, share toggle): the owner only.
A task the caller may not act on is reported exactly like a missing one.
"""
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from taskhub.errors import TaskNotFoundError, ValidationError
from taskhub.models.comment import Comment
from taskhub.models.task import Task, TaskPriority, TaskStatus

# statuses the overdue sweep is allowed to move
OPEN_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

_PRIORITY_BY_STATUS = {
    TaskStatus.PENDING: TaskPriority.LOW,
    TaskStatus.IN_PROGRESS: TaskPriority.MEDIUM,
    TaskStatus.COMPLETED: TaskPriority.HIGH,
    TaskStatus.OVERDUE: TaskPriority.HIGH,
}


def owns_task(task: Task, user_id: int) -> bool:
    return task.user_id == user_id


def can_read_task(task: Task, user_id: int) -> bool:
    return owns_task(task, user_id) or bool(task.is_shared)


def can_delete_comment(comment: Comment, task: Task, user_id: int) -> bool:
    """Authors may always delete their comments; the owner of a shared task may delete any of its comments."""
    if comment.user_id == user_id:
        return True
    return bool(task.is_shared) and owns_task(task, user_id)


def validate_status(value) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError("Invalid status value")


def validate_comment_text(text: Optional[str]) -> str:
    if text is None or not text.strip():
        raise ValidationError("Comment text cannot be empty")
    return text.strip()


def combine_instant(day: date, at: time) -> datetime:
    return datetime.combine(day, at)


def validate_schedule(start_date: date, start_time: time, end_date: date, end_time: time) -> None:
    if combine_instant(start_date, start_time) >= combine_instant(end_date, end_time):
        raise ValidationError("Task start must be before its end")


def end_instant(task: Task) -> datetime:
    return combine_instant(task.end_date, task.end_time)


def is_overdue(task: Task, now: datetime) -> bool:
    """True when an open task's end instant has passed; completed or already overdue tasks never are."""
    return task.status in OPEN_STATUSES and now > end_instant(task)


def derive_priority(status) -> TaskPriority:
    """Presentation-only priority suggested by a status. Never written back to the task."""
    return _PRIORITY_BY_STATUS[validate_status(status)]


def get_readable_task(db: Session, task_id: int, user_id: int) -> Task:
    task = db.query(Task).options(joinedload(Task.owner)).filter(Task.id == task_id).first()
    if task is None or not can_read_task(task, user_id):
        raise TaskNotFoundError()
    return task


def get_owned_task(db: Session, task_id: int, user_id: int) -> Task:
    task = (
        db.query(Task)
        .options(joinedload(Task.owner))
        .filter(Task.id == task_id, Task.user_id == user_id)
        .first()
    )
    if task is None:
        raise TaskNotFoundError()
    return task
