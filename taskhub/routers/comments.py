import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from taskhub.database import get_db
from taskhub.errors import AuthorizationError, NotFoundError, TaskNotFoundError, ValidationError
from taskhub.models.comment import Comment
from taskhub.models.task import Task
from taskhub.schemas.comment import CommentCreate, CommentOut
from taskhub.schemas.user import CurrentUser
from taskhub.utils.access import can_delete_comment, can_read_task, get_readable_task, validate_comment_text
from taskhub.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["comments"])


def comment_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        task_id=comment.task_id,
        user_id=comment.user_id,
        username=comment.author.username,
        comment=comment.comment,
        parent_comment_id=comment.parent_comment_id,
        created_at=comment.created_at,
    )


@router.post("/{task_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(task_id: int, data: CommentCreate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = get_readable_task(db, task_id, user.id)
    text = validate_comment_text(data.comment)

    if data.parent_comment_id is not None:
        parent = db.query(Comment).filter(Comment.id == data.parent_comment_id).first()
        if parent is None or parent.task_id != task.id:
            raise ValidationError("Parent comment does not belong to this task")

    new = Comment(task_id=task.id, user_id=user.id, comment=text, parent_comment_id=data.parent_comment_id)
    db.add(new)
    db.commit()
    db.refresh(new)
    logger.info("User %s commented on task %s (comment %s)", user.id, task.id, new.id)
    return comment_out(new)


@router.get("/{task_id}/comments", response_model=List[CommentOut])
def list_comments(task_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = get_readable_task(db, task_id, user.id)
    comments = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.task_id == task.id)
        .order_by(Comment.created_at, Comment.id)
        .all()
    )
    return [comment_out(c) for c in comments]


@router.delete("/{task_id}/comments/{comment_id}")
def delete_comment(task_id: int, comment_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    task = db.get(Task, task_id)
    comment = db.query(Comment).filter(Comment.id == comment_id, Comment.task_id == task_id).first()
    is_author = comment is not None and comment.user_id == user.id
    # callers who cannot see the task learn nothing about it or its comments
    if task is None or not (is_author or can_read_task(task, user.id)):
        raise TaskNotFoundError()
    if comment is None:
        raise NotFoundError("Comment not found")
    if not can_delete_comment(comment, task, user.id):
        raise AuthorizationError("Not authorized to delete this comment")

    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s on task %s", user.id, comment_id, task_id)
    return {"detail": "deleted"}
