from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from taskhub.models.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Body of POST /add_task and PUT /tasks/{id}.

    ``status`` stays a plain string here; the access engine validates it so that
    an unknown value is reported as "Invalid status value".
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    description: Optional[str] = ""
    start_date: date
    start_time: time
    end_date: date
    end_time: time
    status: str = TaskStatus.PENDING.value
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class TaskUpdate(TaskCreate):
    """Full replacement of a task's editable fields.

    Omitted optional fields fall back to their defaults rather than keeping the
    stored values: no ``status`` means ``pending``, no ``priority`` means ``medium``.
    Sharing is changed only through PUT /tasks/{id}/share.
    """


class TaskStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str


class TaskShareUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_shared: bool


class TaskOut(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = ""
    start_date: date
    start_time: time
    end_date: date
    end_time: time
    status: TaskStatus
    priority: TaskPriority
    derived_priority: TaskPriority
    category: Optional[str] = None
    is_shared: bool
    owner_username: str
    is_owner: bool
    created_at: datetime
    updated_at: datetime


class TaskPage(BaseModel):
    items: List[TaskOut]
    page: int
    limit: int
    total: int
    pages: int


class TaskStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    overdue: int
    high_priority: int


class SweepOut(BaseModel):
    message: str
    checked: int
    updated: int
    failed: int
