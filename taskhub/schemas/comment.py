from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # emptiness is checked by the access engine so it reports a ValidationError
    comment: str
    parent_comment_id: Optional[int] = None


class CommentOut(BaseModel):
    id: int
    task_id: int
    user_id: int
    username: str
    comment: str
    parent_comment_id: Optional[int] = None
    created_at: datetime
