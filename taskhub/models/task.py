import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, ForeignKey, Text, Date, Time, DateTime, Boolean, Enum
from sqlalchemy.orm import relationship
from taskhub.database import Base


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_date = Column(Date, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=_enum_values, native_enum=False, create_constraint=True),
        nullable=False,
        default=TaskStatus.PENDING,
        index=True,
    )
    priority = Column(
        Enum(TaskPriority, name="task_priority", values_callable=_enum_values, native_enum=False, create_constraint=True),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    category = Column(String, nullable=True)
    is_shared = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    owner = relationship("User", back_populates="tasks")
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.id",
    )
