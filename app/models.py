import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the created_at column"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_task_id() -> str:
    return str(uuid.uuid4())


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_task_id)
    title = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String(10), nullable=False, default=Priority.LOW.value)  # LOW, MEDIUM, HIGH
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', completed={self.completed})>"
