import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

PRIORITIES = ("low", "medium", "high")


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every dialect hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_task_id() -> str:
    return uuid.uuid4().hex


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(f"priority IN {PRIORITIES}", name="ck_tasks_priority"),
    )

    id = Column(String(32), primary_key=True, default=new_task_id)
    text = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(6), nullable=False, default="medium")  # low, medium, high
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Task(id={self.id}, text='{self.text}', completed={self.completed})>"
