from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

Priority = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    # Emptiness is checked in crud so blank text is a 400, not a schema error
    text: Optional[str] = None
    priority: Priority = "medium"


class TaskUpdate(BaseModel):
    text: Optional[str] = None
    completed: Optional[StrictBool] = None
    priority: Optional[Priority] = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    text: str
    completed: bool
    priority: Priority
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Stored timestamps are naive UTC
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class TaskDeleted(BaseModel):
    message: str
    task: TaskResponse


class ClearResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    deleted_count: int


class TaskStats(BaseModel):
    total: int
    completed: int
    active: int


class HealthStatus(BaseModel):
    status: str = "OK"
    timestamp: datetime
    uptime: float = Field(..., description="Seconds since the process started")
