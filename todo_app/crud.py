import functools
import logging
from typing import List, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from .errors import StoreUnavailable, TaskNotFound, TaskValidationError
from .models import Task, utcnow
from .schemas import TaskCreate, TaskStats, TaskUpdate

logger = logging.getLogger(__name__)


def store_errors(fn):
    """Turn persistence failures into StoreUnavailable, rolling back the session"""

    @functools.wraps(fn)
    async def wrapper(db: AsyncSession, *args, **kwargs):
        try:
            return await fn(db, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("Store failure in %s", fn.__name__)
            await db.rollback()
            raise StoreUnavailable(error=str(e)) from e

    return wrapper


def _filter_condition(task_filter: Optional[str]):
    if task_filter == "active":
        return Task.completed.is_(False)
    if task_filter == "completed":
        return Task.completed.is_(True)
    return None


@store_errors
async def create_task(db: AsyncSession, task: TaskCreate) -> Task:
    """Create a new task"""
    text = task.text.strip() if isinstance(task.text, str) else ""
    if not text:
        raise TaskValidationError("Task text must not be empty")

    now = utcnow()
    db_task = Task(text=text, priority=task.priority, completed=False, created_at=now, updated_at=now)
    db.add(db_task)
    await db.commit()
    await db.refresh(db_task)
    logger.info("Created task %s", db_task.id)
    return db_task


@store_errors
async def get_task(db: AsyncSession, task_id: str) -> Task:
    """Get a task by ID"""
    result = await db.execute(select(Task).filter(Task.id == task_id))
    db_task = result.scalar_one_or_none()
    if db_task is None:
        raise TaskNotFound()
    return db_task


@store_errors
async def get_tasks(db: AsyncSession, task_filter: Optional[str] = None) -> List[Task]:
    """Get tasks, newest first; filter is 'active', 'completed' or anything else for all"""
    query = select(Task)

    condition = _filter_condition(task_filter)
    if condition is not None:
        query = query.filter(condition)

    query = query.order_by(Task.created_at.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


@store_errors
async def update_task(db: AsyncSession, task_id: str, task_update: TaskUpdate) -> Task:
    """Update the supplied fields of a task and refresh its updated_at"""
    db_task = await get_task(db, task_id)

    update_data = task_update.model_dump(exclude_unset=True, exclude_none=True)
    update_data["updated_at"] = utcnow()
    for field, value in update_data.items():
        setattr(db_task, field, value)

    await db.commit()
    await db.refresh(db_task)
    logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(update_data)))
    return db_task


@store_errors
async def delete_task(db: AsyncSession, task_id: str) -> Task:
    """Delete a task and return the removed record"""
    db_task = await get_task(db, task_id)

    await db.delete(db_task)
    await db.commit()
    logger.info("Deleted task %s", task_id)
    return db_task


@store_errors
async def clear_completed(db: AsyncSession) -> int:
    """Delete every completed task, returning how many were removed"""
    result = await db.execute(delete(Task).where(Task.completed.is_(True)))
    await db.commit()
    logger.info("Cleared %d completed tasks", result.rowcount)
    return result.rowcount


@store_errors
async def get_tasks_count(db: AsyncSession, task_filter: Optional[str] = None) -> int:
    """Get count of tasks with optional filtering"""
    query = select(func.count(Task.id))

    condition = _filter_condition(task_filter)
    if condition is not None:
        query = query.filter(condition)

    result = await db.execute(query)
    return result.scalar()


async def get_stats(db: AsyncSession) -> TaskStats:
    """Compute total/completed/active counts from the current table state"""
    total = await get_tasks_count(db)
    completed = await get_tasks_count(db, "completed")
    return TaskStats(total=total, completed=completed, active=total - completed)
