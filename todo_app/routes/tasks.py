from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from .. import crud
from ..db import get_db
from ..schemas import ClearResult, TaskCreate, TaskDeleted, TaskResponse, TaskStats, TaskUpdate

router = APIRouter(tags=["tasks"])


@router.get("/tasks", response_model=List[TaskResponse])
async def get_tasks(
    filter: Optional[str] = Query(None, description="'active', 'completed' or 'all'"),
    db: AsyncSession = Depends(get_db)
):
    """Get all tasks matching the filter, newest first"""
    tasks = await crud.get_tasks(db, task_filter=filter)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    task: TaskCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a new task"""
    db_task = await crud.create_task(db, task)
    return TaskResponse.model_validate(db_task)


@router.delete("/tasks", response_model=ClearResult)
async def clear_completed(db: AsyncSession = Depends(get_db)):
    """Remove every completed task"""
    deleted = await crud.clear_completed(db)
    return ClearResult(message=f"Cleared {deleted} completed tasks", deleted_count=deleted)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific task by ID"""
    task = await crud.get_task(db, task_id)
    return TaskResponse.model_validate(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update a specific task"""
    task = await crud.update_task(db, task_id, task_update)
    return TaskResponse.model_validate(task)


@router.delete("/tasks/{task_id}", response_model=TaskDeleted)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Delete a specific task"""
    task = await crud.delete_task(db, task_id)
    return TaskDeleted(message="Task deleted", task=TaskResponse.model_validate(task))


@router.get("/stats", response_model=TaskStats)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Get total, completed and active counts"""
    return await crud.get_stats(db)
