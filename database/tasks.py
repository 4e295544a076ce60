"""
Task store — persisted tasks scoped to an owning user.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import StorageError
from database.models import Task, TaskStatus

logger = logging.getLogger(__name__)


async def insert_task(
    session: AsyncSession,
    owner_id: uuid.UUID,
    title: str,
    description: str,
    due_date: date,
    status: TaskStatus,
) -> Task:
    task = Task(
        task_id=uuid.uuid4(),
        owner_id=owner_id,
        title=title,
        description=description,
        due_date=due_date,
        status=status,
    )
    session.add(task)
    try:
        await session.flush()
        await session.refresh(task)
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to persist task for owner %s", owner_id)
        raise StorageError("Failed to create task.") from exc
    return task


async def list_tasks_for_owner(
    session: AsyncSession, owner_id: uuid.UUID
) -> List[Task]:
    try:
        result = await session.execute(
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.due_date.asc(), Task.created_at.asc())
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to list tasks for owner %s", owner_id)
        raise StorageError("Failed to retrieve tasks.") from exc
    return list(result.scalars().all())


async def get_task(session: AsyncSession, task_id: uuid.UUID) -> Optional[Task]:
    try:
        result = await session.execute(select(Task).where(Task.task_id == task_id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to load task %s", task_id)
        raise StorageError("Failed to load task.") from exc
    return result.scalar_one_or_none()


async def apply_task_changes(
    session: AsyncSession, task: Task, changes: Dict[str, Any]
) -> Task:
    """Set each column named in *changes* on *task* and flush."""
    for field, value in changes.items():
        setattr(task, field, value)
    try:
        await session.flush()
        await session.refresh(task)
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to update task %s", task.task_id)
        raise StorageError("Failed to update task.") from exc
    return task


async def remove_task(session: AsyncSession, task: Task) -> None:
    try:
        await session.delete(task)
        await session.flush()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to delete task %s", task.task_id)
        raise StorageError("Failed to delete task.") from exc
