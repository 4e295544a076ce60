"""
Task service — CRUD over the task store, constrained by the caller's identity.

``owner_id`` always comes from the ``AuthenticatedIdentity``, never from the
request body.  Whether update/delete also check ownership is decided by the
``enforce_ownership`` flag (``config.enforce_task_ownership``); when it is off
any authenticated caller may mutate a task by id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from auth.models import AuthenticatedIdentity
from core.errors import NotFound
from database.models import Task
from database.tasks import (
    apply_task_changes,
    get_task,
    insert_task,
    list_tasks_for_owner,
    remove_task,
)
from utils.schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def _parse_task_id(task_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(task_id)
    except ValueError:
        raise NotFound()


async def _load_task(
    session: AsyncSession,
    identity: AuthenticatedIdentity,
    task_id: str,
    enforce_ownership: bool,
) -> Task:
    task = await get_task(session, _parse_task_id(task_id))
    if task is None:
        raise NotFound()
    if enforce_ownership and task.owner_id != identity.user_id:
        # Reported as missing so task ids of other users are not disclosed.
        raise NotFound()
    return task


async def create_task(
    session: AsyncSession,
    identity: AuthenticatedIdentity,
    data: TaskCreate,
) -> Task:
    task = await insert_task(
        session,
        owner_id=identity.user_id,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        status=data.status,
    )
    logger.info("Task %s created by %s", task.task_id, identity.user_id)
    return task


async def list_tasks(
    session: AsyncSession, identity: AuthenticatedIdentity
) -> List[Task]:
    return await list_tasks_for_owner(session, identity.user_id)


async def update_task(
    session: AsyncSession,
    identity: AuthenticatedIdentity,
    task_id: str,
    data: TaskUpdate,
    enforce_ownership: bool = False,
) -> Task:
    """Apply only the fields present in *data*; raise ``NotFound`` for unknown ids."""
    task = await _load_task(session, identity, task_id, enforce_ownership)
    changes: Dict[str, Any] = data.changes()
    if not changes:
        return task
    task = await apply_task_changes(session, task, changes)
    logger.info(
        "Task %s updated by %s (%s)",
        task.task_id, identity.user_id, ", ".join(sorted(changes)),
    )
    return task


async def delete_task(
    session: AsyncSession,
    identity: AuthenticatedIdentity,
    task_id: str,
    enforce_ownership: bool = False,
) -> None:
    task = await _load_task(session, identity, task_id, enforce_ownership)
    await remove_task(session, task)
    logger.info("Task %s deleted by %s", task.task_id, identity.user_id)
