"""
Task REST routes.  Every route sits behind the bearer-token access guard.

Request bodies are read inside dependencies that depend on the guard, so a
request without a valid token is refused before its body is even parsed.

Route prefix: {api_prefix}/tasks
"""

from __future__ import annotations

from typing import Any, Dict, List, Type, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_app_settings, get_current_identity
from auth.models import AuthenticatedIdentity
from config.settings import Settings
from core import task_service
from core.errors import ValidationError
from database.models import Task
from utils.schemas import MessageResponse, TaskCreate, TaskOut, TaskUpdate

router = APIRouter(tags=["tasks"])

_Body = TypeVar("_Body", bound=BaseModel)


async def _parse_body(request: Request, model: Type[_Body]) -> _Body:
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body is not valid JSON.")
    try:
        return model.model_validate(payload)
    except SchemaError as exc:
        raise RequestValidationError(exc.errors(include_url=False))


async def task_create_body(
    request: Request,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
) -> TaskCreate:
    return await _parse_body(request, TaskCreate)


async def task_update_body(
    request: Request,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
) -> TaskUpdate:
    return await _parse_body(request, TaskUpdate)


def enforce_ownership(settings: Settings = Depends(get_app_settings)) -> bool:
    return settings.enforce_task_ownership


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    body: TaskCreate = Depends(task_create_body),
    session: AsyncSession = Depends(db_session),
) -> Task:
    return await task_service.create_task(session, identity, body)


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
) -> List[Task]:
    return await task_service.list_tasks(session, identity)


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    body: TaskUpdate = Depends(task_update_body),
    session: AsyncSession = Depends(db_session),
    check_owner: bool = Depends(enforce_ownership),
) -> Task:
    """Partial update — only the fields present in the body change."""
    return await task_service.update_task(
        session, identity, task_id, body, enforce_ownership=check_owner,
    )


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
    check_owner: bool = Depends(enforce_ownership),
) -> Dict[str, Any]:
    await task_service.delete_task(
        session, identity, task_id, enforce_ownership=check_owner,
    )
    return {"message": "Task deleted."}
