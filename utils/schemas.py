"""
Pydantic request / response schemas for the task tracker API.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from database.models import TaskStatus


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """
    Fields are checked by ``auth.gateway.register_user`` rather than here, so
    a duplicate email or phone is reported as a conflict even when another
    field is blank or missing.
    """

    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TaskCreate(_CamelModel):
    """Body of ``POST /tasks``.  Any owner field sent by the client is ignored."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    due_date: date = Field(..., alias="dueDate")
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(_CamelModel):
    """
    Body of ``PUT /tasks/{id}``.

    Every field is optional; only the ones present in the request are
    applied.  A present field must still be valid, so ``null`` or an empty
    title is rejected rather than treated as "leave unchanged".
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    due_date: Optional[date] = Field(None, alias="dueDate")
    status: Optional[TaskStatus] = None

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> "TaskUpdate":
        nulls = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        """Column values for the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class TaskOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: uuid.UUID = Field(..., validation_alias="task_id")
    title: str
    description: str
    due_date: date = Field(..., serialization_alias="dueDate")
    status: TaskStatus
    owner_id: uuid.UUID = Field(..., serialization_alias="ownerId")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
