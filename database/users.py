"""
Credential store — persisted user records.

Email and phone uniqueness is enforced by the table's unique constraints.
``find_conflicting_user`` lets registration report a clash before it
validates anything else; ``create_user`` still maps a constraint violation
from a concurrent insert to ``Conflict``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Conflict, StorageError
from database.models import User

logger = logging.getLogger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    try:
        result = await session.execute(select(User).where(User.email == email))
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed")
        raise StorageError("Failed to load user.") from exc
    return result.scalar_one_or_none()


async def find_conflicting_user(
    session: AsyncSession, email: Optional[str], phone: Optional[str]
) -> Optional[User]:
    """Return any user already holding *email* or *phone* (blank values are skipped)."""
    clauses = []
    if email:
        clauses.append(User.email == email)
    if phone:
        clauses.append(User.phone == phone)
    if not clauses:
        return None
    try:
        result = await session.execute(select(User).where(or_(*clauses)).limit(1))
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed")
        raise StorageError("Failed to load user.") from exc
    return result.scalars().first()


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    phone: str,
    password_hash: str,
) -> User:
    """Insert a user, raising ``Conflict`` if the email or phone is taken."""
    user = User(
        user_id=uuid.uuid4(),
        username=username,
        email=email,
        phone=phone,
        password_hash=password_hash,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict() from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to persist user")
        raise StorageError("Registration failed.") from exc
    return user
