"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_app_settings``, ``get_token_service`` and the access guard
``get_current_identity`` used by every task route.
"""

from __future__ import annotations

import logging
import uuid
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.models import AuthenticatedIdentity
from config.settings import Settings
from core.errors import Unauthenticated
from database.session import get_db_session

logger = logging.getLogger(__name__)

# auto_error=False so a missing header surfaces as our own Unauthenticated.
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_app_settings(request: Request) -> Settings:
    """The settings object the application was built from."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    """The token service built at startup and kept on ``app.state``."""
    return request.app.state.token_service


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedIdentity:
    """
    Extract and verify the Bearer token, returning the caller's identity.

    The user record is not re-fetched; the verified subject is trusted.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing Bearer token.")

    subject = tokens.verify(credentials.credentials)
    if subject is None:
        raise Unauthenticated("Invalid or expired token.")
    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        logger.debug("Rejected token: subject is not a user id")
        raise Unauthenticated("Invalid or expired token.")
    return AuthenticatedIdentity(user_id=user_id)
