"""
Auth API routes — register, login.

Route prefix: {api_prefix}/auth
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_app_settings, get_token_service
from auth.gateway import login_user, register_user
from auth.jwt import TokenService
from config.settings import Settings
from utils.schemas import LoginRequest, MessageResponse, RegisterRequest, TokenResponse

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Register a new user.  The client logs in separately to get a token."""
    await register_user(
        session,
        username=req.username,
        email=req.email,
        phone=req.phone,
        password=req.password,
        rounds=settings.bcrypt_rounds,
    )
    return {"message": "User registered successfully."}


@router.post("/login", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Login with email + password."""
    token = await login_user(
        session, tokens, req.email, req.password, rounds=settings.bcrypt_rounds,
    )
    return {"token": token}
