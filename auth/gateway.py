"""
Auth gateway — user registration and login.

Composes the credential store, the password hasher and the token service.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.password import MAX_PASSWORD_BYTES, hash_password, verify_password
from config.settings import config
from core.errors import Conflict, InvalidCredentials, ValidationError
from database.models import User
from database.users import create_user, find_conflicting_user, get_user_by_email

logger = logging.getLogger(__name__)

# Column widths of the users table.
_MAX_LENGTHS = {"username": 64, "email": 255, "phone": 32}


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    """A hash matching no real password, at the same cost as stored ones.

    Checked when the email is unknown so both login failure paths cost one
    bcrypt verification.
    """
    return hash_password("unknown-account", rounds=rounds)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _require(**fields: Optional[str]) -> None:
    missing = [name for name, value in fields.items() if not _clean(value)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")


def _check_lengths(username: str, email: str, phone: str, password: str) -> None:
    values = {"username": username, "email": email, "phone": phone}
    too_long = [name for name, limit in _MAX_LENGTHS.items() if len(values[name]) > limit]
    if too_long:
        raise ValidationError(f"Fields too long: {', '.join(too_long)}.")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password may be at most {MAX_PASSWORD_BYTES} bytes long."
        )


async def register_user(
    session: AsyncSession,
    username: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    password: Optional[str],
    rounds: Optional[int] = None,
) -> User:
    """
    Create a user with a hashed password.

    A duplicate email or phone raises ``Conflict`` whatever the other fields
    hold; otherwise blank or oversized fields raise ``ValidationError``.
    No token is issued.
    """
    email, phone = _clean(email), _clean(phone)
    if await find_conflicting_user(session, email, phone) is not None:
        logger.info("Registration rejected: email or phone already registered")
        raise Conflict()

    _require(username=username, email=email, phone=phone, password=password)
    username = _clean(username)
    _check_lengths(username, email, phone, password)

    user = await create_user(
        session,
        username=username,
        email=email,
        phone=phone,
        password_hash=hash_password(password, rounds=rounds),
    )
    logger.info("Registered user %s (%s)", user.username, user.user_id)
    return user


async def login_user(
    session: AsyncSession,
    tokens: TokenService,
    email: str,
    password: str,
    rounds: Optional[int] = None,
) -> str:
    """Return a token for the user, or raise the same ``InvalidCredentials``
    whether the email is unknown or the password is wrong."""
    _require(email=email, password=password)
    user = await get_user_by_email(session, email.strip())

    if user is None:
        verify_password(password, _dummy_hash(rounds or config.bcrypt_rounds))
        logger.info("Login rejected")
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        logger.info("Login rejected")
        raise InvalidCredentials()

    token = tokens.issue(str(user.user_id))
    logger.info("Login: %s (%s)", user.username, user.user_id)
    return token
