"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and a configurable work factor.  bcrypt only reads the first
72 bytes of a password, so longer ones are refused before hashing.
"""

from __future__ import annotations

from typing import Optional

import bcrypt

from config.settings import config

MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt (fresh salt per call).

    Raises ``ValueError`` for passwords longer than ``MAX_PASSWORD_BYTES``.
    """
    raw = password.encode()
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password is longer than {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(raw, salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash.

    An over-long password never matches; bcrypt 5 raises on it.
    """
    raw = password.encode()
    if len(raw) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode())
    except (ValueError, TypeError):
        return False
