"""Identity value object produced by the access guard."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """The caller's user id, trusted from a verified token payload."""

    user_id: uuid.UUID
