"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    base64url({"sub": <user_id>, "iat": <issued>, "exp": <issued + ttl>}) "." hex(sig)

The signing secret is handed in through a ``TokenConfig`` built once at
startup; nothing here reads process-wide state.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable, Optional

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

TOKEN_TTL_SECONDS = 3600


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    ttl_seconds: int = TOKEN_TTL_SECONDS

    def __post_init__(self) -> None:
        if not self.secret:
            raise ConfigurationError(
                "JWT_SECRET is not set; refusing to start without a token signing key."
            )


class TokenService:
    """Issues and verifies stateless, signed, time-limited identity tokens."""

    def __init__(
        self,
        config: TokenConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key = config.secret.encode()
        self._ttl = config.ttl_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._key, raw, hashlib.sha256).hexdigest()

    def issue(self, subject: str) -> str:
        """Create a signed token for ``subject`` expiring ``ttl`` seconds from now."""
        issued_at = int(self._clock())
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: str) -> Optional[str]:
        """
        Return the token's subject, or ``None`` if the token is malformed,
        carries a bad signature, or has expired.
        """
        encoded, sep, sig = token.partition(".")
        if not sep or not encoded or not sig:
            logger.debug("Rejected token: bad format")
            return None
        try:
            raw = urlsafe_b64decode(encoded.encode())
        except (binascii.Error, ValueError):
            logger.debug("Rejected token: bad encoding")
            return None
        if not hmac.compare_digest(sig.encode(), self._sign(raw).encode()):
            logger.debug("Rejected token: bad signature")
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug("Rejected token: bad payload")
            return None
        if not isinstance(payload, dict):
            return None
        subject = payload.get("sub")
        expiry = payload.get("exp")
        if not isinstance(subject, str) or not isinstance(expiry, (int, float)):
            logger.debug("Rejected token: missing claims")
            return None
        if self._clock() > expiry:
            logger.debug("Rejected token: expired")
            return None
        return subject
