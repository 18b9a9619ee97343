"""
Token codec models.

Action tokens are signed, time-bounded and never persisted. Each token is
bound to one purpose so a confirmation link cannot be replayed as an
unsubscribe link (or the reverse).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class TokenPurpose(Enum):
    UNSUBSCRIBE = "unsubscribe"
    CONFIRM_SUBSCRIPTION = "confirm_subscription"


@dataclass(frozen=True)
class TokenClaims:
    """What a token vouches for."""

    email: str
    publication_id: UUID


@dataclass(frozen=True)
class VerifiedToken:
    """Claims recovered from a token whose signature and window checked out."""

    claims: TokenClaims
    purpose: TokenPurpose
    issued_at: datetime
    expires_at: datetime

    @property
    def email(self) -> str:
        return self.claims.email

    @property
    def publication_id(self) -> UUID:
        return self.claims.publication_id


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    algorithm: str = "HS256"
