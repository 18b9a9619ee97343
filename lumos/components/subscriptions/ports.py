"""Subscription component ports."""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol

from lumos.components.tokens.models import TokenClaims, TokenPurpose, VerifiedToken
from lumos.ports.email import EmailPort
from lumos.ports.rate_limit import RateLimiterPort
from lumos.ports.repo import StorePort

__all__ = ["EmailPort", "RateLimiterPort", "StorePort", "TokenCodecPort"]


class TokenCodecPort(Protocol):
    """Issues and verifies action tokens (see lumos.components.tokens)."""

    def issue(self, claims: TokenClaims, ttl: timedelta, purpose: TokenPurpose = ...) -> str:
        ...

    def verify(self, token: str, purpose: TokenPurpose = ...) -> VerifiedToken | None:
        ...
