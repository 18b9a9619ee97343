"""Notification component ports."""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol

from lumos.components.tokens.models import TokenClaims, TokenPurpose
from lumos.ports.email import EmailPort
from lumos.ports.repo import StorePort

__all__ = ["EmailPort", "StorePort", "TokenIssuerPort"]


class TokenIssuerPort(Protocol):
    def issue(self, claims: TokenClaims, ttl: timedelta, purpose: TokenPurpose = ...) -> str:
        ...
