"""
Token codec.

Encodes `{email, publication_id, purpose, iat, exp}` as an HS256 JWT.
Verification needs no server-side lookup, so unsubscribe links can be
checked without touching the database (mail scanners prefetch them).

Key behaviors:
- issue() is a pure function of claims, clock time and secret
- verify() never raises; every failure collapses to None
- expiry is judged against the injected clock, not the wall clock
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from lumos.components.tokens.models import (
    TokenClaims,
    TokenConfig,
    TokenPurpose,
    VerifiedToken,
)
from lumos.ports.clock import ClockPort

# Only signature and claim types are checked by jose; the window is ours.
_DECODE_OPTIONS = {"verify_exp": False, "verify_aud": False}


class TokenCodec:
    """Issue and verify purpose-bound action tokens."""

    def __init__(self, config: TokenConfig, clock: ClockPort):
        self._config = config
        self._clock = clock

    def issue(
        self,
        claims: TokenClaims,
        ttl: timedelta,
        purpose: TokenPurpose = TokenPurpose.UNSUBSCRIBE,
    ) -> str:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        issued_at = int(self._clock.now().timestamp())
        to_encode = {
            "sub": claims.email,
            "pub": str(claims.publication_id),
            "purpose": purpose.value,
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
        }
        encoded: str = jwt.encode(to_encode, self._config.secret_key, algorithm=self._config.algorithm)
        return encoded

    def verify(
        self,
        token: str,
        purpose: TokenPurpose = TokenPurpose.UNSUBSCRIBE,
    ) -> VerifiedToken | None:
        """Return the verified token, or None if it is tampered, malformed, expired or mis-purposed."""
        if not token:
            return None

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                options=_DECODE_OPTIONS,
            )
        except JWTError:
            return None

        try:
            verified = _parse_payload(payload)
        except (AttributeError, KeyError, TypeError, ValueError):
            return None

        if verified.purpose is not purpose:
            return None

        if self._clock.now() > verified.expires_at:
            return None

        return verified


def _parse_payload(payload: dict[str, Any]) -> VerifiedToken:
    email = payload["sub"]
    if not isinstance(email, str) or not email:
        raise ValueError("token subject must be a non-empty email")

    iat = payload["iat"]
    exp = payload["exp"]
    if not isinstance(iat, int) or not isinstance(exp, int) or exp <= iat:
        raise ValueError("token window is malformed")

    return VerifiedToken(
        claims=TokenClaims(email=email, publication_id=UUID(payload["pub"])),
        purpose=TokenPurpose(payload["purpose"]),
        issued_at=datetime.fromtimestamp(iat, UTC),
        expires_at=datetime.fromtimestamp(exp, UTC),
    )


def build_action_url(base_url: str, path: str, token: str) -> str:
    """Build an absolute link carrying a token in its query string."""
    base = base_url.rstrip("/")
    return f"{base}{path}?token={token}"
