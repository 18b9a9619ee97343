"""
Bearer session tokens.

Login itself happens elsewhere; this module only mints and reads the
HS256 JWT that identifies a user on API requests.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, cast
from uuid import UUID

from jose import JWTError, jwt

from lumos.adapters.clock import SystemClock
from lumos.ports.clock import ClockPort

ALGORITHM = "HS256"


class SessionTokens:
    def __init__(self, secret_key: str, clock: ClockPort | None = None, algorithm: str = ALGORITHM):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock if clock is not None else SystemClock()

    def create(self, user_id: UUID, expires_delta: timedelta) -> str:
        issued_at = self._clock.now()
        to_encode = {"sub": str(user_id), "iat": issued_at, "exp": issued_at + expires_delta}
        encoded_jwt: str = jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)
        return encoded_jwt

    def decode(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        exp = payload.get("exp")
        if not isinstance(exp, int) or self._clock.now().timestamp() > exp:
            return None
        return cast(dict[str, Any], payload)

    def principal_id(self, token: str) -> UUID | None:
        """User id carried by a valid token, else None."""
        payload = self.decode(token)
        if not payload:
            return None
        try:
            return UUID(str(payload["sub"]))
        except (KeyError, ValueError):
            return None
