"""Notification component models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from lumos.domain.errors import ActionError
from lumos.ports.email import EmailAddress


@dataclass(frozen=True)
class NotifyNewPostInput:
    post_id: UUID


@dataclass(frozen=True)
class NotifyOutput:
    """`success` is False only when nothing could be attempted or every send failed."""

    success: bool
    error: ActionError | None = None
    sent: int = 0
    failed: int = 0


@dataclass(frozen=True)
class NotificationConfig:
    base_url: str = "http://localhost:3000"
    unsubscribe_page: str = "/unsubscribe"
    unsubscribe_endpoint: str = "/api/email/unsubscribe"
    unsubscribe_ttl: timedelta = timedelta(days=30)
    sender: EmailAddress | None = None
