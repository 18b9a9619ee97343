"""
Development mailer.

Nothing is delivered: each message is written to the log and kept in an
in-memory outbox, which tests read to find confirmation links and
unsubscribe headers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import count

from lumos.ports.email import DeliveryStatus, EmailMessage, EmailResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboxEntry:
    message_id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    headers: dict[str, str]


class DevEmailAdapter:
    """Logging mailer. Implements EmailPort."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level
        self.sent_emails: list[OutboxEntry] = []
        self._ids = count(1)

    def send(self, message: EmailMessage) -> EmailResult:
        message_id = f"dev-{next(self._ids):06d}"
        self.sent_emails.append(
            OutboxEntry(
                message_id=message_id,
                recipient=message.recipient.email,
                subject=message.subject,
                body_html=message.body_html,
                body_text=message.body_text,
                headers=dict(message.headers),
            )
        )
        logger.log(self.log_level, f"[{message_id}] mail to {message.recipient}: {message.subject!r}")
        return EmailResult(status=DeliveryStatus.LOGGED, recipient=message.recipient.email, message_id=message_id)

    def get_last_email(self) -> OutboxEntry | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[OutboxEntry]:
        return [entry for entry in self.sent_emails if entry.recipient == recipient]

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
