"""
Outbound mail.

Confirmation mails and new-post notifications are rendered by the
components; a mailer only has to deliver what it is given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class DeliveryStatus(Enum):
    SENT = "sent"
    LOGGED = "logged"  # dev mailer, nothing left the process
    FAILED = "failed"


@dataclass(frozen=True)
class EmailAddress:
    email: str
    name: str | None = None

    def __str__(self) -> str:
        if not self.name:
            return self.email
        quoted = self.name.replace('"', '\\"')
        return f'"{quoted}" <{self.email}>'


@dataclass(frozen=True)
class EmailMessage:
    """
    A rendered message.

    `headers` carries extra transport headers such as List-Unsubscribe.
    `sender=None` lets the mailer use its configured From address.
    """

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str = ""
    sender: EmailAddress | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.recipient.email or not self.subject:
            raise ValueError("An email needs a recipient and a subject")
        if not (self.body_html or self.body_text):
            raise ValueError("An email needs an HTML or a text body")


@dataclass(frozen=True)
class EmailResult:
    status: DeliveryStatus
    recipient: str
    message_id: str | None = None
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status is not DeliveryStatus.FAILED

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(status=DeliveryStatus.FAILED, recipient=recipient, error=error)


class EmailPort(Protocol):
    """Deliver one message. Delivery problems come back as a FAILED result, not an exception."""

    def send(self, message: EmailMessage) -> EmailResult: ...
