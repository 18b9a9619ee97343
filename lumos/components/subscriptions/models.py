"""
Subscription component models.

State machine: absent -> subscribed -> absent. No tombstone is kept;
deleting an absent subscription is a successful no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from uuid import UUID

from lumos.domain.entities import Publication, Subscription, SubscriptionTier, User
from lumos.domain.errors import ActionError

# --- Input Models ---


@dataclass(frozen=True)
class UnsubscribeInput:
    """Token-authorized unsubscribe (email link)."""

    token: str


@dataclass(frozen=True)
class CheckUnsubscribeTokenInput:
    """Verification only, no mutation (one-click GET)."""

    token: str


@dataclass(frozen=True)
class RequestSubscriptionInput:
    """Start of the double opt-in flow."""

    email: str
    publication_id: UUID | None = None
    publication_slug: str | None = None
    client_key: str | None = None  # For rate limiting (client IP)


@dataclass(frozen=True)
class ConfirmSubscriptionInput:
    token: str


@dataclass(frozen=True)
class SubscribeInput:
    """Signed-in reader subscribing directly."""

    principal_id: UUID | None
    publication_id: UUID
    tier: SubscriptionTier = "free"


@dataclass(frozen=True)
class CancelSubscriptionInput:
    principal_id: UUID | None
    publication_id: UUID


@dataclass(frozen=True)
class ListMySubscriptionsInput:
    principal_id: UUID | None
    publication_id: UUID | None = None


@dataclass(frozen=True)
class ListSubscribersInput:
    principal_id: UUID | None
    publication_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class UnsubscribeOutput:
    success: bool
    error: ActionError | None = None
    removed: bool = False  # False on idempotent success


@dataclass(frozen=True)
class TokenCheckOutput:
    success: bool
    error: ActionError | None = None


@dataclass(frozen=True)
class RequestSubscriptionOutput:
    """Deliberately says nothing about whether the email was already subscribed."""

    success: bool
    error: ActionError | None = None


@dataclass(frozen=True)
class ConfirmSubscriptionOutput:
    success: bool
    error: ActionError | None = None
    publication: Publication | None = None
    created: bool = False


@dataclass(frozen=True)
class SubscribeOutput:
    success: bool
    error: ActionError | None = None
    subscription: Subscription | None = None
    already_subscribed: bool = False


@dataclass(frozen=True)
class CancelSubscriptionOutput:
    success: bool
    error: ActionError | None = None
    removed: bool = False


@dataclass(frozen=True)
class ListSubscriptionsOutput:
    success: bool
    error: ActionError | None = None
    subscriptions: list[Subscription] = field(default_factory=list)


@dataclass(frozen=True)
class Subscriber:
    subscription: Subscription
    user: User


@dataclass(frozen=True)
class ListSubscribersOutput:
    success: bool
    error: ActionError | None = None
    subscribers: list[Subscriber] = field(default_factory=list)


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    base_url: str = "http://localhost:3000"
    site_name: str = "Lumos"
    confirm_path: str = "/api/email/subscribe"
    confirmation_ttl: timedelta = timedelta(hours=24)
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 5
