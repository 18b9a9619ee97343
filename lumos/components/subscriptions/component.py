"""
Subscription component.

Governs the (user, publication) subscription pair:

- ensure_absent: find-then-delete, success whether or not a row existed
- ensure_present: insert, where a uniqueness violation from the store
  means "already subscribed" rather than failure
- token-authorized unsubscribe from email links
- double opt-in subscribe by email (request + confirm)
- direct subscribe/cancel for signed-in readers

Privacy:
- unsubscribing an email with no account reports success
- requesting a subscription never reveals an existing one
- token failures never say whether a token was expired or tampered
"""

from __future__ import annotations

import logging
import re
from uuid import UUID

from lumos.components.notifications.templates import render_confirmation_email
from lumos.components.subscriptions.models import (
    CancelSubscriptionInput,
    CancelSubscriptionOutput,
    CheckUnsubscribeTokenInput,
    ConfirmSubscriptionInput,
    ConfirmSubscriptionOutput,
    ListMySubscriptionsInput,
    ListSubscribersInput,
    ListSubscribersOutput,
    ListSubscriptionsOutput,
    RequestSubscriptionInput,
    RequestSubscriptionOutput,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriptionConfig,
    TokenCheckOutput,
    UnsubscribeInput,
    UnsubscribeOutput,
)
from lumos.components.subscriptions.ports import (
    EmailPort,
    RateLimiterPort,
    StorePort,
    TokenCodecPort,
)
from lumos.components.tokens.component import build_action_url
from lumos.components.tokens.models import TokenClaims, TokenPurpose
from lumos.domain.entities import Subscription, SubscriptionTier, User
from lumos.domain.errors import (
    ActionError,
    ErrorKind,
    forbidden,
    invalid_input,
    not_found,
    unauthenticated,
    upstream,
)
from lumos.domain.policy import can_act, publication_owner_ids
from lumos.ports.email import EmailAddress, EmailMessage
from lumos.ports.repo import DuplicateKeyError, StoreError

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MISSING_TOKEN = invalid_input("MISSING_TOKEN", "Missing unsubscribe token", "token")
INVALID_UNSUBSCRIBE_TOKEN = invalid_input(
    "INVALID_TOKEN", "Invalid or expired unsubscribe link", "token"
)


# --- Pure Functions ---


def normalize_email(email: str | None) -> str | None:
    """Lowercase and trim; None if the result is not a plausible address."""
    normalized = email.strip().lower() if email else ""
    if not normalized or len(normalized) > 254 or not EMAIL_REGEX.match(normalized):
        return None
    return normalized


# --- State Transitions ---


def ensure_absent(store: StorePort, user_id: UUID, publication_id: UUID) -> bool:
    """
    Delete the (user, publication) subscription if present.

    Returns True if a row was removed. Safe to call repeatedly; concurrent
    callers converge on "absent" and at most one observes a removal.
    """
    subscription = store.subscriptions.find(user_id, publication_id)
    if subscription is None:
        return False
    store.subscriptions.delete(subscription.id)
    return True


def ensure_present(
    store: StorePort,
    user_id: UUID,
    publication_id: UUID,
    tier: SubscriptionTier = "free",
) -> tuple[Subscription, bool]:
    """
    Create the (user, publication) subscription unless it exists.

    Returns (subscription, created). A uniqueness violation from a racing
    writer is treated as "already subscribed".
    """
    existing = store.subscriptions.find(user_id, publication_id)
    if existing is not None:
        return existing, False

    try:
        created = store.subscriptions.add(
            Subscription(user_id=user_id, publication_id=publication_id, tier=tier)
        )
    except DuplicateKeyError:
        existing = store.subscriptions.find(user_id, publication_id)
        if existing is None:
            raise StoreError("subscription vanished after uniqueness violation") from None
        return existing, False

    return created, True


def find_or_create_user(store: StorePort, email: str) -> User:
    """Resolve an email-only subscriber to a User, creating one if needed."""
    user = store.users.get_by_email(email)
    if user is not None:
        return user
    try:
        return store.users.add(User(email=email))
    except DuplicateKeyError:
        user = store.users.get_by_email(email)
        if user is None:
            raise StoreError("user vanished after uniqueness violation") from None
        return user


# --- Run Handlers ---


def run_check_unsubscribe_token(
    inp: CheckUnsubscribeTokenInput,
    *,
    codec: TokenCodecPort,
) -> TokenCheckOutput:
    """Verify an unsubscribe token without touching the store."""
    if not inp.token:
        return TokenCheckOutput(success=False, error=MISSING_TOKEN)
    if codec.verify(inp.token, TokenPurpose.UNSUBSCRIBE) is None:
        return TokenCheckOutput(success=False, error=INVALID_UNSUBSCRIBE_TOKEN)
    return TokenCheckOutput(success=True)


def run_unsubscribe(
    inp: UnsubscribeInput,
    *,
    store: StorePort,
    codec: TokenCodecPort,
) -> UnsubscribeOutput:
    """Token-authorized unsubscribe. Replaying the same token is harmless."""
    if not inp.token:
        return UnsubscribeOutput(success=False, error=MISSING_TOKEN)

    verified = codec.verify(inp.token, TokenPurpose.UNSUBSCRIBE)
    if verified is None:
        return UnsubscribeOutput(success=False, error=INVALID_UNSUBSCRIBE_TOKEN)

    try:
        user = store.users.get_by_email(verified.email)
        if user is None:
            # Nothing to unsubscribe; same answer as "already unsubscribed".
            return UnsubscribeOutput(success=True)

        removed = ensure_absent(store, user.id, verified.publication_id)
    except StoreError as e:
        logger.error(f"Unsubscribe failed: {e}")
        return UnsubscribeOutput(success=False, error=upstream("Failed to unsubscribe"))

    if removed:
        logger.info(f"Unsubscribed user {user.id} from publication {verified.publication_id}")
    return UnsubscribeOutput(success=True, removed=removed)


def run_request_subscription(
    inp: RequestSubscriptionInput,
    *,
    store: StorePort,
    codec: TokenCodecPort,
    email_sender: EmailPort,
    rate_limiter: RateLimiterPort | None = None,
    config: SubscriptionConfig | None = None,
) -> RequestSubscriptionOutput:
    """Send a confirmation link for double opt-in."""
    cfg = config or SubscriptionConfig()

    if not inp.email or (inp.publication_id is None and not inp.publication_slug):
        return RequestSubscriptionOutput(
            success=False,
            error=invalid_input(
                "MISSING_FIELDS", "Email and publication identifier are required"
            ),
        )

    email = normalize_email(inp.email)
    if email is None:
        return RequestSubscriptionOutput(
            success=False,
            error=invalid_input("INVALID_EMAIL", "Invalid email address", "email"),
        )

    if rate_limiter is not None:
        key = f"subscribe:{inp.client_key or email}"
        if not rate_limiter.allow_request(
            key, cfg.rate_limit_window_seconds, cfg.rate_limit_max_requests
        ):
            return RequestSubscriptionOutput(
                success=False,
                error=ActionError(
                    ErrorKind.RATE_LIMITED,
                    "RATE_LIMIT",
                    "Too many requests. Please try again later.",
                ),
            )

    try:
        if inp.publication_id is not None:
            publication = store.publications.get_by_id(inp.publication_id)
        else:
            publication = store.publications.get_by_slug(inp.publication_slug or "")
        if publication is None:
            return RequestSubscriptionOutput(success=False, error=not_found("publication"))

        user = store.users.get_by_email(email)
        if user is not None and store.subscriptions.find(user.id, publication.id) is not None:
            return RequestSubscriptionOutput(success=True)
    except StoreError as e:
        logger.error(f"Subscription request failed: {e}")
        return RequestSubscriptionOutput(success=False, error=upstream("Internal server error"))

    token = codec.issue(
        TokenClaims(email=email, publication_id=publication.id),
        cfg.confirmation_ttl,
        TokenPurpose.CONFIRM_SUBSCRIPTION,
    )
    rendered = render_confirmation_email(
        publication_name=publication.name,
        publication_url=f"{cfg.base_url.rstrip('/')}/{publication.slug}",
        confirm_url=build_action_url(cfg.base_url, cfg.confirm_path, token),
        subscriber_name=user.name if user else None,
    )
    result = email_sender.send(
        EmailMessage(
            recipient=EmailAddress(email),
            subject=rendered.subject,
            body_html=rendered.body_html,
            body_text=rendered.body_text,
        )
    )
    if not result.delivered:
        logger.error(f"Failed to send confirmation email: {result.error}")
        return RequestSubscriptionOutput(
            success=False, error=upstream("Failed to send confirmation email")
        )

    return RequestSubscriptionOutput(success=True)


def run_confirm_subscription(
    inp: ConfirmSubscriptionInput,
    *,
    store: StorePort,
    codec: TokenCodecPort,
) -> ConfirmSubscriptionOutput:
    """Finish double opt-in: resolve or create the user, then subscribe."""
    if not inp.token:
        return ConfirmSubscriptionOutput(
            success=False,
            error=invalid_input("MISSING_TOKEN", "Missing confirmation token", "token"),
        )

    verified = codec.verify(inp.token, TokenPurpose.CONFIRM_SUBSCRIPTION)
    if verified is None:
        return ConfirmSubscriptionOutput(
            success=False,
            error=invalid_input("INVALID_TOKEN", "Invalid or expired confirmation link", "token"),
        )

    try:
        publication = store.publications.get_by_id(verified.publication_id)
        if publication is None:
            return ConfirmSubscriptionOutput(success=False, error=not_found("publication"))

        user = find_or_create_user(store, verified.email)
        _, created = ensure_present(store, user.id, publication.id)
    except StoreError as e:
        logger.error(f"Subscription confirmation failed: {e}")
        return ConfirmSubscriptionOutput(
            success=False, error=upstream("Failed to confirm subscription")
        )

    return ConfirmSubscriptionOutput(success=True, publication=publication, created=created)


def run_subscribe(inp: SubscribeInput, *, store: StorePort) -> SubscribeOutput:
    if inp.principal_id is None:
        return SubscribeOutput(success=False, error=unauthenticated())

    publication = store.publications.get_by_id(inp.publication_id)
    if publication is None:
        return SubscribeOutput(success=False, error=not_found("publication", "publication_id"))

    subscription, created = ensure_present(store, inp.principal_id, publication.id, inp.tier)
    return SubscribeOutput(
        success=True, subscription=subscription, already_subscribed=not created
    )


def run_cancel(inp: CancelSubscriptionInput, *, store: StorePort) -> CancelSubscriptionOutput:
    if inp.principal_id is None:
        return CancelSubscriptionOutput(success=False, error=unauthenticated())

    removed = ensure_absent(store, inp.principal_id, inp.publication_id)
    return CancelSubscriptionOutput(success=True, removed=removed)


def run_list_mine(inp: ListMySubscriptionsInput, *, store: StorePort) -> ListSubscriptionsOutput:
    if inp.principal_id is None:
        return ListSubscriptionsOutput(success=False, error=unauthenticated())

    subscriptions = store.subscriptions.list_by_user(inp.principal_id)
    if inp.publication_id is not None:
        subscriptions = [s for s in subscriptions if s.publication_id == inp.publication_id]
    return ListSubscriptionsOutput(success=True, subscriptions=subscriptions)


def run_list_subscribers(inp: ListSubscribersInput, *, store: StorePort) -> ListSubscribersOutput:
    """Owner-only view of a publication's subscribers."""
    if inp.principal_id is None:
        return ListSubscribersOutput(success=False, error=unauthenticated())

    publication = store.publications.get_by_id(inp.publication_id)
    if publication is None:
        return ListSubscribersOutput(success=False, error=not_found("publication"))

    if not can_act(inp.principal_id, publication_owner_ids(publication)):
        return ListSubscribersOutput(success=False, error=forbidden())

    subscribers: list[Subscriber] = []
    for subscription in store.subscriptions.list_by_publication(publication.id):
        user = store.users.get_by_id(subscription.user_id)
        if user is not None:
            subscribers.append(Subscriber(subscription=subscription, user=user))
    return ListSubscribersOutput(success=True, subscribers=subscribers)
