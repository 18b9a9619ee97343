"""
Subscription component.

Subscribe/unsubscribe state machine for (user, publication) pairs,
including token-authorized unsubscribe and double opt-in by email.
"""

from lumos.components.subscriptions.component import (
    ensure_absent,
    ensure_present,
    find_or_create_user,
    normalize_email,
    run_cancel,
    run_check_unsubscribe_token,
    run_confirm_subscription,
    run_list_mine,
    run_list_subscribers,
    run_request_subscription,
    run_subscribe,
    run_unsubscribe,
)
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

__all__ = [
    # Component entry points
    "run_unsubscribe",
    "run_check_unsubscribe_token",
    "run_request_subscription",
    "run_confirm_subscription",
    "run_subscribe",
    "run_cancel",
    "run_list_mine",
    "run_list_subscribers",
    # State transitions
    "ensure_absent",
    "ensure_present",
    "find_or_create_user",
    "normalize_email",
    # Models
    "CancelSubscriptionInput",
    "CancelSubscriptionOutput",
    "CheckUnsubscribeTokenInput",
    "ConfirmSubscriptionInput",
    "ConfirmSubscriptionOutput",
    "ListMySubscriptionsInput",
    "ListSubscribersInput",
    "ListSubscribersOutput",
    "ListSubscriptionsOutput",
    "RequestSubscriptionInput",
    "RequestSubscriptionOutput",
    "SubscribeInput",
    "SubscribeOutput",
    "Subscriber",
    "SubscriptionConfig",
    "TokenCheckOutput",
    "UnsubscribeInput",
    "UnsubscribeOutput",
]
