"""Notification component - new-post emails to subscribers."""

from lumos.components.notifications.component import list_unsubscribe_headers, run_notify_new_post
from lumos.components.notifications.models import (
    NotificationConfig,
    NotifyNewPostInput,
    NotifyOutput,
)
from lumos.components.notifications.templates import (
    RenderedEmail,
    render_confirmation_email,
    render_new_post_email,
)

__all__ = [
    "run_notify_new_post",
    "list_unsubscribe_headers",
    "NotificationConfig",
    "NotifyNewPostInput",
    "NotifyOutput",
    "RenderedEmail",
    "render_confirmation_email",
    "render_new_post_email",
]
