"""
New-post notifications.

Every active subscriber of the post's publication gets one email with a
personal unsubscribe link, plus RFC 8058 one-click headers pointing at
the POST unsubscribe endpoint. A failed send is counted and logged; it
never aborts the rest of the batch.
"""

from __future__ import annotations

import logging

from lumos.components.notifications.models import (
    NotificationConfig,
    NotifyNewPostInput,
    NotifyOutput,
)
from lumos.components.notifications.ports import EmailPort, StorePort, TokenIssuerPort
from lumos.components.notifications.templates import render_new_post_email
from lumos.components.tokens.component import build_action_url
from lumos.components.tokens.models import TokenClaims, TokenPurpose
from lumos.domain.errors import invalid_input, not_found
from lumos.ports.email import EmailAddress, EmailMessage

logger = logging.getLogger(__name__)


def list_unsubscribe_headers(one_click_url: str) -> dict[str, str]:
    return {
        "List-Unsubscribe": f"<{one_click_url}>",
        "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
    }


def run_notify_new_post(
    inp: NotifyNewPostInput,
    *,
    store: StorePort,
    codec: TokenIssuerPort,
    email_sender: EmailPort,
    config: NotificationConfig | None = None,
) -> NotifyOutput:
    cfg = config or NotificationConfig()

    post = store.posts.get_by_id(inp.post_id)
    if post is None:
        return NotifyOutput(success=False, error=not_found("post", "post_id"))
    if not post.is_published:
        return NotifyOutput(
            success=False,
            error=invalid_input("POST_NOT_PUBLISHED", "Only published posts are announced", "post_id"),
        )

    publication = store.publications.get_by_id(post.publication_id)
    if publication is None:
        return NotifyOutput(success=False, error=not_found("publication"))

    author = store.users.get_by_id(post.author_id)
    author_name = (author.name or author.email) if author else "Unknown author"
    base = cfg.base_url.rstrip("/")
    post_url = f"{base}/{publication.slug}/{post.slug}"

    sent = failed = 0
    for subscription in store.subscriptions.list_by_publication(publication.id):
        if subscription.status != "active":
            continue
        user = store.users.get_by_id(subscription.user_id)
        if user is None or not user.email:
            continue

        token = codec.issue(
            TokenClaims(email=user.email, publication_id=publication.id),
            cfg.unsubscribe_ttl,
            TokenPurpose.UNSUBSCRIBE,
        )
        rendered = render_new_post_email(
            publication_name=publication.name,
            post_title=post.title,
            post_url=post_url,
            author_name=author_name,
            unsubscribe_url=build_action_url(base, cfg.unsubscribe_page, token),
            post_excerpt=post.excerpt,
            subscriber_name=user.name,
        )
        result = email_sender.send(
            EmailMessage(
                recipient=EmailAddress(user.email, user.name),
                subject=rendered.subject,
                body_html=rendered.body_html,
                body_text=rendered.body_text,
                sender=cfg.sender,
                headers=list_unsubscribe_headers(
                    build_action_url(base, cfg.unsubscribe_endpoint, token)
                ),
            )
        )
        if result.delivered:
            sent += 1
        else:
            failed += 1
            logger.warning(f"New-post email to {user.email} failed: {result.error}")

    if failed:
        logger.error(f"Failed to send {failed} new-post emails for post {post.id}")
    else:
        logger.info(f"Announced post {post.id} to {sent} subscribers")

    return NotifyOutput(success=failed == 0 or sent > 0, sent=sent, failed=failed)
