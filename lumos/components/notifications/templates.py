"""Plain email bodies for confirmation and new-post mails. All inputs are HTML-escaped."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    body_html: str
    body_text: str


def _greeting(name: str | None) -> str:
    return f"Hi {name}," if name else "Hi there,"


def render_confirmation_email(
    *,
    publication_name: str,
    publication_url: str,
    confirm_url: str,
    subscriber_name: str | None = None,
) -> RenderedEmail:
    subject = f"Confirm your subscription to {publication_name}"
    body_text = (
        f"{_greeting(subscriber_name)}\n\n"
        f"Please confirm your subscription to {publication_name} ({publication_url}):\n"
        f"{confirm_url}\n\n"
        "If you didn't request this, you can ignore this email."
    )
    body_html = (
        f"<p>{escape(_greeting(subscriber_name))}</p>"
        f"<p>Please confirm your subscription to "
        f'<a href="{escape(publication_url)}">{escape(publication_name)}</a>.</p>'
        f'<p><a href="{escape(confirm_url)}">Confirm subscription</a></p>'
        "<p>If you didn't request this, you can ignore this email.</p>"
    )
    return RenderedEmail(subject=subject, body_html=body_html, body_text=body_text)


def render_new_post_email(
    *,
    publication_name: str,
    post_title: str,
    post_url: str,
    author_name: str,
    unsubscribe_url: str,
    post_excerpt: str = "",
    subscriber_name: str | None = None,
) -> RenderedEmail:
    subject = f"New post from {publication_name}: {post_title}"
    excerpt_text = f"{post_excerpt}\n\n" if post_excerpt else ""
    excerpt_html = f"<p>{escape(post_excerpt)}</p>" if post_excerpt else ""
    body_text = (
        f"{_greeting(subscriber_name)}\n\n"
        f"{author_name} published \"{post_title}\" in {publication_name}.\n\n"
        f"{excerpt_text}"
        f"Read it: {post_url}\n\n"
        f"Unsubscribe: {unsubscribe_url}"
    )
    body_html = (
        f"<p>{escape(_greeting(subscriber_name))}</p>"
        f"<h2>{escape(post_title)}</h2>"
        f"<p>by {escape(author_name)} in {escape(publication_name)}</p>"
        f"{excerpt_html}"
        f'<p><a href="{escape(post_url)}">Read the full post</a></p>'
        f'<p style="font-size:12px"><a href="{escape(unsubscribe_url)}">Unsubscribe</a></p>'
    )
    return RenderedEmail(subject=subject, body_html=body_html, body_text=body_text)
