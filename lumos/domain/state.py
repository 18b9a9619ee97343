from datetime import datetime

from lumos.domain.entities import Post


def set_published(post: Post, desired: bool, now: datetime) -> Post:
    """
    Return a NEW Post with the requested publish state.

    `published_at` records the first publication only: it is stamped when a
    post is published while unset, and never overwritten or cleared by later
    unpublish/republish cycles.
    Raises TypeError if `desired` is not a bool.
    """
    if not isinstance(desired, bool):
        raise TypeError(f"desired publish state must be a bool, got {type(desired).__name__}")

    updates: dict[str, object] = {"is_published": desired, "updated_at": now}

    if desired and post.published_at is None:
        updates["published_at"] = now

    return post.model_copy(update=updates)


def is_first_publish(before: Post, after: Post) -> bool:
    """True when the transition stamped `published_at`."""
    return before.published_at is None and after.published_at is not None
