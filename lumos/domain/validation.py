"""Field validation shared by the publication and post components."""

import re

from lumos.domain.errors import ActionError, invalid_input
from lumos.rules.models import SlugRules


def validate_slug(slug: str, rules: SlugRules, *, min_len: int, max_len: int) -> ActionError | None:
    if not slug:
        return invalid_input("SLUG_REQUIRED", "Slug is required", "slug")
    if len(slug) < min_len or len(slug) > max_len:
        return invalid_input(
            "INVALID_SLUG_LENGTH", f"Slug must be {min_len}-{max_len} characters", "slug"
        )
    if not re.match(rules.pattern, slug):
        return invalid_input(
            "INVALID_SLUG",
            "Slug can only contain lowercase letters, numbers, and hyphens",
            "slug",
        )
    return None


def validate_text(
    value: str | None, field: str, *, min_len: int, max_len: int
) -> ActionError | None:
    """Length check on stripped text; min_len > 0 makes the field required."""
    text = (value or "").strip()
    if min_len and not text:
        return invalid_input(f"{field.upper()}_REQUIRED", f"{field.capitalize()} is required", field)
    if len(text) < min_len or len(text) > max_len:
        return invalid_input(
            f"INVALID_{field.upper()}",
            f"{field.capitalize()} must be {min_len}-{max_len} characters",
            field,
        )
    return None
