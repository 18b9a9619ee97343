"""
Token codec component.

Signed, expiring, stateless action tokens for unsubscribe and
subscription-confirmation links.
"""

from lumos.components.tokens.component import TokenCodec, build_action_url
from lumos.components.tokens.models import (
    TokenClaims,
    TokenConfig,
    TokenPurpose,
    VerifiedToken,
)

__all__ = [
    "TokenCodec",
    "build_action_url",
    "TokenClaims",
    "TokenConfig",
    "TokenPurpose",
    "VerifiedToken",
]
