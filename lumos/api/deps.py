from collections.abc import Iterator
from datetime import timedelta
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from lumos.adapters.auth.session import SessionTokens
from lumos.adapters.clock import SystemClock
from lumos.adapters.dev_email import DevEmailAdapter
from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.app_shell.config import Settings
from lumos.app_shell.rate_limit import RateLimiter
from lumos.components.notifications import NotificationConfig
from lumos.components.publications import PublicationConfig
from lumos.components.publish import PublishConfig
from lumos.components.subscriptions import SubscriptionConfig
from lumos.components.tokens import TokenCodec, TokenConfig
from lumos.ports.clock import ClockPort
from lumos.ports.email import EmailAddress, EmailPort
from lumos.rules.loader import load_rules
from lumos.rules.models import Rules


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Store ---
def get_store(settings: Settings = Depends(get_settings)) -> Iterator[SQLiteUnitOfWork]:
    """One Unit of Work per request. Routes commit on success; anything else is rolled back."""
    with SQLiteUnitOfWork(settings.db_path) as uow:
        yield uow


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> ClockPort:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


_email_instance: DevEmailAdapter | None = None


def get_email_sender() -> EmailPort:
    """Get email adapter singleton. Only the logging adapter ships."""
    global _email_instance
    if _email_instance is None:
        _email_instance = DevEmailAdapter()
    return _email_instance


_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits)
    return _rate_limiter_instance


def get_token_codec(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    clock: ClockPort = Depends(get_clock),
) -> TokenCodec:
    return TokenCodec(TokenConfig(settings.secret_key, rules.tokens.algorithm), clock)


def get_session_tokens(
    settings: Settings = Depends(get_settings),
    clock: ClockPort = Depends(get_clock),
) -> SessionTokens:
    return SessionTokens(settings.secret_key, clock)


# --- Component Config ---
def get_subscription_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SubscriptionConfig:
    return SubscriptionConfig(
        base_url=settings.base_url,
        site_name=rules.email.site_name,
        confirm_path=rules.paths.subscribe_confirm_endpoint,
        confirmation_ttl=timedelta(minutes=rules.tokens.confirmation_ttl_minutes),
        rate_limit_window_seconds=rules.rate_limits.subscribe_window_seconds,
        rate_limit_max_requests=rules.rate_limits.subscribe_max_requests,
    )


def get_notification_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> NotificationConfig:
    return NotificationConfig(
        base_url=settings.base_url,
        unsubscribe_page=rules.paths.unsubscribe_page,
        unsubscribe_ttl=timedelta(minutes=rules.tokens.unsubscribe_ttl_minutes),
        sender=EmailAddress(rules.email.sender, rules.email.sender_name),
    )


def get_publish_config(rules: Rules = Depends(get_rules)) -> PublishConfig:
    return PublishConfig(slugs=rules.slugs)


def get_publication_config(rules: Rules = Depends(get_rules)) -> PublicationConfig:
    return PublicationConfig(slugs=rules.slugs)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_current_principal(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    sessions: SessionTokens = Depends(get_session_tokens),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> UUID | None:
    """
    Resolve the caller to a user id, or None when anonymous.

    Routes decide whether anonymity is acceptable; this never raises.
    """
    if not token:
        cookie_token = request.cookies.get("access_token")
        if cookie_token:
            token = cookie_token.removeprefix("Bearer ").strip()

    if not token:
        return None

    user_id = sessions.principal_id(token)
    if user_id is None or store.users.get_by_id(user_id) is None:
        return None
    return user_id


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
