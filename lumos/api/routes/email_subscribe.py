"""
Double opt-in subscription by email.

Endpoints:
- POST /api/email/subscribe - send a confirmation link
- GET /api/email/subscribe - confirm via token (redirect)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api.deps import (
    get_client_ip,
    get_email_sender,
    get_rate_limiter,
    get_rules,
    get_settings,
    get_store,
    get_subscription_config,
    get_token_codec,
)
from lumos.api.errors import error_response, page_redirect, success_response
from lumos.api.schemas import EmailSubscribeRequest
from lumos.app_shell.config import Settings
from lumos.app_shell.rate_limit import RateLimiter
from lumos.components.subscriptions import (
    ConfirmSubscriptionInput,
    RequestSubscriptionInput,
    SubscriptionConfig,
    run_confirm_subscription,
    run_request_subscription,
)
from lumos.components.tokens import TokenCodec
from lumos.ports.email import EmailPort
from lumos.ports.repo import StoreError
from lumos.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

CHECK_EMAIL_MESSAGE = "Please check your email to confirm your subscription"

REASON_BY_CODE = {
    "MISSING_TOKEN": "missing_token",
    "INVALID_TOKEN": "invalid_token",
    "PUBLICATION_NOT_FOUND": "publication_not_found",
}


@router.post("/subscribe", summary="Start double opt-in subscription")
def request_subscription(
    request_body: EmailSubscribeRequest,
    request: Request,
    store: SQLiteUnitOfWork = Depends(get_store),
    codec: TokenCodec = Depends(get_token_codec),
    email_sender: EmailPort = Depends(get_email_sender),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    config: SubscriptionConfig = Depends(get_subscription_config),
) -> JSONResponse:
    """
    Send a confirmation email.

    The response is the same whether or not the address was already
    subscribed.
    """
    result = run_request_subscription(
        RequestSubscriptionInput(
            email=request_body.email or "",
            publication_id=request_body.publication_id,
            publication_slug=request_body.publication_slug,
            client_key=get_client_ip(request),
        ),
        store=store,
        codec=codec,
        email_sender=email_sender,
        rate_limiter=rate_limiter,
        config=config,
    )
    if not result.success:
        return error_response(result.error)

    return success_response({"message": CHECK_EMAIL_MESSAGE})


@router.get("/subscribe", summary="Confirm subscription from email link")
def confirm_subscription(
    token: str | None = Query(None),
    store: SQLiteUnitOfWork = Depends(get_store),
    codec: TokenCodec = Depends(get_token_codec),
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    paths = rules.paths

    try:
        result = run_confirm_subscription(ConfirmSubscriptionInput(token=token or ""), store=store, codec=codec)
        if result.success and result.publication is not None:
            store.commit()
    except StoreError:
        logger.exception("Subscription confirmation failed")
        return page_redirect(settings.base_url, paths.subscribe_error_page, {"reason": "server_error"})

    if not result.success or result.publication is None:
        code = result.error.code if result.error else ""
        reason = REASON_BY_CODE.get(code, "server_error")
        return page_redirect(settings.base_url, paths.subscribe_error_page, {"reason": reason})

    return page_redirect(
        settings.base_url, paths.subscribe_success_page, {"publication": result.publication.slug}
    )
