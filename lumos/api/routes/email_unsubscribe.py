"""
Token-authorized unsubscribe endpoints.

Endpoints:
- POST /api/email/unsubscribe - remove the subscription named by the token
- GET /api/email/unsubscribe - verify only, then redirect to the confirm page

GET never mutates: mail scanners and link previewers fetch links on their
own. The deletion happens on the POST the page (or an RFC 8058 one-click
client) sends. The token may arrive in the JSON body or the query string.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api.deps import get_rules, get_settings, get_store, get_token_codec
from lumos.api.errors import error_response, page_redirect, success_response
from lumos.app_shell.config import Settings
from lumos.components.subscriptions import (
    CheckUnsubscribeTokenInput,
    UnsubscribeInput,
    run_check_unsubscribe_token,
    run_unsubscribe,
)
from lumos.components.tokens import TokenCodec
from lumos.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

UNSUBSCRIBED_MESSAGE = "Successfully unsubscribed"


def _token_from(query_token: str | None, body: Any) -> str:
    if isinstance(body, dict) and isinstance(body.get("token"), str) and body["token"]:
        return str(body["token"])
    return query_token or ""


@router.post("/unsubscribe", summary="Unsubscribe via email link token")
def unsubscribe(
    token: str | None = Query(None),
    body: Any = Body(None),
    store: SQLiteUnitOfWork = Depends(get_store),
    codec: TokenCodec = Depends(get_token_codec),
) -> JSONResponse:
    result = run_unsubscribe(UnsubscribeInput(token=_token_from(token, body)), store=store, codec=codec)
    if not result.success:
        return error_response(result.error)

    store.commit()
    return success_response({"message": UNSUBSCRIBED_MESSAGE})


@router.get("/unsubscribe", summary="Verify an unsubscribe link and redirect to the confirm page")
def unsubscribe_link(
    token: str | None = Query(None),
    codec: TokenCodec = Depends(get_token_codec),
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    base, page = settings.base_url, rules.paths.unsubscribe_page

    if not token:
        return page_redirect(base, page, {"error": "missing_token"})

    try:
        result = run_check_unsubscribe_token(CheckUnsubscribeTokenInput(token=token), codec=codec)
    except Exception:
        logger.exception("Unsubscribe link check failed")
        return page_redirect(base, page, {"error": "server_error"})

    if not result.success:
        return page_redirect(base, page, {"error": "invalid_token"})

    return page_redirect(base, page, {"token": token})
