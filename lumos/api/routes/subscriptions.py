"""
Subscriptions of the signed-in reader.

Endpoints:
- GET /api/subscriptions - my subscriptions (optionally ?publicationId=)
- GET /api/subscriptions?publicationId=..&listSubscribers=true - owner view
- POST /api/subscriptions - subscribe (201, or 200 when already subscribed)
- DELETE /api/subscriptions?publicationId= - unsubscribe (idempotent)
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api.deps import get_current_principal, get_store
from lumos.api.errors import error_response, success_response
from lumos.api.schemas import SubscribeRequest, SubscriberData, SubscriptionData
from lumos.components.subscriptions import (
    CancelSubscriptionInput,
    ListMySubscriptionsInput,
    ListSubscribersInput,
    SubscribeInput,
    run_cancel,
    run_list_mine,
    run_list_subscribers,
    run_subscribe,
)
from lumos.domain.errors import invalid_input, unauthenticated

router = APIRouter()

PUBLICATION_ID_REQUIRED = invalid_input(
    "MISSING_PUBLICATION_ID", "Publication ID is required", "publicationId"
)


@router.get("", summary="List subscriptions")
def list_subscriptions(
    publication_id: UUID | None = Query(None, alias="publicationId"),
    list_subscribers: bool = Query(False, alias="listSubscribers"),
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> JSONResponse:
    if list_subscribers and publication_id is not None:
        owner_view = run_list_subscribers(
            ListSubscribersInput(principal_id=principal_id, publication_id=publication_id),
            store=store,
        )
        if not owner_view.success:
            return error_response(owner_view.error)
        return success_response(
            [SubscriberData.from_pair(s.subscription, s.user).to_json() for s in owner_view.subscribers]
        )

    mine = run_list_mine(
        ListMySubscriptionsInput(principal_id=principal_id, publication_id=publication_id),
        store=store,
    )
    if not mine.success:
        return error_response(mine.error)
    return success_response([SubscriptionData.from_entity(s).to_json() for s in mine.subscriptions])


@router.post("", summary="Subscribe to a publication")
def subscribe(
    request_body: SubscribeRequest,
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> JSONResponse:
    result = run_subscribe(
        SubscribeInput(
            principal_id=principal_id,
            publication_id=request_body.publication_id,
            tier=request_body.tier,
        ),
        store=store,
    )
    if not result.success or result.subscription is None:
        return error_response(result.error)

    store.commit()
    data = SubscriptionData.from_entity(result.subscription).to_json()
    if result.already_subscribed:
        return success_response(data, message="Already subscribed to this publication")
    return success_response(data, status_code=status.HTTP_201_CREATED)


@router.delete("", summary="Unsubscribe from a publication")
def unsubscribe(
    publication_id: UUID | None = Query(None, alias="publicationId"),
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> JSONResponse:
    if principal_id is None:
        return error_response(unauthenticated())
    if publication_id is None:
        return error_response(PUBLICATION_ID_REQUIRED)

    result = run_cancel(
        CancelSubscriptionInput(principal_id=principal_id, publication_id=publication_id),
        store=store,
    )
    if not result.success:
        return error_response(result.error)

    store.commit()
    return success_response({"removed": result.removed})
