"""
Post endpoints.

Endpoints:
- GET /api/posts - list (?publicationId=, ?published=true|false)
- POST /api/posts - create a post (owner of the publication)
- GET /api/posts/{post_id} - read (drafts only for author/owner)
- PATCH /api/posts/{post_id} - edit (author or owner)
- DELETE /api/posts/{post_id} - delete (author or owner)
- POST /api/posts/{post_id}/publish - publish/unpublish

The publish and edit routes report 401, then 404, then 403, and only then
look at the body (400). A first publish announces the post to subscribers
after the commit; delivery problems never fail the request.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api.deps import (
    get_clock,
    get_current_principal,
    get_email_sender,
    get_notification_config,
    get_publish_config,
    get_store,
    get_token_codec,
)
from lumos.api.errors import envelope_error, error_response, success_response, validation_message
from lumos.api.schemas import CreatePostRequest, PostData, PublishRequest, UpdatePostRequest
from lumos.components.notifications import NotificationConfig, NotifyNewPostInput, run_notify_new_post
from lumos.components.publish import (
    CheckPostAccessInput,
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    PublishComponent,
    PublishConfig,
    SetPublishedInput,
    UpdatePostInput,
)
from lumos.components.tokens import TokenCodec
from lumos.domain.errors import not_found, unauthenticated
from lumos.ports.clock import ClockPort
from lumos.ports.email import EmailPort
from lumos.ports.repo import StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


def get_publish_component(
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    config: PublishConfig = Depends(get_publish_config),
) -> PublishComponent:
    return PublishComponent(store, clock, config)


class Announcer:
    """Sends new-post emails for a freshly published post."""

    def __init__(
        self,
        store: SQLiteUnitOfWork = Depends(get_store),
        codec: TokenCodec = Depends(get_token_codec),
        email_sender: EmailPort = Depends(get_email_sender),
        config: NotificationConfig = Depends(get_notification_config),
    ):
        self.store = store
        self.codec = codec
        self.email_sender = email_sender
        self.config = config

    def __call__(self, post_id: UUID) -> None:
        try:
            result = run_notify_new_post(
                NotifyNewPostInput(post_id=post_id),
                store=self.store,
                codec=self.codec,
                email_sender=self.email_sender,
                config=self.config,
            )
        except StoreError as e:
            logger.error(f"Could not load subscribers for post {post_id}: {e}")
            return
        if not result.success:
            logger.error(f"New-post notification for {post_id} failed: {result.error}")


def parse_id(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


@router.get("", summary="List posts")
def list_posts(
    publication_id: UUID | None = Query(None, alias="publicationId"),
    published: bool | None = Query(None),
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
) -> JSONResponse:
    result = component.run_list_posts(
        ListPostsInput(principal_id=principal_id, publication_id=publication_id, published=published)
    )
    if not result.success:
        return error_response(result.error)
    return success_response({"items": [PostData.from_entity(p).to_json() for p in result.posts]})


@router.post("", summary="Create post")
def create_post(
    request_body: CreatePostRequest,
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
    store: SQLiteUnitOfWork = Depends(get_store),
    announce: Announcer = Depends(),
) -> JSONResponse:
    result = component.run_create_post(
        CreatePostInput(
            principal_id=principal_id,
            publication_id=request_body.publication_id,
            title=request_body.title,
            slug=request_body.slug,
            subtitle=request_body.subtitle,
            content=request_body.content,
            excerpt=request_body.excerpt,
            is_paid=request_body.is_paid,
            publish=request_body.publish,
        )
    )
    if not result.success or result.post is None:
        return error_response(result.error)

    store.commit()
    if result.first_publish:
        announce(result.post.id)
    return success_response(
        PostData.from_entity(result.post).to_json(), status_code=status.HTTP_201_CREATED
    )


@router.get("/{post_id}", summary="Get post")
def get_post(
    post_id: str,
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
) -> JSONResponse:
    parsed = parse_id(post_id)
    if parsed is None:
        return error_response(not_found("post"))

    result = component.run_get_post(GetPostInput(principal_id=principal_id, post_id=parsed))
    if not result.success or result.post is None:
        return error_response(result.error)
    return success_response(PostData.from_entity(result.post).to_json())


@router.patch("/{post_id}", summary="Edit post")
def update_post(
    post_id: str,
    body: Any = Body(None),
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
    store: SQLiteUnitOfWork = Depends(get_store),
    announce: Announcer = Depends(),
) -> JSONResponse:
    if principal_id is None:
        return error_response(unauthenticated())
    parsed = parse_id(post_id)
    if parsed is None:
        return error_response(not_found("post"))

    access = component.run_check_post_access(
        CheckPostAccessInput(principal_id=principal_id, post_id=parsed)
    )
    if not access.success:
        return error_response(access.error)

    try:
        changes = UpdatePostRequest.model_validate(body if body is not None else {})
    except ValidationError as e:
        return envelope_error(validation_message(e.errors()), status.HTTP_400_BAD_REQUEST)

    result = component.run_update_post(
        UpdatePostInput(
            principal_id=principal_id,
            post_id=parsed,
            title=changes.title,
            slug=changes.slug,
            subtitle=changes.subtitle,
            content=changes.content,
            excerpt=changes.excerpt,
            is_paid=changes.is_paid,
            is_published=changes.is_published,
        )
    )
    if not result.success or result.post is None:
        return error_response(result.error)

    store.commit()
    if result.first_publish:
        announce(result.post.id)
    return success_response(PostData.from_entity(result.post).to_json())


@router.delete("/{post_id}", summary="Delete post")
def delete_post(
    post_id: str,
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> JSONResponse:
    if principal_id is None:
        return error_response(unauthenticated())
    parsed = parse_id(post_id)
    if parsed is None:
        return error_response(not_found("post"))

    result = component.run_delete_post(DeletePostInput(principal_id=principal_id, post_id=parsed))
    if not result.success:
        return error_response(result.error)

    store.commit()
    return success_response(message="Post deleted successfully")


@router.post("/{post_id}/publish", summary="Publish or unpublish post")
def set_published(
    post_id: str,
    body: Any = Body(None),
    principal_id: UUID | None = Depends(get_current_principal),
    component: PublishComponent = Depends(get_publish_component),
    store: SQLiteUnitOfWork = Depends(get_store),
    announce: Announcer = Depends(),
) -> JSONResponse:
    if principal_id is None:
        return error_response(unauthenticated())
    parsed = parse_id(post_id)
    if parsed is None:
        return error_response(not_found("post"))

    access = component.run_check_post_access(
        CheckPostAccessInput(principal_id=principal_id, post_id=parsed)
    )
    if not access.success:
        return error_response(access.error)

    try:
        publish_request = PublishRequest.model_validate(body)
    except ValidationError:
        return envelope_error("publish must be a boolean", status.HTTP_400_BAD_REQUEST)

    result = component.run_set_published(
        SetPublishedInput(principal_id=principal_id, post_id=parsed, publish=publish_request.publish)
    )
    if not result.success or result.post is None:
        return error_response(result.error)

    store.commit()
    if result.first_publish:
        announce(result.post.id)
    return success_response(PostData.from_entity(result.post).to_json(), message=result.message)
