"""
Publication endpoints.

Endpoints:
- GET /api/publications - list, newest first
- POST /api/publications - create (slug clash -> 409)
- GET /api/publications/{slug} - read
- PATCH /api/publications/{slug} - rename / re-slug (owner)
- DELETE /api/publications/{slug} - delete (owner)
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api.deps import get_clock, get_current_principal, get_publication_config, get_store
from lumos.api.errors import error_response, success_response
from lumos.api.schemas import CreatePublicationRequest, PublicationData, UpdatePublicationRequest
from lumos.components.publications import (
    CreatePublicationInput,
    DeletePublicationInput,
    GetPublicationInput,
    PublicationConfig,
    UpdatePublicationInput,
    run_create_publication,
    run_delete_publication,
    run_get_publication,
    run_list_publications,
    run_update_publication,
)
from lumos.ports.clock import ClockPort

router = APIRouter()


@router.get("", summary="List publications")
def list_publications(store: SQLiteUnitOfWork = Depends(get_store)) -> JSONResponse:
    result = run_list_publications(store=store)
    if not result.success:
        return error_response(result.error)
    return success_response(
        {"items": [PublicationData.from_entity(p).to_json() for p in result.publications]}
    )


@router.post("", summary="Create publication")
def create_publication(
    request_body: CreatePublicationRequest,
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    config: PublicationConfig = Depends(get_publication_config),
) -> JSONResponse:
    result = run_create_publication(
        CreatePublicationInput(
            principal_id=principal_id,
            name=request_body.name,
            slug=request_body.slug,
            description=request_body.description,
        ),
        store=store,
        clock=clock,
        config=config,
    )
    if not result.success or result.publication is None:
        return error_response(result.error)

    store.commit()
    return success_response(
        PublicationData.from_entity(result.publication).to_json(),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{slug}", summary="Get publication by slug")
def get_publication(slug: str, store: SQLiteUnitOfWork = Depends(get_store)) -> JSONResponse:
    result = run_get_publication(GetPublicationInput(slug=slug), store=store)
    if not result.success or result.publication is None:
        return error_response(result.error)
    return success_response(PublicationData.from_entity(result.publication).to_json())


@router.patch("/{slug}", summary="Update publication")
def update_publication(
    slug: str,
    request_body: UpdatePublicationRequest,
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    config: PublicationConfig = Depends(get_publication_config),
) -> JSONResponse:
    result = run_update_publication(
        UpdatePublicationInput(
            principal_id=principal_id,
            slug=slug,
            name=request_body.name,
            new_slug=request_body.slug,
            description=request_body.description,
        ),
        store=store,
        clock=clock,
        config=config,
    )
    if not result.success or result.publication is None:
        return error_response(result.error)

    store.commit()
    return success_response(PublicationData.from_entity(result.publication).to_json())


@router.delete("/{slug}", summary="Delete publication")
def delete_publication(
    slug: str,
    principal_id: UUID | None = Depends(get_current_principal),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> JSONResponse:
    result = run_delete_publication(
        DeletePublicationInput(principal_id=principal_id, slug=slug), store=store
    )
    if not result.success:
        return error_response(result.error)

    store.commit()
    return success_response(message="Publication deleted successfully")
