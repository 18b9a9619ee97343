"""
Publication component.

Slugs are globally unique. A clash is reported as a Conflict, both when
found up front and when the store's uniqueness constraint fires on a
racing insert or rename.
"""

from __future__ import annotations

import logging
from uuid import UUID

from lumos.components.publications.models import (
    CreatePublicationInput,
    DeletePublicationInput,
    DeletePublicationOutput,
    GetPublicationInput,
    ListPublicationsOutput,
    PublicationConfig,
    PublicationOutput,
    UpdatePublicationInput,
)
from lumos.domain.entities import Publication
from lumos.domain.errors import (
    ActionError,
    ErrorKind,
    forbidden,
    not_found,
    unauthenticated,
)
from lumos.domain.policy import can_act, publication_owner_ids
from lumos.domain.validation import validate_slug, validate_text
from lumos.ports.clock import ClockPort
from lumos.ports.repo import DuplicateKeyError, StorePort

logger = logging.getLogger(__name__)

SLUG_TAKEN = ActionError(
    ErrorKind.CONFLICT, "SLUG_TAKEN", "A publication with this slug already exists", "slug"
)


def _validate_fields(
    config: PublicationConfig,
    *,
    name: str | None,
    slug: str | None,
    description: str | None,
) -> ActionError | None:
    slugs = config.slugs
    if name is not None:
        error = validate_text(name, "name", min_len=config.name_min, max_len=config.name_max)
        if error:
            return error
    if slug is not None:
        error = validate_slug(slug, slugs, min_len=slugs.publication_min, max_len=slugs.publication_max)
        if error:
            return error
    if description is not None:
        return validate_text(description, "description", min_len=0, max_len=config.description_max)
    return None


def run_create_publication(
    inp: CreatePublicationInput,
    *,
    store: StorePort,
    clock: ClockPort,
    config: PublicationConfig | None = None,
) -> PublicationOutput:
    cfg = config or PublicationConfig()

    if inp.principal_id is None:
        return PublicationOutput(success=False, error=unauthenticated())

    error = _validate_fields(cfg, name=inp.name, slug=inp.slug, description=inp.description)
    if error:
        return PublicationOutput(success=False, error=error)

    if store.publications.get_by_slug(inp.slug) is not None:
        return PublicationOutput(success=False, error=SLUG_TAKEN)

    now = clock.now()
    publication = Publication(
        name=inp.name.strip(),
        slug=inp.slug,
        description=inp.description.strip(),
        owner_id=inp.principal_id,
        created_at=now,
        updated_at=now,
    )
    try:
        store.publications.add(publication)
    except DuplicateKeyError:
        return PublicationOutput(success=False, error=SLUG_TAKEN)

    logger.info(f"Publication {publication.slug} created by {inp.principal_id}")
    return PublicationOutput(success=True, publication=publication)


def run_get_publication(inp: GetPublicationInput, *, store: StorePort) -> PublicationOutput:
    publication = store.publications.get_by_slug(inp.slug)
    if publication is None:
        return PublicationOutput(success=False, error=not_found("publication", "slug"))
    return PublicationOutput(success=True, publication=publication)


def run_list_publications(*, store: StorePort) -> ListPublicationsOutput:
    return ListPublicationsOutput(success=True, publications=store.publications.list_all())


def _resolve_owned(
    store: StorePort, principal_id: UUID | None, slug: str
) -> tuple[Publication | None, ActionError | None]:
    if principal_id is None:
        return None, unauthenticated()
    publication = store.publications.get_by_slug(slug)
    if publication is None:
        return None, not_found("publication", "slug")
    if not can_act(principal_id, publication_owner_ids(publication)):
        return None, forbidden()
    return publication, None


def run_update_publication(
    inp: UpdatePublicationInput,
    *,
    store: StorePort,
    clock: ClockPort,
    config: PublicationConfig | None = None,
) -> PublicationOutput:
    """Rename and/or re-slug. A slug change re-checks uniqueness."""
    cfg = config or PublicationConfig()

    publication, error = _resolve_owned(store, inp.principal_id, inp.slug)
    if error or publication is None:
        return PublicationOutput(success=False, error=error)

    error = _validate_fields(cfg, name=inp.name, slug=inp.new_slug, description=inp.description)
    if error:
        return PublicationOutput(success=False, error=error)

    updates: dict[str, object] = {"updated_at": clock.now()}
    if inp.name is not None:
        updates["name"] = inp.name.strip()
    if inp.description is not None:
        updates["description"] = inp.description.strip()
    if inp.new_slug is not None and inp.new_slug != publication.slug:
        if store.publications.get_by_slug(inp.new_slug) is not None:
            return PublicationOutput(success=False, error=SLUG_TAKEN)
        updates["slug"] = inp.new_slug

    updated = publication.model_copy(update=updates)
    try:
        store.publications.update(updated)
    except DuplicateKeyError:
        return PublicationOutput(success=False, error=SLUG_TAKEN)

    return PublicationOutput(success=True, publication=updated)


def run_delete_publication(inp: DeletePublicationInput, *, store: StorePort) -> DeletePublicationOutput:
    """Deleting a publication cascades to its posts and subscriptions."""
    publication, error = _resolve_owned(store, inp.principal_id, inp.slug)
    if error or publication is None:
        return DeletePublicationOutput(success=False, error=error)

    store.publications.delete(publication.id)
    logger.info(f"Publication {publication.slug} deleted")
    return DeletePublicationOutput(success=True)
