"""
Ownership-based authorization guard.

A principal may act on a resource iff its id is one of the resource's
owner ids. Anonymous callers (no principal) are never allowed.
"""

from collections.abc import Collection
from uuid import UUID

from lumos.domain.entities import Post, Publication


def can_act(principal_id: UUID | None, owner_ids: Collection[UUID]) -> bool:
    """Return True iff `principal_id` is present and a member of `owner_ids`."""
    if principal_id is None:
        return False
    return principal_id in owner_ids


def publication_owner_ids(publication: Publication) -> frozenset[UUID]:
    return frozenset({publication.owner_id})


def post_owner_ids(post: Post, publication: Publication | None) -> frozenset[UUID]:
    """Author of the post plus owner of its publication (when known)."""
    ids = {post.author_id}
    if publication is not None:
        ids.add(publication.owner_id)
    return frozenset(ids)
