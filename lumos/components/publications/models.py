"""Publication component models."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from lumos.domain.entities import Publication
from lumos.domain.errors import ActionError
from lumos.rules.models import SlugRules


@dataclass(frozen=True)
class CreatePublicationInput:
    principal_id: UUID | None
    name: str
    slug: str
    description: str = ""


@dataclass(frozen=True)
class GetPublicationInput:
    slug: str


@dataclass(frozen=True)
class UpdatePublicationInput:
    """None means "leave unchanged"."""

    principal_id: UUID | None
    slug: str
    name: str | None = None
    new_slug: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class DeletePublicationInput:
    principal_id: UUID | None
    slug: str


@dataclass(frozen=True)
class PublicationOutput:
    success: bool
    error: ActionError | None = None
    publication: Publication | None = None


@dataclass(frozen=True)
class ListPublicationsOutput:
    success: bool
    error: ActionError | None = None
    publications: list[Publication] = field(default_factory=list)


@dataclass(frozen=True)
class DeletePublicationOutput:
    success: bool
    error: ActionError | None = None


@dataclass(frozen=True)
class PublicationConfig:
    slugs: SlugRules = field(default_factory=SlugRules)
    name_min: int = 2
    name_max: int = 100
    description_max: int = 500
