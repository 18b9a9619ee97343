"""Publish component models - frozen dataclass inputs and outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from lumos.domain.entities import Post, Publication
from lumos.domain.errors import ActionError
from lumos.rules.models import SlugRules

PUBLISHED_MESSAGE = "Post published successfully"
UNPUBLISHED_MESSAGE = "Post unpublished successfully"


@dataclass(frozen=True)
class CheckPostAccessInput:
    """Lookup + guard only, no mutation."""

    principal_id: UUID | None
    post_id: UUID


@dataclass(frozen=True)
class PostAccessOutput:
    success: bool
    error: ActionError | None = None
    post: Post | None = None
    publication: Publication | None = None


@dataclass(frozen=True)
class SetPublishedInput:
    """`publish` is typed loosely; anything but a bool is rejected."""

    principal_id: UUID | None
    post_id: UUID
    publish: object


@dataclass(frozen=True)
class SetPublishedOutput:
    success: bool
    error: ActionError | None = None
    post: Post | None = None
    first_publish: bool = False
    message: str = ""


@dataclass(frozen=True)
class CreatePostInput:
    principal_id: UUID | None
    publication_id: UUID
    title: str
    slug: str
    subtitle: str = ""
    content: str = ""
    excerpt: str = ""
    is_paid: bool = False
    publish: bool = False


@dataclass(frozen=True)
class CreatePostOutput:
    success: bool
    error: ActionError | None = None
    post: Post | None = None
    first_publish: bool = False


@dataclass(frozen=True)
class GetPostInput:
    principal_id: UUID | None
    post_id: UUID


@dataclass(frozen=True)
class GetPostOutput:
    success: bool
    error: ActionError | None = None
    post: Post | None = None


@dataclass(frozen=True)
class DeletePostInput:
    principal_id: UUID | None
    post_id: UUID


@dataclass(frozen=True)
class DeletePostOutput:
    success: bool
    error: ActionError | None = None


@dataclass(frozen=True)
class UpdatePostInput:
    """None leaves a field unchanged. `is_published` is typed loosely like `publish`."""

    principal_id: UUID | None
    post_id: UUID
    title: str | None = None
    slug: str | None = None
    subtitle: str | None = None
    content: str | None = None
    excerpt: str | None = None
    is_paid: bool | None = None
    is_published: object = None


@dataclass(frozen=True)
class UpdatePostOutput:
    success: bool
    error: ActionError | None = None
    post: Post | None = None
    first_publish: bool = False


@dataclass(frozen=True)
class ListPostsInput:
    principal_id: UUID | None
    publication_id: UUID | None = None
    published: bool | None = None


@dataclass(frozen=True)
class ListPostsOutput:
    success: bool
    error: ActionError | None = None
    posts: list[Post] = field(default_factory=list)


@dataclass(frozen=True)
class PublishConfig:
    slugs: SlugRules = field(default_factory=SlugRules)
    title_max: int = 200
