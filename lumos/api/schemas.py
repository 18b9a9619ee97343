"""
Request and response bodies.

JSON uses camelCase keys (publicationId, isPublished, ...); Python code
uses snake_case through the alias generator.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictBool
from pydantic.alias_generators import to_camel

from lumos.domain.entities import Post, Publication, Subscription, User


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Requests ---


class TokenRequest(ApiModel):
    token: str | None = None


class EmailSubscribeRequest(ApiModel):
    email: str | None = None
    publication_id: UUID | None = None
    publication_slug: str | None = None


class PublishRequest(ApiModel):
    publish: StrictBool


class CreatePostRequest(ApiModel):
    publication_id: UUID
    title: str
    slug: str
    subtitle: str = ""
    content: str = ""
    excerpt: str = ""
    is_paid: StrictBool = False
    publish: StrictBool = False


class UpdatePostRequest(ApiModel):
    """Omitted fields stay unchanged."""

    title: str | None = None
    slug: str | None = None
    subtitle: str | None = None
    content: str | None = None
    excerpt: str | None = None
    is_paid: StrictBool | None = None
    is_published: StrictBool | None = None


class CreatePublicationRequest(ApiModel):
    name: str
    slug: str
    description: str = ""


class UpdatePublicationRequest(ApiModel):
    name: str | None = None
    slug: str | None = None
    description: str | None = None


class SubscribeRequest(ApiModel):
    publication_id: UUID
    tier: Literal["free", "paid"] = "free"


# --- Response data ---


class PostData(ApiModel):
    id: UUID
    publication_id: UUID
    author_id: UUID
    title: str
    slug: str
    subtitle: str
    content: str
    excerpt: str
    is_published: bool
    is_paid: bool
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, post: Post) -> "PostData":
        return cls.model_validate(post.model_dump())


class PublicationData(ApiModel):
    id: UUID
    name: str
    slug: str
    description: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, publication: Publication) -> "PublicationData":
        return cls.model_validate(publication.model_dump())


class SubscriptionData(ApiModel):
    id: UUID
    user_id: UUID
    publication_id: UUID
    tier: str
    status: str
    created_at: datetime

    @classmethod
    def from_entity(cls, subscription: Subscription) -> "SubscriptionData":
        return cls.model_validate(subscription.model_dump())


class SubscriberData(SubscriptionData):
    email: str
    name: str | None = None

    @classmethod
    def from_pair(cls, subscription: Subscription, user: User) -> "SubscriberData":
        return cls.model_validate({**subscription.model_dump(), "email": user.email, "name": user.name})
