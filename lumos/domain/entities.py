from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
SubscriptionTier = Literal["free", "paid"]
SubscriptionStatus = Literal["active", "past_due", "canceled"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Principals ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Principal(BaseModel):
    """Authenticated actor for the current request. Only `id` is compared."""

    id: UUID


# --- Publishing ---

class Publication(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    description: str = ""
    owner_id: UUID
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    publication_id: UUID
    author_id: UUID
    title: str
    slug: str
    subtitle: str = ""
    content: str = ""
    excerpt: str = ""

    is_published: bool = False
    is_paid: bool = False
    published_at: datetime | None = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# --- Subscriptions ---

class Subscription(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    publication_id: UUID
    tier: SubscriptionTier = "free"
    status: SubscriptionStatus = "active"
    created_at: datetime = Field(default_factory=_utcnow)
