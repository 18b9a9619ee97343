from typing import Protocol
from uuid import UUID

from lumos.domain.entities import Post, Publication, Subscription, User


class StoreError(Exception):
    """Backing store failed (connection, SQL or constraint error)."""


class DuplicateKeyError(StoreError):
    """A uniqueness constraint rejected the write."""


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None:
        ...

    def get_by_email(self, email: str) -> User | None:
        ...

    def add(self, user: User) -> User:
        """Insert a new user. Raises DuplicateKeyError if the email exists."""
        ...


class PublicationRepoPort(Protocol):
    def get_by_id(self, publication_id: UUID) -> Publication | None:
        ...

    def get_by_slug(self, slug: str) -> Publication | None:
        ...

    def add(self, publication: Publication) -> Publication:
        """Insert a new publication. Raises DuplicateKeyError on slug clash."""
        ...

    def update(self, publication: Publication) -> Publication:
        ...

    def delete(self, publication_id: UUID) -> None:
        ...

    def list_all(self) -> list[Publication]:
        """Newest first."""
        ...


class PostRepoPort(Protocol):
    def get_by_id(self, post_id: UUID) -> Post | None:
        ...

    def get_by_slug(self, publication_id: UUID, slug: str) -> Post | None:
        ...

    def add(self, post: Post) -> Post:
        ...

    def update(self, post: Post) -> Post:
        ...

    def delete(self, post_id: UUID) -> None:
        ...

    def list_filtered(
        self, publication_id: UUID | None = None, published: bool | None = None
    ) -> list[Post]:
        """Newest first; None filters are not applied."""
        ...


class SubscriptionRepoPort(Protocol):
    def find(self, user_id: UUID, publication_id: UUID) -> Subscription | None:
        ...

    def add(self, subscription: Subscription) -> Subscription:
        """Insert a subscription. Raises DuplicateKeyError if the pair exists."""
        ...

    def delete(self, subscription_id: UUID) -> None:
        ...

    def list_by_user(self, user_id: UUID) -> list[Subscription]:
        ...

    def list_by_publication(self, publication_id: UUID) -> list[Subscription]:
        ...


class StorePort(Protocol):
    """
    Handle to the backing store for one unit of work.

    Passed explicitly into every component call; the caller owns its
    lifecycle and decides whether to commit.
    """

    @property
    def users(self) -> UserRepoPort:
        ...

    @property
    def publications(self) -> PublicationRepoPort:
        ...

    @property
    def posts(self) -> PostRepoPort:
        ...

    @property
    def subscriptions(self) -> SubscriptionRepoPort:
        ...
