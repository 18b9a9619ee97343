"""
Publish component unit tests.

Tests for post creation, editing, visibility, listing, publish/unpublish and deletion.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from lumos.adapters.clock import FixedClock
from lumos.components.publish import (
    PUBLISHED_MESSAGE,
    UNPUBLISHED_MESSAGE,
    CheckPostAccessInput,
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    PublishComponent,
    SetPublishedInput,
    UpdatePostInput,
)
from lumos.domain.entities import Post, Publication
from lumos.domain.errors import ErrorKind

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

# --- Mock Implementations ---


class MockPostRepo:
    """In-memory post repository for testing."""

    def __init__(self) -> None:
        self._posts: dict[UUID, Post] = {}

    def get_by_id(self, post_id: UUID) -> Post | None:
        return self._posts.get(post_id)

    def get_by_slug(self, publication_id: UUID, slug: str) -> Post | None:
        for post in self._posts.values():
            if post.publication_id == publication_id and post.slug == slug:
                return post
        return None

    def add(self, post: Post) -> Post:
        self._posts[post.id] = post
        return post

    def update(self, post: Post) -> Post:
        self._posts[post.id] = post
        return post

    def delete(self, post_id: UUID) -> None:
        self._posts.pop(post_id, None)

    def list_filtered(
        self, publication_id: UUID | None = None, published: bool | None = None
    ) -> list[Post]:
        posts = [
            p
            for p in self._posts.values()
            if (publication_id is None or p.publication_id == publication_id)
            and (published is None or p.is_published == published)
        ]
        return sorted(posts, key=lambda p: p.created_at, reverse=True)


class MockPublicationRepo:
    """In-memory publication repository for testing."""

    def __init__(self) -> None:
        self._publications: dict[UUID, Publication] = {}

    def get_by_id(self, publication_id: UUID) -> Publication | None:
        return self._publications.get(publication_id)

    def add(self, publication: Publication) -> Publication:
        self._publications[publication.id] = publication
        return publication


class MockStore:
    def __init__(self) -> None:
        self.posts = MockPostRepo()
        self.publications = MockPublicationRepo()


# --- Fixtures ---


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def author_id() -> UUID:
    return uuid4()


@pytest.fixture
def store() -> MockStore:
    return MockStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def component(store, clock) -> PublishComponent:
    return PublishComponent(store, clock)


@pytest.fixture
def publication(store, owner_id) -> Publication:
    return store.publications.add(Publication(name="Field Notes", slug="field-notes", owner_id=owner_id))


@pytest.fixture
def draft(store, publication, author_id) -> Post:
    return store.posts.add(
        Post(
            publication_id=publication.id,
            author_id=author_id,
            title="First light",
            slug="first-light",
            created_at=T0 - timedelta(days=1),
            updated_at=T0 - timedelta(days=1),
        )
    )


# --- Access ---


class TestCheckPostAccess:
    def test_anonymous_is_unauthenticated(self, component, draft):
        out = component.run(CheckPostAccessInput(principal_id=None, post_id=draft.id))
        assert out.error.kind is ErrorKind.UNAUTHENTICATED

    def test_missing_post_is_not_found(self, component, author_id):
        out = component.run(CheckPostAccessInput(principal_id=author_id, post_id=uuid4()))
        assert out.error.kind is ErrorKind.NOT_FOUND

    def test_stranger_is_forbidden(self, component, draft):
        out = component.run(CheckPostAccessInput(principal_id=uuid4(), post_id=draft.id))
        assert out.error.kind is ErrorKind.FORBIDDEN

    @pytest.mark.parametrize("who", ["author", "owner"])
    def test_author_and_owner_allowed(self, component, draft, author_id, owner_id, who):
        principal = author_id if who == "author" else owner_id
        out = component.run(CheckPostAccessInput(principal_id=principal, post_id=draft.id))

        assert out.success is True
        assert out.post.id == draft.id


# --- Publish / Unpublish ---


class TestSetPublished:
    def test_first_publish_stamps_published_at(self, component, store, draft, author_id):
        out = component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=True))

        assert out.success is True
        assert out.first_publish is True
        assert out.message == PUBLISHED_MESSAGE
        saved = store.posts.get_by_id(draft.id)
        assert saved.is_published is True
        assert saved.published_at == T0
        assert saved.updated_at == T0

    def test_toggle_preserves_first_published_at(self, component, store, clock, draft, author_id):
        component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=True))

        clock.set(T0 + timedelta(hours=1))
        off = component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=False))
        clock.set(T0 + timedelta(hours=2))
        on = component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=True))

        assert off.message == UNPUBLISHED_MESSAGE
        assert off.post.published_at == T0
        assert on.first_publish is False
        assert on.post.published_at == T0
        assert store.posts.get_by_id(draft.id).updated_at == T0 + timedelta(hours=2)

    def test_unpublish_draft_keeps_published_at_empty(self, component, draft, owner_id):
        out = component.run(SetPublishedInput(principal_id=owner_id, post_id=draft.id, publish=False))

        assert out.success is True
        assert out.post.published_at is None
        assert out.first_publish is False

    @pytest.mark.parametrize("value", ["yes", 1, None, "true"])
    def test_non_bool_rejected_without_change(self, component, store, draft, author_id, value):
        out = component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=value))

        assert out.error.kind is ErrorKind.INVALID_INPUT
        assert store.posts.get_by_id(draft.id) == draft

    def test_forbidden_leaves_post_unchanged(self, component, store, draft):
        out = component.run(SetPublishedInput(principal_id=uuid4(), post_id=draft.id, publish=True))

        assert out.error.kind is ErrorKind.FORBIDDEN
        assert store.posts.get_by_id(draft.id) == draft

    def test_not_found_before_invalid_body(self, component, author_id):
        out = component.run(SetPublishedInput(principal_id=author_id, post_id=uuid4(), publish="yes"))
        assert out.error.kind is ErrorKind.NOT_FOUND


# --- Create ---


class TestCreatePost:
    def test_owner_creates_draft(self, component, store, publication, owner_id):
        out = component.run(
            CreatePostInput(
                principal_id=owner_id, publication_id=publication.id, title="  Hello  ", slug="hello"
            )
        )

        assert out.success is True
        assert out.post.title == "Hello"
        assert out.post.author_id == owner_id
        assert out.post.published_at is None
        assert out.first_publish is False
        assert store.posts.get_by_id(out.post.id) is not None

    def test_publish_at_creation(self, component, publication, owner_id):
        out = component.run(
            CreatePostInput(
                principal_id=owner_id,
                publication_id=publication.id,
                title="Launch",
                slug="launch",
                publish=True,
            )
        )

        assert out.post.is_published is True
        assert out.post.published_at == T0
        assert out.first_publish is True

    def test_non_owner_forbidden(self, component, publication):
        out = component.run(
            CreatePostInput(principal_id=uuid4(), publication_id=publication.id, title="X", slug="xx")
        )
        assert out.error.kind is ErrorKind.FORBIDDEN

    def test_duplicate_slug_conflicts(self, component, publication, owner_id, draft):
        out = component.run(
            CreatePostInput(
                principal_id=owner_id, publication_id=publication.id, title="Again", slug=draft.slug
            )
        )
        assert out.error.kind is ErrorKind.CONFLICT

    @pytest.mark.parametrize(
        "title,slug,code",
        [
            ("", "valid-slug", "TITLE_REQUIRED"),
            ("Ok", "Bad Slug", "INVALID_SLUG"),
            ("Ok", "x", "INVALID_SLUG_LENGTH"),
            ("x" * 201, "valid-slug", "INVALID_TITLE"),
        ],
    )
    def test_validation(self, component, publication, owner_id, title, slug, code):
        out = component.run(
            CreatePostInput(principal_id=owner_id, publication_id=publication.id, title=title, slug=slug)
        )

        assert out.error.kind is ErrorKind.INVALID_INPUT
        assert out.error.code == code


# --- Read / Delete ---


class TestGetPost:
    def test_draft_hidden_from_strangers(self, component, draft):
        anonymous = component.run(GetPostInput(principal_id=None, post_id=draft.id))
        stranger = component.run(GetPostInput(principal_id=uuid4(), post_id=draft.id))

        assert anonymous.error.kind is ErrorKind.NOT_FOUND
        assert stranger.error.kind is ErrorKind.NOT_FOUND

    def test_draft_visible_to_owner(self, component, draft, owner_id):
        assert component.run(GetPostInput(principal_id=owner_id, post_id=draft.id)).success

    def test_published_visible_to_all(self, component, draft, author_id):
        component.run(SetPublishedInput(principal_id=author_id, post_id=draft.id, publish=True))
        out = component.run(GetPostInput(principal_id=None, post_id=draft.id))

        assert out.success is True
        assert out.post.is_published is True


class TestDeletePost:
    def test_author_deletes(self, component, store, draft, author_id):
        out = component.run(DeletePostInput(principal_id=author_id, post_id=draft.id))

        assert out.success is True
        assert store.posts.get_by_id(draft.id) is None

    def test_stranger_cannot_delete(self, component, store, draft):
        out = component.run(DeletePostInput(principal_id=uuid4(), post_id=draft.id))

        assert out.error.kind is ErrorKind.FORBIDDEN
        assert store.posts.get_by_id(draft.id) is not None


# --- Update ---


class TestUpdatePost:
    def test_author_edits_fields(self, component, store, draft, author_id):
        out = component.run(
            UpdatePostInput(
                principal_id=author_id, post_id=draft.id, title=" Second light ", content="Body", is_paid=True
            )
        )

        assert out.success is True
        stored = store.posts.get_by_id(draft.id)
        assert (stored.title, stored.content, stored.is_paid) == ("Second light", "Body", True)
        assert stored.slug == "first-light"
        assert stored.updated_at == T0
        assert out.first_publish is False

    def test_order_unauthenticated_not_found_forbidden(self, component, draft, author_id):
        assert component.run_update_post(
            UpdatePostInput(principal_id=None, post_id=draft.id)
        ).error.kind is ErrorKind.UNAUTHENTICATED
        assert component.run_update_post(
            UpdatePostInput(principal_id=author_id, post_id=uuid4())
        ).error.kind is ErrorKind.NOT_FOUND
        assert component.run_update_post(
            UpdatePostInput(principal_id=uuid4(), post_id=draft.id, title="Hijack")
        ).error.kind is ErrorKind.FORBIDDEN

    def test_slug_rechecked_within_publication(self, component, store, publication, draft, author_id):
        store.posts.add(Post(publication_id=publication.id, author_id=author_id, title="Other", slug="other"))

        out = component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, slug="other"))

        assert out.error.kind is ErrorKind.CONFLICT
        assert store.posts.get_by_id(draft.id).slug == "first-light"

    def test_slug_used_in_another_publication_is_fine(self, component, store, draft, author_id, owner_id):
        elsewhere = store.publications.add(Publication(name="Elsewhere", slug="elsewhere", owner_id=owner_id))
        store.posts.add(Post(publication_id=elsewhere.id, author_id=author_id, title="X", slug="shared"))

        out = component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, slug="shared"))

        assert out.success is True
        assert out.post.slug == "shared"

    def test_keeping_own_slug_is_not_a_conflict(self, component, draft, author_id):
        out = component.run_update_post(
            UpdatePostInput(principal_id=author_id, post_id=draft.id, slug="first-light")
        )
        assert out.success is True

    def test_invalid_slug(self, component, draft, author_id):
        out = component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, slug="No Way"))
        assert out.error.code == "INVALID_SLUG"

    def test_publishing_through_edit_stamps_once(self, component, store, clock, draft, author_id):
        first = component.run_update_post(
            UpdatePostInput(principal_id=author_id, post_id=draft.id, is_published=True)
        )
        assert first.first_publish is True
        assert first.post.published_at == T0

        clock.set(T0 + timedelta(hours=1))
        component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, is_published=False))
        clock.set(T0 + timedelta(hours=2))
        again = component.run_update_post(
            UpdatePostInput(principal_id=author_id, post_id=draft.id, is_published=True)
        )

        assert again.first_publish is False
        stored = store.posts.get_by_id(draft.id)
        assert stored.is_published is True
        assert stored.published_at == T0

    def test_edit_without_publish_flag_keeps_state(self, component, store, draft, author_id):
        component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, is_published=True))

        out = component.run_update_post(UpdatePostInput(principal_id=author_id, post_id=draft.id, title="New"))

        assert out.post.is_published is True
        assert out.first_publish is False

    @pytest.mark.parametrize("value", ["true", 1])
    def test_non_bool_publish_flag_rejected(self, component, store, draft, author_id, value):
        out = component.run_update_post(
            UpdatePostInput(principal_id=author_id, post_id=draft.id, title="Changed", is_published=value)
        )

        assert out.error.code == "INVALID_PUBLISH"
        assert store.posts.get_by_id(draft.id).title == "First light"


# --- List ---


class TestListPosts:
    @pytest.fixture
    def published(self, store, publication, author_id) -> Post:
        return store.posts.add(
            Post(
                publication_id=publication.id,
                author_id=author_id,
                title="Out now",
                slug="out-now",
                is_published=True,
                published_at=T0,
                created_at=T0,
                updated_at=T0,
            )
        )

    def test_strangers_see_published_only(self, component, draft, published):
        out = component.run(ListPostsInput(principal_id=None))
        assert [p.id for p in out.posts] == [published.id]

    def test_owner_sees_drafts_newest_first(self, component, draft, published, owner_id):
        out = component.run(ListPostsInput(principal_id=owner_id))
        assert [p.id for p in out.posts] == [published.id, draft.id]

    def test_published_filter(self, component, draft, published, author_id):
        drafts = component.run_list_posts(ListPostsInput(principal_id=author_id, published=False))
        live = component.run_list_posts(ListPostsInput(principal_id=author_id, published=True))

        assert [p.id for p in drafts.posts] == [draft.id]
        assert [p.id for p in live.posts] == [published.id]

    def test_publication_filter(self, component, store, published, author_id, owner_id):
        elsewhere = store.publications.add(Publication(name="Elsewhere", slug="elsewhere", owner_id=owner_id))
        other = store.posts.add(
            Post(publication_id=elsewhere.id, author_id=author_id, title="X", slug="x", is_published=True)
        )

        out = component.run_list_posts(ListPostsInput(principal_id=None, publication_id=elsewhere.id))

        assert [p.id for p in out.posts] == [other.id]
