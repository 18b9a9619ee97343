"""Publication component tests against a temporary SQLite store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from lumos.adapters.clock import FixedClock
from lumos.components.publications import (
    CreatePublicationInput,
    DeletePublicationInput,
    GetPublicationInput,
    UpdatePublicationInput,
    run_create_publication,
    run_delete_publication,
    run_get_publication,
    run_list_publications,
    run_update_publication,
)
from lumos.domain.entities import Post, Subscription
from lumos.domain.errors import ErrorKind

T0 = datetime(2026, 2, 1, 8, 30, tzinfo=UTC)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


class BlindSlugLookup:
    """Publication repo whose slug lookup never sees existing rows."""

    def __init__(self, inner):
        self._inner = inner

    def get_by_slug(self, slug):
        return None

    def add(self, publication):
        return self._inner.add(publication)


class StoreView:
    def __init__(self, inner, publications):
        self._inner = inner
        self.publications = publications

    def __getattr__(self, name):
        return getattr(self._inner, name)


class TestCreate:
    def test_creates_owned_publication(self, store, owner, clock):
        out = run_create_publication(
            CreatePublicationInput(principal_id=owner.id, name=" Deep Field ", slug="deep-field"),
            store=store,
            clock=clock,
        )

        assert out.success is True
        assert out.publication.owner_id == owner.id
        assert out.publication.name == "Deep Field"
        assert out.publication.created_at == T0
        assert store.publications.get_by_slug("deep-field") is not None

    def test_requires_principal(self, store, clock):
        out = run_create_publication(
            CreatePublicationInput(principal_id=None, name="Deep Field", slug="deep-field"),
            store=store,
            clock=clock,
        )
        assert out.error.kind is ErrorKind.UNAUTHENTICATED

    def test_slug_taken_is_conflict(self, store, owner, clock, publication):
        out = run_create_publication(
            CreatePublicationInput(principal_id=owner.id, name="Copycat", slug=publication.slug),
            store=store,
            clock=clock,
        )
        assert out.error.kind is ErrorKind.CONFLICT

    def test_racing_insert_is_conflict(self, store, owner, clock, publication):
        view = StoreView(store, BlindSlugLookup(store.publications))

        out = run_create_publication(
            CreatePublicationInput(principal_id=owner.id, name="Copycat", slug=publication.slug),
            store=view,
            clock=clock,
        )

        assert out.error.kind is ErrorKind.CONFLICT
        assert out.error.code == "SLUG_TAKEN"

    @pytest.mark.parametrize(
        "name,slug,description,code",
        [
            ("X", "fine-slug", "", "INVALID_NAME"),
            ("Fine", "UPPER", "", "INVALID_SLUG"),
            ("Fine", "a" * 51, "", "INVALID_SLUG_LENGTH"),
            ("Fine", "fine-slug", "d" * 501, "INVALID_DESCRIPTION"),
        ],
    )
    def test_validation(self, store, owner, clock, name, slug, description, code):
        out = run_create_publication(
            CreatePublicationInput(principal_id=owner.id, name=name, slug=slug, description=description),
            store=store,
            clock=clock,
        )

        assert out.error.kind is ErrorKind.INVALID_INPUT
        assert out.error.code == code


class TestGet:
    def test_found(self, store, publication):
        out = run_get_publication(GetPublicationInput(slug=publication.slug), store=store)
        assert out.publication.id == publication.id

    def test_missing(self, store):
        out = run_get_publication(GetPublicationInput(slug="nope"), store=store)
        assert out.error.kind is ErrorKind.NOT_FOUND


class TestUpdate:
    def test_rename_and_reslug(self, store, owner, clock, publication):
        clock.set(T0 + timedelta(minutes=5))

        out = run_update_publication(
            UpdatePublicationInput(
                principal_id=owner.id, slug=publication.slug, name="Night Owls", new_slug="night-owls"
            ),
            store=store,
            clock=clock,
        )

        assert out.success is True
        assert store.publications.get_by_slug("night-owls").name == "Night Owls"
        assert store.publications.get_by_slug(publication.slug) is None
        assert out.publication.updated_at == T0 + timedelta(minutes=5)

    def test_reslug_onto_taken_slug(self, store, owner, clock, publication):
        run_create_publication(
            CreatePublicationInput(principal_id=owner.id, name="Other", slug="other"),
            store=store,
            clock=clock,
        )

        out = run_update_publication(
            UpdatePublicationInput(principal_id=owner.id, slug=publication.slug, new_slug="other"),
            store=store,
            clock=clock,
        )

        assert out.error.kind is ErrorKind.CONFLICT
        assert store.publications.get_by_slug(publication.slug) is not None

    def test_non_owner_forbidden(self, store, reader, clock, publication):
        out = run_update_publication(
            UpdatePublicationInput(principal_id=reader.id, slug=publication.slug, name="Hijacked"),
            store=store,
            clock=clock,
        )

        assert out.error.kind is ErrorKind.FORBIDDEN
        assert store.publications.get_by_slug(publication.slug).name == publication.name

    def test_missing_before_forbidden(self, store, clock):
        out = run_update_publication(
            UpdatePublicationInput(principal_id=uuid4(), slug="ghost", name="Ghost"),
            store=store,
            clock=clock,
        )
        assert out.error.kind is ErrorKind.NOT_FOUND


class TestDelete:
    def test_cascades(self, store, owner, reader, publication):
        store.posts.add(
            Post(publication_id=publication.id, author_id=owner.id, title="Gone", slug="gone")
        )
        store.subscriptions.add(Subscription(user_id=reader.id, publication_id=publication.id))

        out = run_delete_publication(
            DeletePublicationInput(principal_id=owner.id, slug=publication.slug), store=store
        )

        assert out.success is True
        assert store.publications.get_by_id(publication.id) is None
        assert store.subscriptions.list_by_user(reader.id) == []

    def test_non_owner_forbidden(self, store, reader, publication):
        out = run_delete_publication(
            DeletePublicationInput(principal_id=reader.id, slug=publication.slug), store=store
        )

        assert out.error.kind is ErrorKind.FORBIDDEN
        assert store.publications.get_by_id(publication.id) is not None

    def test_anonymous_is_unauthenticated(self, store, publication):
        out = run_delete_publication(
            DeletePublicationInput(principal_id=None, slug=publication.slug), store=store
        )

        assert out.error.kind is ErrorKind.UNAUTHENTICATED
        assert store.publications.get_by_id(publication.id) is not None


class TestList:
    def test_empty(self, store):
        out = run_list_publications(store=store)
        assert out.success is True
        assert out.publications == []

    def test_newest_first(self, store, owner, clock):
        for i, slug in enumerate(["first", "second", "third"]):
            clock.set(T0 + timedelta(minutes=i))
            run_create_publication(
                CreatePublicationInput(principal_id=owner.id, name=slug.title(), slug=slug),
                store=store,
                clock=clock,
            )

        out = run_list_publications(store=store)

        assert [p.slug for p in out.publications] == ["third", "second", "first"]
