"""Shared fixtures for component unit tests: a migrated temp SQLite store."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from lumos.adapters.sqlite.migrator import SQLiteMigrator
from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.domain.entities import Publication, User


@pytest.fixture
def db_path(tmp_path) -> str:
    path = os.path.join(str(tmp_path), "lumos.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def store(db_path) -> Iterator[SQLiteUnitOfWork]:
    with SQLiteUnitOfWork(db_path) as uow:
        yield uow


@pytest.fixture
def owner(store) -> User:
    return store.users.add(User(email="owner@example.com", name="Olive Owner"))


@pytest.fixture
def reader(store) -> User:
    return store.users.add(User(email="reader@example.com", name="Remy Reader"))


@pytest.fixture
def publication(store, owner) -> Publication:
    return store.publications.add(
        Publication(name="Night Notes", slug="night-notes", owner_id=owner.id)
    )
