"""
SQLite store adapter.

Implements the repository ports on stdlib sqlite3 and groups them in a
Unit of Work that shares one connection (one transaction) per request.

sqlite3 errors never leave this module raw: unique-constraint failures
become DuplicateKeyError, everything else StoreError.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from lumos.domain.entities import Post, Publication, Subscription, User
from lumos.ports.repo import DuplicateKeyError, StoreError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def format_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def connect(db_path: str) -> sqlite3.Connection:
    # A Unit of Work may be opened and used on different worker threads of one request.
    conn = sqlite3.connect(db_path, timeout=5.0, check_same_thread=False)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def translate_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            raise DuplicateKeyError(str(e)) from e
        raise StoreError(str(e)) from e
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection. A standalone repo commits and closes its own
        connection; a repo inside a Unit of Work leaves both to the UoW.
        """
        if self._external_conn is not None:
            with translate_errors():
                yield self._external_conn
            return

        with translate_errors():
            conn = connect(self.db_path)
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise
            finally:
                conn.close()


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def get_by_id(self, user_id: UUID) -> User | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            ).fetchone()
        return self._map_row(row) if row else None

    def add(self, user: User) -> User:
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO users (id, email, name, created_at) VALUES (?, ?, ?, ?)",
                (str(user.id), user.email.strip().lower(), user.name, user.created_at.isoformat()),
            )
        return user

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Publications
# -----------------------------------------------------------------------------


class SQLitePublicationRepo(SQLiteRepoBase):
    def get_by_id(self, publication_id: UUID) -> Publication | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM publications WHERE id = ?", (str(publication_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def get_by_slug(self, slug: str) -> Publication | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM publications WHERE slug = ?", (slug,)).fetchone()
        return self._map_row(row) if row else None

    def add(self, publication: Publication) -> Publication:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO publications (
                    id, name, slug, description, owner_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(publication.id),
                    publication.name,
                    publication.slug,
                    publication.description,
                    str(publication.owner_id),
                    publication.created_at.isoformat(),
                    publication.updated_at.isoformat(),
                ),
            )
        return publication

    def update(self, publication: Publication) -> Publication:
        with self._conn() as conn:
            conn.execute(
                """
                UPDATE publications
                SET name = ?, slug = ?, description = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    publication.name,
                    publication.slug,
                    publication.description,
                    publication.updated_at.isoformat(),
                    str(publication.id),
                ),
            )
        return publication

    def delete(self, publication_id: UUID) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM publications WHERE id = ?", (str(publication_id),))

    def list_all(self) -> list[Publication]:
        with self._conn() as conn:
            rows = conn.execute("SELECT * FROM publications ORDER BY created_at DESC").fetchall()
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> Publication:
        return Publication(
            id=UUID(row["id"]),
            name=row["name"],
            slug=row["slug"],
            description=row["description"],
            owner_id=UUID(row["owner_id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------


class SQLitePostRepo(SQLiteRepoBase):
    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_by_slug(self, publication_id: UUID, slug: str) -> Post | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM posts WHERE publication_id = ? AND slug = ?",
                (str(publication_id), slug),
            ).fetchone()
        return self._map_row(row) if row else None

    def add(self, post: Post) -> Post:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO posts (
                    id, publication_id, author_id, title, slug, subtitle,
                    content, excerpt, is_published, is_paid, published_at,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(post.id),
                    str(post.publication_id),
                    str(post.author_id),
                    post.title,
                    post.slug,
                    post.subtitle,
                    post.content,
                    post.excerpt,
                    int(post.is_published),
                    int(post.is_paid),
                    format_dt(post.published_at),
                    post.created_at.isoformat(),
                    post.updated_at.isoformat(),
                ),
            )
        return post

    def update(self, post: Post) -> Post:
        with self._conn() as conn:
            conn.execute(
                """
                UPDATE posts SET
                    title = ?, slug = ?, subtitle = ?, content = ?, excerpt = ?,
                    is_published = ?, is_paid = ?, published_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    post.title,
                    post.slug,
                    post.subtitle,
                    post.content,
                    post.excerpt,
                    int(post.is_published),
                    int(post.is_paid),
                    format_dt(post.published_at),
                    post.updated_at.isoformat(),
                    str(post.id),
                ),
            )
        return post

    def delete(self, post_id: UUID) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))

    def list_filtered(
        self, publication_id: UUID | None = None, published: bool | None = None
    ) -> list[Post]:
        clauses: list[str] = []
        params: list[Any] = []
        if publication_id is not None:
            clauses.append("publication_id = ?")
            params.append(str(publication_id))
        if published is not None:
            clauses.append("is_published = ?")
            params.append(int(published))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM posts{where} ORDER BY created_at DESC", params
            ).fetchall()
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            publication_id=UUID(row["publication_id"]),
            author_id=UUID(row["author_id"]),
            title=row["title"],
            slug=row["slug"],
            subtitle=row["subtitle"],
            content=row["content"],
            excerpt=row["excerpt"],
            is_published=bool(row["is_published"]),
            is_paid=bool(row["is_paid"]),
            published_at=parse_dt(row["published_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Subscriptions
# -----------------------------------------------------------------------------


class SQLiteSubscriptionRepo(SQLiteRepoBase):
    def find(self, user_id: UUID, publication_id: UUID) -> Subscription | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE user_id = ? AND publication_id = ?",
                (str(user_id), str(publication_id)),
            ).fetchone()
        return self._map_row(row) if row else None

    def add(self, subscription: Subscription) -> Subscription:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO subscriptions (id, user_id, publication_id, tier, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(subscription.id),
                    str(subscription.user_id),
                    str(subscription.publication_id),
                    subscription.tier,
                    subscription.status,
                    subscription.created_at.isoformat(),
                ),
            )
        return subscription

    def delete(self, subscription_id: UUID) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM subscriptions WHERE id = ?", (str(subscription_id),))

    def list_by_user(self, user_id: UUID) -> list[Subscription]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM subscriptions WHERE user_id = ? ORDER BY created_at DESC",
                (str(user_id),),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def list_by_publication(self, publication_id: UUID) -> list[Subscription]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM subscriptions WHERE publication_id = ? ORDER BY created_at DESC",
                (str(publication_id),),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Subscription:
        return Subscription(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            publication_id=UUID(row["publication_id"]),
            tier=row["tier"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work.

    Owns one connection for the duration of a `with` block; all repositories
    obtained from it share that connection and therefore one transaction.
    Leaving the block without commit() discards the work.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

        self._users: SQLiteUserRepo | None = None
        self._publications: SQLitePublicationRepo | None = None
        self._posts: SQLitePostRepo | None = None
        self._subscriptions: SQLiteSubscriptionRepo | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        with translate_errors():
            self._conn = connect(self.db_path)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._conn:
            # Uncommitted work is discarded, whether or not an error occurred.
            self._conn.rollback()
            self._conn.close()
            self._conn = None
        self._users = self._publications = self._posts = self._subscriptions = None

    def commit(self) -> None:
        if self._conn:
            with translate_errors():
                self._conn.commit()

    def rollback(self) -> None:
        if self._conn:
            self._conn.rollback()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SQLiteUnitOfWork used outside its `with` block")
        return self._conn

    @property
    def users(self) -> SQLiteUserRepo:
        if self._users is None:
            self._users = SQLiteUserRepo(self.db_path, self._connection())
        return self._users

    @property
    def publications(self) -> SQLitePublicationRepo:
        if self._publications is None:
            self._publications = SQLitePublicationRepo(self.db_path, self._connection())
        return self._publications

    @property
    def posts(self) -> SQLitePostRepo:
        if self._posts is None:
            self._posts = SQLitePostRepo(self.db_path, self._connection())
        return self._posts

    @property
    def subscriptions(self) -> SQLiteSubscriptionRepo:
        if self._subscriptions is None:
            self._subscriptions = SQLiteSubscriptionRepo(self.db_path, self._connection())
        return self._subscriptions
