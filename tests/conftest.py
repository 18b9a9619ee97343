import os
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from lumos.adapters.auth.session import SessionTokens
from lumos.adapters.clock import FixedClock
from lumos.adapters.dev_email import DevEmailAdapter
from lumos.adapters.sqlite.migrator import SQLiteMigrator
from lumos.adapters.sqlite.repos import SQLiteUnitOfWork
from lumos.api import deps
from lumos.api.main import app
from lumos.app_shell.config import Settings
from lumos.app_shell.rate_limit import RateLimiter
from lumos.components.tokens import TokenClaims, TokenCodec, TokenConfig, TokenPurpose
from lumos.domain.entities import Post, Publication, User
from lumos.rules.loader import load_rules
from lumos.rules.models import Rules

T0 = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
SECRET = "test-secret"
RULES_PATH = Path(__file__).resolve().parents[1] / "rules.yaml"


@pytest.fixture
def db_path(tmp_path) -> str:
    path = os.path.join(str(tmp_path), "lumos.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def rules() -> Rules:
    # Real rules from the project root
    return load_rules(RULES_PATH)


@pytest.fixture
def settings(tmp_path, db_path) -> Settings:
    s = Settings()
    s.data_dir = tmp_path
    s.db_path = db_path
    s.secret_key = SECRET
    s.base_url = "https://lumos.test"
    s.rules_path = RULES_PATH
    return s


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def mailer() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def codec(clock) -> TokenCodec:
    return TokenCodec(TokenConfig(SECRET), clock)


@pytest.fixture
def client(settings, rules, clock, mailer) -> Iterator[TestClient]:
    """
    Test client over the real app and a temporary database.

    Lifespan is not run; the database is migrated by the db_path fixture.
    """
    limiter = RateLimiter(rules.rate_limits, clock)
    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_rules] = lambda: rules
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_email_sender] = lambda: mailer
    app.dependency_overrides[deps.get_rate_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Seeding helpers ---


@pytest.fixture
def open_store(db_path) -> Callable[[], SQLiteUnitOfWork]:
    """Fresh Unit of Work on the test database, for seeding and assertions."""
    return lambda: SQLiteUnitOfWork(db_path)


@pytest.fixture
def make_user(open_store) -> Callable[..., User]:
    def _make(email: str, name: str | None = None) -> User:
        with open_store() as uow:
            user = uow.users.add(User(email=email, name=name))
            uow.commit()
        return user

    return _make


@pytest.fixture
def owner(make_user) -> User:
    return make_user("owner@example.com", "Olive Owner")


@pytest.fixture
def reader(make_user) -> User:
    return make_user("reader@example.com", "Remy Reader")


@pytest.fixture
def publication(open_store, owner) -> Publication:
    with open_store() as uow:
        pub = uow.publications.add(Publication(name="Night Notes", slug="night-notes", owner_id=owner.id))
        uow.commit()
    return pub


@pytest.fixture
def draft(open_store, owner, publication) -> Post:
    with open_store() as uow:
        post = uow.posts.add(
            Post(publication_id=publication.id, author_id=owner.id, title="Draft", slug="draft")
        )
        uow.commit()
    return post


@pytest.fixture
def auth_headers(clock) -> Callable[..., dict[str, str]]:
    """Bearer headers for a user. The default lifetime outlasts any clock jump in the tests."""
    sessions = SessionTokens(SECRET, clock)

    def _headers(user_id: UUID, ttl: timedelta = timedelta(days=7)) -> dict[str, str]:
        return {"Authorization": f"Bearer {sessions.create(user_id, ttl)}"}

    return _headers


@pytest.fixture
def unsubscribe_token(codec) -> Callable[..., str]:
    def _issue(email: str, publication_id: UUID, ttl: timedelta = timedelta(days=30)) -> str:
        return codec.issue(TokenClaims(email=email, publication_id=publication_id), ttl, TokenPurpose.UNSUBSCRIBE)

    return _issue
