# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from confession_board.core.security import create_access_token, hash_password  # noqa: E402
from confession_board.db.session import Base  # noqa: E402
from confession_board.db.session import get_db as app_get_session  # noqa: E402
from confession_board.db.time import utcnow  # noqa: E402
from confession_board.main import app as fastapi_app  # noqa: E402
from confession_board.models import (  # noqa: E402
    Account,
    Confession,
    ConfessionVote,
    UserRole,
)
from confession_board.models.account import ROLE_ADMIN, ROLE_USER  # noqa: E402
from confession_board.services import realtime  # noqa: E402
from confession_board.services.realtime import ChangeEvent, ChangeFeed  # noqa: E402

TEST_DB_URL = "sqlite://"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def change_feed(monkeypatch: pytest.MonkeyPatch) -> Iterator[ChangeFeed]:
    """Give every test its own change feed so subscriptions never leak."""
    feed = ChangeFeed()
    monkeypatch.setattr(realtime, "_change_feed", feed)
    try:
        yield feed
    finally:
        feed.close()


@pytest.fixture()
def recorded_events(change_feed: ChangeFeed) -> list[ChangeEvent]:
    """Collect every event published on the test change feed."""
    events: list[ChangeEvent] = []
    change_feed.subscribe(realtime.KNOWN_TABLES, events.append)
    return events


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_confession(db_session: Session) -> Callable[..., Confession]:
    """Return a factory that persists confessions with sensible defaults."""
    counter = {"n": 0}
    base_time = utcnow() - timedelta(hours=1)

    def _make(**overrides: Any) -> Confession:
        counter["n"] += 1
        n = counter["n"]
        values: dict[str, Any] = {
            "author_name": f"Author {n}",
            "title": f"Confession {n}",
            "content": f"Something I never told anyone, part {n}.",
            "tags": [],
            "slug": f"confession-{n}",
            "created_at": base_time + timedelta(minutes=n),
        }
        values.update(overrides)
        confession = Confession(**values)
        db_session.add(confession)
        db_session.flush()
        db_session.refresh(confession)
        return confession

    return _make


@pytest.fixture()
def confession(make_confession: Callable[..., Confession]) -> Confession:
    """Create a baseline confession for tests."""
    return make_confession(title="First confession", content="I ate the last cookie.")


@pytest.fixture()
def add_vote(db_session: Session) -> Callable[..., ConfessionVote]:
    """Return a helper that stores a raw vote row."""

    def _add(
        confession_id: str,
        vote_type: str,
        *,
        identifier: str | None = None,
        user_id: int | None = None,
        created_at: datetime | None = None,
    ) -> ConfessionVote:
        vote = ConfessionVote(
            confession_id=confession_id,
            vote_type=vote_type,
            vote_identifier=identifier,
            user_id=user_id,
            created_at=created_at or utcnow(),
        )
        db_session.add(vote)
        db_session.flush()
        return vote

    return _add


def _create_account(db_session: Session, email: str, roles: list[str]) -> Account:
    account = Account(email=email, password_hash=hash_password(ADMIN_PASSWORD))
    account.roles = [UserRole(role=role) for role in roles]
    db_session.add(account)
    db_session.flush()
    db_session.refresh(account)
    return account


@pytest.fixture()
def admin_account(db_session: Session) -> Account:
    """Create a persisted account holding the admin role."""
    return _create_account(db_session, "admin@example.com", [ROLE_ADMIN])


@pytest.fixture()
def regular_account(db_session: Session) -> Account:
    """Create a persisted account without moderation rights."""
    return _create_account(db_session, "member@example.com", [ROLE_USER])


@pytest.fixture()
def admin_headers(admin_account: Account) -> dict[str, str]:
    """Return authorization headers for the admin account."""
    return {"Authorization": f"Bearer {create_access_token(admin_account.id)}"}


@pytest.fixture()
def user_headers(regular_account: Account) -> dict[str, str]:
    """Return authorization headers for the non-admin account."""
    return {"Authorization": f"Bearer {create_access_token(regular_account.id)}"}


@pytest.fixture()
def admin_password() -> str:
    """Plain-text password shared by the account fixtures."""
    return ADMIN_PASSWORD
