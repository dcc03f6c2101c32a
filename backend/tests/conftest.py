"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction on a single in-memory SQLite
connection. The session used by the application joins it through SAVEPOINTs,
so commits made by services and factories are rolled back after every test.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from samplecat.core.config import TestingConfig
from samplecat.core.extensions import db as _db
from samplecat.factory import create_app
from samplecat.services._shared.ports import InMemoryImageStore


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database.
    - Fixed signing key (no ephemeral fallback warning).
    - Rate limiting stays on; buckets are cleared between tests.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-signing-key-0123456789abcdefghijklmnopqrstuv"
    RATE_LIMIT_ENABLED = True
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, components={"image_store": InMemoryImageStore()})
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    pysqlite's own transaction handling would let a released SAVEPOINT commit
    the outer transaction; BEGIN is emitted explicitly instead.
    """
    with app.app_context():
        engine = _db.engine

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a scoped session whose commits become SAVEPOINT releases.

    ``db.session`` is swapped for the duration of the test so repositories,
    units of work and views all use it.
    """
    outer = connection.begin()
    factory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(factory)

    original_session = db.session
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _reset_components(app):
    """Clear rate-limit buckets and install a fresh in-memory image store."""
    app.extensions["rate_limiter"].reset()
    app.extensions["image_store"] = InMemoryImageStore()
    yield


@pytest.fixture
def image_store(app) -> InMemoryImageStore:
    return app.extensions["image_store"]


@pytest.fixture
def client(app, session):
    """Test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    if "session" not in request.fixturenames:
        yield
        return
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
