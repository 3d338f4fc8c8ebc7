"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import io
import os

import pytest
from authflow.core.config import TestingConfig
from authflow.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authflow.factory import create_app  # application factory under test
from authflow.infra.jwt.jwt_token_issuer import JWTTokenIssuer
from authflow.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authflow.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryDenylistStore,
    InMemoryMediaUploader,
)
from authflow.services.auth.service import SessionManager
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from werkzeug.datastructures import FileStorage


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Fixed, distinct token secrets.
    - Avoids hitting external services (no Redis).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ACCESS_TOKEN_SECRET = "test-access-secret-with-enough-bytes-for-hs256"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-with-enough-bytes-for-hs256"
    ACCESS_TOKEN_EXPIRES = 900
    REFRESH_TOKEN_EXPIRES = 864_000
    PASSWORD_HASH_ITERATIONS = 1_000
    TRUSTED_PROXY_HOPS = 0
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and uploads
        written to a temporary directory.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    TestConfig.UPLOAD_FOLDER = str(tmp_path_factory.mktemp("uploads"))
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(app, db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one.
    """
    # fresh app context per test so `g` never leaks between tests
    ctx = app.app_context()
    ctx.push()

    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True, autoflush=False)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()
        ctx.pop()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Session manager over in-memory collaborators -----------------------------
@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    """Cheap PBKDF2 hasher for unit tests."""
    return WerkzeugPasswordHasher(iterations=1_000)


@pytest.fixture()
def issuer() -> JWTTokenIssuer:
    """Token issuer configured like :class:`TestConfig`."""
    return JWTTokenIssuer.from_config(vars(TestConfig))


@pytest.fixture()
def manager(hasher, issuer) -> SessionManager:
    """Build a SessionManager wired to in-memory doubles."""
    return SessionManager(
        store=InMemoryCredentialStore(),
        hasher=hasher,
        tokens=issuer,
        uploader=InMemoryMediaUploader(),
        denylist=InMemoryDenylistStore(),
    )


@pytest.fixture()
def make_upload():
    """Return a factory of in-memory uploaded files."""

    def _make(filename: str = "avatar.png", content: bytes = b"\x89PNG fake image") -> FileStorage:
        return FileStorage(stream=io.BytesIO(content), filename=filename)

    return _make


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
