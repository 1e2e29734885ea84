"""Shared fixtures: one app per run, one rolled-back transaction per test.

Services commit through their unit of work. Because the per-test session
joins the outer connection transaction with ``create_savepoint``, those
commits only release SAVEPOINTs; the outer transaction is rolled back when
the test ends, so nothing leaks between tests.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from forum.core.config import TestingConfig
from forum.core.extensions import db as _db
from forum.factory import create_app
from tests.factories import bind_session


class SuiteConfig(TestingConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """App with its context pushed for the whole run.

    Services, factories and the test client then all resolve ``db.session``
    to the session installed by the ``session`` fixture.
    """
    os.environ.pop("DATABASE_URL", None)
    flask_app = create_app(SuiteConfig, instance_relative_config=False)
    with flask_app.app_context():
        yield flask_app


@pytest.fixture(scope="session")
def db(app):
    """Schema created once; pysqlite's own BEGIN handling is disabled so
    SQLAlchemy can issue BEGIN and SAVEPOINT itself."""
    engine = _db.engine

    @event.listens_for(engine, "connect")
    def _no_implicit_begin(dbapi_connection, _record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _explicit_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")

    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    with db.engine.connect() as conn:
        yield conn


@pytest.fixture()
def session(db, connection):
    """Scoped session swapped in as ``db.session`` inside an outer transaction."""
    outer = connection.begin()
    scoped = scoped_session(
        sessionmaker(
            bind=connection,
            autoflush=False,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
    )

    previous = db.session
    previous.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = previous
        outer.rollback()


@pytest.fixture(autouse=True)
def _factories_session(session):
    bind_session(session)
    yield
    bind_session(None)


@pytest.fixture()
def client(app, session):
    return app.test_client()
