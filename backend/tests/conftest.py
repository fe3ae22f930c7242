"""Pytest fixtures building an isolated application per test.

Each test gets its own app (so in-memory revocations and refresh sessions
never leak between cases) and a freshly created in-memory SQLite schema.
"""

from __future__ import annotations

import os

import pytest
from malldir.core.config import TestingConfig
from malldir.core.extensions import db as _db  # Flask-SQLAlchemy instance
from malldir.factory import create_app  # application factory under test


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create all tables inside an application context and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Expose the scoped session used by services and factories."""
    return db.session


@pytest.fixture()
def client(app, db):
    """Flask test client; requires ``db`` so the schema exists."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the Flask-SQLAlchemy session -----------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "db" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
