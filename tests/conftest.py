"""
Pytest fixtures for the test suite.

Every test gets a fresh in-memory SQLite engine (one shared connection,
foreign keys on), so repositories can commit freely without leaking state
between tests.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from personnel.db.session import build_engine


TEST_DB_URL = "sqlite://"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    test_engine = build_engine(TEST_DB_URL)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from personnel.db.base import Base
    from personnel.models import hr  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session_factory(tables):
    return sessionmaker(bind=tables, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def employees(db_session):
    from personnel.repositories import EmployeeRepository

    return EmployeeRepository(db_session)


@pytest.fixture
def reviews(db_session):
    from personnel.repositories import ReviewRepository

    return ReviewRepository(db_session)


@pytest.fixture
def payroll(db_session):
    from personnel.repositories import PayrollRepository

    return PayrollRepository(db_session)


@pytest.fixture
def client(session_factory):
    """HTTP client whose `get_db` dependency points at the test engine."""
    from personnel.db.session import get_db
    from personnel.main import create_app

    app = create_app()

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    return TestClient(app)
