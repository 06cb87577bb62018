"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobqueue import models  # noqa: F401
from jobqueue.database import Base, get_db
from jobqueue.ids import SequentialIdGenerator
from jobqueue.services.file_provider import PhysicalJobFileProvider
from jobqueue.services.scheduler import JobScheduler


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    engine.dispose()


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Create a test database session for each test."""
    db = session_factory()

    yield db

    db.close()


@pytest.fixture
def id_generator():
    return SequentialIdGenerator()


@pytest.fixture
def scheduler(test_db, id_generator):
    return JobScheduler(test_db, id_generator)


@pytest.fixture
def file_provider(tmp_path):
    return PhysicalJobFileProvider(tmp_path / "blobs")


@pytest.fixture
def client(session_factory, file_provider):
    """API client bound to the test database and file storage."""
    from jobqueue.main import app
    from jobqueue.routes import jobs

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[jobs.get_file_provider] = lambda: file_provider

    yield TestClient(app)

    app.dependency_overrides.clear()
