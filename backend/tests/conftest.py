"""
Fixtures partagees : base SQLite en memoire, store, client HTTP.
"""
import os

# Configuration de test, avant tout import de l'application
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.domain import entities  # noqa: F401
from app.domain.catalog import DEFAULT_CATALOG
from app.domain.services.activity_store import ActivityStore


@pytest.fixture
def engine():
    """Base en memoire partagee par toutes les sessions du test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """Base SQLite sur disque : chaque session a sa propre connexion."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tracker.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store():
    return ActivityStore(DEFAULT_CATALOG)


@pytest.fixture
def client(engine):
    from app.main import app
    from app.core.database import get_session

    def _override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    yield TestClient(app)
    app.dependency_overrides.clear()
