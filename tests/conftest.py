"""Shared fixtures: in-memory SQLite store, API client and the demo catalog."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import build_engine, get_db
from app.db.models import Base, Category, Product
from app.main import app


@pytest.fixture
def engine():
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(db):
    """Electronics/Phone and Books/Novel, ids 1 and 2."""
    db.add_all([Category(id=1, name="Electronics"), Category(id=2, name="Books")])
    db.flush()
    db.add_all(
        [
            Product(id=1, name="Phone", description="", price=Decimal("599.00"), category_id=1),
            Product(id=2, name="Novel", description="", price=Decimal("15.00"), category_id=2),
        ]
    )
    db.commit()
    return {"electronics": 1, "books": 2, "phone": 1, "novel": 2}
