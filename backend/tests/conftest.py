"""Shared fixtures: an in-memory SQLite database per test and an API client bound to it."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOWED_HOSTS", "testserver,localhost")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.init_db import init_db
from app.db.session import configure_sqlite_connection
from app.main import app
from app.models.stock import Stock


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite_connection(engine)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_stock(db):
    def _make_stock(name, quantity=10, is_divisible=True, dispensing_unit="TABLET",
                    units_per_pack=1, low_stock_threshold=5):
        stock = Stock(
            name=name,
            quantity=quantity,
            is_divisible=is_divisible,
            dispensing_unit=dispensing_unit,
            units_per_pack=units_per_pack,
            low_stock_threshold=low_stock_threshold,
        )
        db.add(stock)
        db.commit()
        db.refresh(stock)
        return stock

    return _make_stock


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
