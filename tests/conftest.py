"""Pytest configuration: in-memory database shared by store, service and HTTP tests."""

import os

# Keep app import from creating a database file next to the code
os.environ.setdefault("USER_SERVICE_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, make_engine, session_scope
from models import User
from service import UserService
from store import UserStore


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    with session_scope(session_factory) as session:
        yield session


@pytest.fixture
def store(db):
    return UserStore(db)


@pytest.fixture
def service(store):
    return UserService(store)


@pytest.fixture
def client(session_factory):
    from app import app

    def override_get_db():
        with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def legacy_user(db):
    """Insert a row the way older releases wrote it, without a name sub-record."""

    def _make(username, full_name=None, first_name=None, last_name=None):
        row = User(
            username=username,
            full_name=full_name,
            first_name=first_name,
            last_name=last_name,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make
