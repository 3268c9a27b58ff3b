"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests.
DATABASE_URL is pointed at it before devflow is imported, so the
application engine and the test engine hit the same file.
"""
import itertools
import os

SQLITE_URL = "sqlite:///./test_devflow.db"
os.environ["DATABASE_URL"] = SQLITE_URL

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from devflow.db.base import Base, get_db
from devflow.main import app
import devflow.models  # noqa: F401

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_login_seq = itertools.count(1)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session_factory():
    return TestingSessionLocal


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def login():
    """A github_login no other test uses."""
    return f"dev-{next(_login_seq)}"
