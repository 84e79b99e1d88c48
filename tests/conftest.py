# tests/conftest.py
# PURPOSE: create a TestClient and override DB dependency to use a temp SQLite file.

# Ensure project root is on sys.path so `import taskhub` works when running pytest.
import sys, os
import tempfile

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Settings are read at import time: point the app engine at a throwaway file.
_SESSION_DB = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_SESSION_DB.close()
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["DATABASE_URL"] = f"sqlite:///{_SESSION_DB.name}"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from taskhub.db import Base, get_db  # DB metadata + original dependency to override
from taskhub.main import app  # FastAPI app
from taskhub.rate_limit import limiter


@pytest.fixture()
def session_factory():
    # 1) Create a temporary SQLite file (so data is isolated per test)
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_engine(f"sqlite:///{tmp.name}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # 2) Create tables for tests
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal

    # 3) Cleanup: drop tables, dispose engine, delete temp file
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    os.unlink(tmp.name)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    # Override the app's get_db dependency to use the per-test database
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # Rate limit counters live in memory and would leak between tests
    limiter.reset()

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def register(client, email="ana@example.com", password="secret123", name="Ana Lima", **extra):
    r = client.post("/users", json={"name": name, "email": email, "password": password, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def login(client, email="ana@example.com", password="secret123"):
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    """Bearer headers for a freshly registered user."""
    register(client)
    return login(client)


def pytest_sessionfinish(session, exitstatus):
    try:
        os.unlink(_SESSION_DB.name)
    except OSError:
        pass
