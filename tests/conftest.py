import os
import tempfile

# point the app at a throwaway database before taskhub.database is imported
_tmpdir = tempfile.mkdtemp(prefix="taskhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmpdir}/test.db"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient

from taskhub.main import app
from taskhub.database import SessionLocal, Base, engine


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def task_payload(**overrides) -> dict:
    payload = {
        "name": "Write report",
        "description": "Quarterly numbers",
        "start_date": "2024-01-01",
        "start_time": "08:00",
        "end_date": "2024-01-01",
        "end_time": "10:00",
        "status": "pending",
        "priority": "medium",
        "category": "work",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register(client):
    """Sign up and log in a user, returning a bearer token."""

    def _register(username: str, password: str = "Pass123!") -> str:
        r = client.post("/signup", json={"username": username, "email": f"{username}@example.com", "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _register


@pytest.fixture
def create_task(client):
    def _create(token: str, **overrides) -> dict:
        r = client.post("/add_task", json=task_payload(**overrides), headers=auth_headers(token))
        assert r.status_code == 201, r.text
        return r.json()

    return _create
