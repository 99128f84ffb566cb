"""Shared fixtures: an in-memory database wired into the FastAPI app."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront_lab.db import Base, get_db
from storefront_lab.main import app
from storefront_lab.models import Student
from storefront_lab.routers import submissions
from storefront_lab.routers.auth import ensure_admin_user

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
FAKE_REPORT = "## Summary\nNice work."


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def report_calls(monkeypatch):
    """Replace the language model with a canned report; records each call."""
    calls = []

    async def fake_generate_report(choices, snapshot, **kwargs):
        calls.append((list(choices), snapshot))
        return FAKE_REPORT

    monkeypatch.setattr(submissions, "generate_report", fake_generate_report)
    return calls


@pytest.fixture
def client(session_factory, report_calls):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def student(db):
    row = Student(student_id="student001", name="Alice Johnson")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def admin_headers(client, db):
    ensure_admin_user(db, ADMIN_USERNAME, ADMIN_PASSWORD)
    r = client.post("/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
