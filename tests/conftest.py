"""Pytest configuration and fixtures for API tests."""
import os

# Settings are read at import time; point them at SQLite before importing app.*
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base_class import Base
from app.schemas.feedback import TriageResult
from app.services.triage_classifier import FeedbackClassifier, parse_triage_output

DEFAULT_RESULT = TriageResult(
    product_area="Workers",
    severity="P1",
    sentiment="negative",
    ai_reason="Deployment failure blocks launch",
    draft_reply="Sorry about the failed deploy. Could you share the error ID?",
)


class StubClassifier(FeedbackClassifier):
    """Deterministic classifier; set raw_output to exercise the real parser."""

    def __init__(self, result: TriageResult = DEFAULT_RESULT):
        self.result = result
        self.raw_output = None
        self.calls = []

    async def classify(self, text: str) -> TriageResult:
        self.calls.append(text)
        if self.raw_output is not None:
            return parse_triage_output(self.raw_output)
        return self.result


# --- Session-level fixtures ---

@pytest.fixture(scope="session")
def test_engine():
    """In-memory SQLite shared across connections (session scope)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


# --- Per-test fixtures ---

@pytest.fixture(scope="function")
def test_session_factory(test_engine):
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=test_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db(test_session_factory):
    """Direct DB session for assertions."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def classifier():
    return StubClassifier()


@pytest.fixture(scope="function")
async def client(test_session_factory, classifier):
    """
    Async HTTP client with:
      - fresh tables per test
      - get_db overridden to use the test database
      - get_classifier overridden with a StubClassifier
    """
    from app.main import app as fastapi_app
    from app.api.deps import get_db, get_classifier

    def _override_get_db():
        session = test_session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    fastapi_app.dependency_overrides[get_classifier] = lambda: classifier

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()


# --- Helpers ---

async def seed_and_list(client: AsyncClient) -> list:
    """Helper: seed mock feedback and return the listed rows."""
    resp = await client.post("/api/seed")
    assert resp.status_code == 200, f"Seed failed: {resp.text}"
    listing = await client.get("/api/feedback")
    assert listing.status_code == 200
    return listing.json()
