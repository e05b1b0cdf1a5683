"""Root conftest — shared fixtures for all tests."""

from __future__ import annotations

import os

# Must be set before app.core.config builds its settings instance.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import Base
import app.models.persona  # noqa: F401 — register tables with Base
import app.models.conversation  # noqa: F401
import app.models.message  # noqa: F401

# In-memory SQLite; StaticPool keeps one shared connection across threads
TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autoflush=False, expire_on_commit=False)

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeCompletionClient:
    """Records completion calls and answers from a scripted list.

    A scripted Exception is raised instead of returned.
    """

    def __init__(self, replies=None, models=None):
        self.calls: list[dict] = []
        self.replies = list(replies or [])
        self.models = models

    def complete(self, messages, *, model, max_tokens=None, temperature=None):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        reply = self.replies.pop(0) if self.replies else "Hello from the model"
        if isinstance(reply, Exception):
            raise reply
        return reply

    def list_models(self):
        if isinstance(self.models, Exception):
            raise self.models
        return self.models or []

    def close(self):
        pass


@pytest.fixture(autouse=True)
def _setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=TEST_ENGINE)
    yield
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def db():
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def relay_settings():
    return Settings(
        OPENROUTER_API_KEY="or-test-key",
        DEFAULT_CHAT_MODEL="openai/gpt-3.5-turbo",
        TITLE_MAX_TOKENS=20,
        TITLE_TEMPERATURE=0.7,
    )


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def store(db):
    from app.services.chat_store import ChatStore

    return ChatStore(db, USER_ID)


@pytest.fixture
def conversation(store):
    return store.create_conversation()


@pytest.fixture
def token():
    from app.services.auth_service import create_access_token

    return create_access_token(subject=USER_ID)


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def api_app(db, relay_settings, fake_client):
    """FastAPI app with DB, settings and provider client overridden."""
    from app.api.dependencies import get_completion_client, get_db, get_settings
    from app.main import app as _app

    def _override_get_db():
        try:
            yield db
        finally:
            pass

    _app.dependency_overrides[get_db] = _override_get_db
    _app.dependency_overrides[get_settings] = lambda: relay_settings
    _app.dependency_overrides[get_completion_client] = lambda: fake_client
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    return TestClient(api_app)
