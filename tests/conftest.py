"""
Shared pytest fixtures.

Uses an in-memory SQLite database (one shared connection via StaticPool)
so no Postgres is required for tests. Tables are recreated for every test.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base, get_db
from app.main import app
from app.services.ai import DreamInterpretation, get_ai_client
from app.services.users import upsert_user

SQLITE_URL = "sqlite://"

engine = create_engine(
    SQLITE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeAI:
    """Stands in for DreamAIClient; records every call."""

    def __init__(self):
        self.analyze_calls: list[str] = []
        self.image_prompts: list[str] = []
        self.error: Exception | None = None
        self.before_return = None

    def analyze(self, text: str) -> DreamInterpretation:
        self.analyze_calls.append(text)
        if self.error is not None:
            raise self.error
        if self.before_return is not None:
            self.before_return()
        return DreamInterpretation(
            symbolism="Water stands for the unconscious.",
            emotional_analysis="Calm with an undertone of longing.",
            psychological_insight="A wish to let go of control.",
        )

    def generate_image(self, prompt: str) -> str:
        self.image_prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return f"https://images.example.com/{len(self.image_prompts)}.png"


@pytest.fixture(autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def fake_ai():
    return FakeAI()


@pytest.fixture()
def client(db, fake_ai):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    """Create (or refresh) a user and return it."""
    def _make(open_id: str, name: str | None = None):
        return upsert_user(db, open_id=open_id, name=name or open_id.title())
    return _make


@pytest.fixture()
def alice(make_user):
    return make_user("alice")


@pytest.fixture()
def bob(make_user):
    return make_user("bob")


def auth(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


def create_dream(client, user, title="Flying", content="Over a frozen sea", dream_date=1760832000000, **extra) -> int:
    r = client.post(
        "/dreams",
        json={"title": title, "content": content, "dream_date": dream_date, **extra},
        headers=auth(user),
    )
    assert r.status_code == 201, r.text
    return r.json()["dream_id"]
