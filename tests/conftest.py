import os

# Must be set before skillforge.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from skillforge.ai_client import get_ai_client
from skillforge.database import Base, SessionLocal, engine
from skillforge.main import app
from skillforge.models import User


class FakeAIClient:
    """Stands in for AIClient: replays queued completions in order."""

    def __init__(self):
        self.responses = []
        self.prompts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def chat_single(self, prompt, system="", **kwargs):
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("unexpected AI call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(email="ada@example.com", name="Ada"):
        user = User(name=name, email=email, password_hash="not-a-real-hash")
        db.add(user)
        db.commit()
        return user.id
    return _make


@pytest.fixture
def fake_ai():
    fake = FakeAIClient()
    app.dependency_overrides[get_ai_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_ai_client, None)


@pytest.fixture
def client(fake_ai):
    return TestClient(app)


@pytest.fixture
def register(client):
    def _register(email="ada@example.com", name="Ada", password="secret123"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        token = client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        ).json()["token"]
        return {"Authorization": f"Bearer {token}"}
    return _register


@pytest.fixture
def auth_headers(register):
    return register()
