"""Shared fixtures for API tests: in-memory database, fake AI client, auth helpers."""
import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Settings are read at import time.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("JWT_SECRET", "test-only-secret")
os.environ.setdefault("FREE_MONTHLY_AI_LIMIT", "0")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from resai.db.session import Base, get_db  # noqa: E402
from resai.main import app  # noqa: E402
from resai.models import User  # noqa: E402
from resai.services.ai_service import AiService, get_ai_service  # noqa: E402

SAMPLE_RESUME = {
    "fullName": "Jane Doe",
    "professionalSummary": "Backend engineer with 5 years of Python.",
    "experience": [
        {
            "id": "exp-1",
            "position": "Software Engineer",
            "company": "Acme",
            "startDate": "2020",
            "endDate": "2024",
            "bullets": ["Built billing APIs"],
        }
    ],
    "skills": [{"id": "sk-1", "name": "Backend", "items": ["Python", "SQL", "Docker"]}],
    "education": [{"id": "ed-1", "institution": "State University", "degree": "BSc"}],
}


class FakeAIClient:
    """Stands in for the chat-completion client; replies are consumed in order."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    def complete(self, messages, *, temperature, max_tokens):
        self.calls.append({"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "Generated text"


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class DatabaseTestCase(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionTesting = make_session_factory()
        self.db = self.SessionTesting()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()


class ApiTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.ai_client = FakeAIClient()

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_ai_service] = lambda: AiService(client=self.ai_client)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    def signup(self, email="jane@example.com", password="secret123"):
        return self.client.post("/api/users/signup", json={"email": email, "password": password})

    def login(self, email="jane@example.com", password="secret123"):
        return self.client.post("/api/users/login", json={"email": email, "password": password})

    def register(self, email="jane@example.com", password="secret123") -> dict:
        self.assertEqual(self.signup(email, password).status_code, 201)
        response = self.login(email, password)
        self.assertEqual(response.status_code, 200)
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def promote_to_admin(self, email: str) -> None:
        db = self.SessionTesting()
        try:
            user = db.query(User).filter(User.email == email).one()
            user.role = "ADMIN"
            db.commit()
        finally:
            db.close()

    def create_resume(self, headers: dict, data=None, language="en", title="My Resume"):
        response = self.client.post(
            "/api/resumes/create",
            json={"title": title, "data": SAMPLE_RESUME if data is None else data, "language": language},
            headers=headers,
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
