"""Test configuration and fixtures."""

import os

# Must be set before ultra_eval.core.config builds its Settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAILS"] = '["admin@example.com"]'
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("S3_BUCKET_NAME", None)
os.environ.pop("SMTP_HOST", None)

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ultra_eval.db.base import Base
from ultra_eval.models.student import Student
from ultra_eval.schemas.evaluation import CategoryScore, EvaluationResult

TEST_DATABASE_URL = "sqlite://"


class FakeEvaluator:
    """Stands in for Evaluator; returns a fixed result and records calls."""

    def __init__(self, result: EvaluationResult | None = None):
        self.result = result or EvaluationResult(
            elo_awarded=72,
            feedback="Strong regional result with clear evidence.",
            analysis_parts=[
                "First place among 40 teams shows real skill.",
                "Regional scope limits the impact score.",
                "Consider entering the national round next.",
            ],
            category_score=CategoryScore(impact=7, productivity=8, quality=8, relevance=7),
        )
        self.calls = []

    def evaluate(self, title, description, category, file_urls=None):
        self.calls.append(
            {"title": title, "description": description, "category": category, "file_urls": file_urls}
        )
        return self.result.model_copy(deep=True)


class RecordingNotifier:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent = []

    def notify_graded(self, *, to, student_name, report_title, evaluation):
        if self.error is not None:
            raise self.error
        self.sent.append(
            {"to": to, "student_name": student_name, "report_title": report_title,
             "elo_awarded": evaluation.elo_awarded}
        )


class FakeCompletions:
    def __init__(self, content=None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Mimics the slice of openai.OpenAI the evaluator uses."""

    def __init__(self, content=None, error: Exception | None = None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def test_student(db_session):
    student = Student(
        id="S1",
        email="ada@example.com",
        name="Ada Lovelace",
        school="Analytical High",
        grade="11",
        elo=50,
    )
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


@pytest.fixture
def fake_evaluator():
    return FakeEvaluator()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db_session, fake_evaluator, notifier):
    """TestClient wired to the test session and fake external clients.

    Used without a context manager, so the startup hook (real clients,
    create_all on the configured engine) does not run.
    """
    from ultra_eval.api.deps import get_evaluator, get_notifier, get_storage
    from ultra_eval.db.session import get_db
    from ultra_eval.main import app
    from ultra_eval.services.storage_service import AttachmentStorage

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_evaluator] = lambda: fake_evaluator
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_storage] = lambda: AttachmentStorage(None, None, "us-west-2")
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for an email."""
    from ultra_eval.core.security import create_access_token

    def _headers(email: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}

    return _headers
