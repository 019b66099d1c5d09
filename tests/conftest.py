"""Shared test fixtures: in-memory database, AI/renderer stubs and an API client."""

import os

# Must be set before anything imports app.core.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.errors import AIGenerationError, RenderError, ScoringError
from app.services.ai_gateway import parse_questions, parse_scoring
from app.services.workflow import AssessmentWorkflow, bootstrap_demo_user

import main
from app.api.deps import get_ai_gateway, get_report_renderer

PDF_MARKER = b"%PDF-1.4 stub"

TWO_QUESTIONS = {
    "questions": [
        {
            "questionText": "Where is the cotton grown and is it certified organic?",
            "category": "sustainability",
            "importance": "high",
            "orderIndex": 1,
        },
        {
            "questionText": "Which dyes are used in production?",
            "category": "transparency",
            "importance": "medium",
            "orderIndex": 2,
        },
    ]
}

TEE_SCORING = {
    "overallScore": 72,
    "sustainabilityScore": 80,
    "qualityScore": 65,
    "transparencyScore": 70,
    "insights": ["Good sourcing disclosure"],
    "recommendations": ["Disclose dyeing process"],
}


class StubAIGateway:
    """Deterministic AI gateway: raw JSON payloads go through the real parsers."""

    def __init__(self, questions_payload=None, scoring_payload=None):
        self.questions_payload = questions_payload if questions_payload is not None else TWO_QUESTIONS
        self.scoring_payload = scoring_payload if scoring_payload is not None else TEE_SCORING
        self.fail_generation = False
        self.fail_scoring = False
        self.generate_calls = 0
        self.score_calls = []

    def generate_questions(self, product):
        self.generate_calls += 1
        if self.fail_generation:
            raise AIGenerationError("Failed to generate AI questions.")
        return parse_questions(self.questions_payload)

    def score_product(self, product, questions):
        self.score_calls.append([q.id for q in questions])
        if self.fail_scoring:
            raise ScoringError("Failed to calculate transparency score.")
        return parse_scoring(self.scoring_payload)


class StubRenderer:
    def __init__(self):
        self.fail = False
        self.calls = []

    def render(self, product, questions, report):
        self.calls.append((product.id, len(questions), report.id))
        if self.fail:
            raise RenderError("Failed to generate PDF report.")
        return PDF_MARKER


@pytest.fixture
def tables():
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    return bootstrap_demo_user(db)


@pytest.fixture
def ai():
    return StubAIGateway()


@pytest.fixture
def renderer():
    return StubRenderer()


@pytest.fixture
def workflow(db, user, ai, renderer):
    return AssessmentWorkflow(db, ai, renderer, user_id=user.id)


@pytest.fixture
def client(tables, ai, renderer):
    """API client wired to the stubs; startup creates the demo user."""
    main.app.dependency_overrides[get_ai_gateway] = lambda: ai
    main.app.dependency_overrides[get_report_renderer] = lambda: renderer
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def tee_payload():
    return {"name": "Organic Cotton Tee", "category": "textiles-clothing"}
