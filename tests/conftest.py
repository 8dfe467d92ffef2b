"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

# Force in-memory test DB before the app is imported; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["REPORT_LOGO_PATH"] = ""


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from app.main import app

    return TestClient(app)


@pytest.fixture
def db() -> Session:
    """Database session on a fresh schema. Tables are dropped after each test."""
    from app.db import SessionLocal, engine
    from app.db.session import Base
    from app.models import Assessment, Lead  # noqa: F401

    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client_with_db(db: Session) -> TestClient:
    """TestClient with get_db overridden to use the test db session (for integration tests)."""
    from app.db.session import get_db
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def lead(db: Session):
    """A persisted lead."""
    from app.models import Lead

    row = Lead(
        contact_name="Jane Doe",
        email="jane@example.com",
        company_name="Acme Corp",
        job_title="CTO",
        industry="Financial Services",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def mixed_pillars() -> list[dict]:
    """Eight pillars, weights summing to 100."""
    return [
        {"pillar_name": "AI Strategy", "score": 85, "weight": 15},
        {"pillar_name": "Data Readiness", "score": 40, "weight": 8},
        {"pillar_name": "Talent & Skills", "score": 45, "weight": 8},
        {"pillar_name": "Governance & Ethics", "score": 75, "weight": 12},
        {"pillar_name": "Technology Infrastructure", "score": 80, "weight": 15},
        {"pillar_name": "Change Management", "score": 55, "weight": 10},
        {"pillar_name": "Innovation Culture", "score": 60, "weight": 10},
        {"pillar_name": "Value Realization", "score": 70, "weight": 22},
    ]


@pytest.fixture
def fixed_completed_at() -> datetime:
    return datetime(2026, 3, 14, 9, 30, 0)
