"""Tests for the lead API routes."""

from __future__ import annotations

from app.models import Lead


def _body(**overrides) -> dict:
    body = {
        "contact_name": "Sam Smith",
        "email": "sam@example.com",
        "company_name": "Globex",
        "job_title": "Head of Data",
        "industry": "Manufacturing",
    }
    body.update(overrides)
    return body


def test_create_lead(client_with_db) -> None:
    resp = client_with_db.post("/api/leads", json=_body())
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] > 0
    assert data["company_name"] == "Globex"


def test_create_lead_same_email_updates(client_with_db, db) -> None:
    first = client_with_db.post("/api/leads", json=_body()).json()
    resp = client_with_db.post("/api/leads", json=_body(email="SAM@example.com", job_title="CDO"))
    assert resp.status_code == 200
    assert resp.json()["id"] == first["id"]
    assert resp.json()["job_title"] == "CDO"
    assert db.query(Lead).count() == 1


def test_create_lead_validation(client_with_db) -> None:
    assert client_with_db.post("/api/leads", json=_body(email="nope")).status_code == 422
    assert client_with_db.post("/api/leads", json=_body(contact_name="")).status_code == 422


def test_get_lead(client_with_db, lead) -> None:
    resp = client_with_db.get(f"/api/leads/{lead.id}")
    assert resp.status_code == 200
    assert resp.json()["email"] == "jane@example.com"


def test_get_lead_missing(client_with_db) -> None:
    assert client_with_db.get("/api/leads/999").status_code == 404


def test_lead_assessment_history(client_with_db, db, lead) -> None:
    from app.services.assessment import compute_and_store_assessment

    assert client_with_db.get(f"/api/leads/{lead.id}/assessments").json() == []
    compute_and_store_assessment(db, lead.id, "CORE", None, {}, [], overall_score=82)
    resp = client_with_db.get(f"/api/leads/{lead.id}/assessments")
    assert resp.status_code == 200
    assert [(a["assessment_type"], a["score_category"]) for a in resp.json()] == [("CORE", "AI Leader")]
    assert client_with_db.get("/api/leads/999/assessments").status_code == 404
