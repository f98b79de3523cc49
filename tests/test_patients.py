import json
from datetime import date

from app.domain.patients.email_drafter import (
    DEFAULT_BODY,
    DEFAULT_SUBJECT,
    SYSTEM_PROMPT,
    parse_email_reply,
    patient_summary,
)
from app.domain.patients.service import compute_age
from app.models import Patient, PatientInsurance


def test_compute_age():
    dob = date(1990, 6, 15)

    assert compute_age(dob, today=date(2026, 6, 14)) == 35
    assert compute_age(dob, today=date(2026, 6, 15)) == 36
    assert compute_age(None) is None


def test_create_and_search_patients(client, staff_user):
    created = client.post(
        "/patients",
        json={"first_name": "Lea", "last_name": "Muller", "email": "Lea@Example.com", "town": " "},
    )
    client.post("/patients", json={"first_name": "Marc", "last_name": "Dubois"})

    assert created.status_code == 201
    body = created.json()
    assert body["email"] == "lea@example.com"
    assert body["town"] is None
    assert body["created_by"] == staff_user.id

    found = client.get("/patients", params={"search": "lea mul"}).json()
    assert [p["first_name"] for p in found] == ["Lea"]
    by_email = client.get("/patients", params={"search": "example.com"}).json()
    assert [p["first_name"] for p in by_email] == ["Lea"]


def test_invalid_email_is_rejected(client):
    response = client.post("/patients", json={"first_name": "Lea", "email": "nope"})

    assert response.status_code == 422


def test_patient_detail_with_insurances(client, db, patient):
    patient.dob = date(1985, 1, 1)
    db.add(PatientInsurance(patient_id=patient.id, provider_name="Helsana", insurance_type="basic"))
    db.commit()
    client.post(
        f"/patients/{patient.id}/insurances",
        json={"provider_name": "CSS", "insurance_type": "supplementary"},
    )

    response = client.get(f"/patients/{patient.id}")

    assert response.status_code == 200
    detail = response.json()
    assert detail["age"] == compute_age(date(1985, 1, 1))
    assert [i["provider_name"] for i in detail["insurances"]] == ["CSS", "Helsana"]


def test_unknown_patient(client):
    response = client.get("/patients/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}


def test_patch_patient(client, patient):
    response = client.patch(f"/patients/{patient.id}", json={"phone": "+41 22 123 45 67"})

    assert response.status_code == 200
    assert response.json()["phone"] == "+41 22 123 45 67"
    assert response.json()["first_name"] == "Ana"


def test_patient_summary_fallback():
    assert patient_summary(Patient()) == "Basic identity and contact details are not available."
    assert patient_summary(Patient(first_name="Ana", email="a@b.ch")) == "Name: Ana\nEmail: a@b.ch"


def test_parse_email_reply():
    assert parse_email_reply(json.dumps({"subject": " Follow-up ", "body": " Dear Ana "})) == (
        "Follow-up",
        "Dear Ana",
    )
    assert parse_email_reply(json.dumps({"subject": "", "body": ""})) == (
        DEFAULT_SUBJECT,
        DEFAULT_BODY,
    )
    assert parse_email_reply("  Plain text reply  ") == (DEFAULT_SUBJECT, "Plain text reply")
    assert parse_email_reply("") == (DEFAULT_SUBJECT, DEFAULT_BODY)
    assert parse_email_reply(None) == (DEFAULT_SUBJECT, DEFAULT_BODY)


def test_generate_email(client, fake_llm, patient):
    fake_llm.replies = [json.dumps({"subject": "Your consultation", "body": "Dear Ana,\n\nSee you soon."})]

    response = client.post(
        "/api/patients/generate-email",
        json={"patientId": patient.id, "description": "Confirm the consultation"},
    )

    assert response.status_code == 200
    assert response.json() == {"subject": "Your consultation", "body": "Dear Ana,\n\nSee you soon."}

    sent = fake_llm.calls[0]
    assert sent["temperature"] == 0.7
    assert sent["messages"][0]["content"] == SYSTEM_PROMPT
    prompt = sent["messages"][1]["content"]
    assert "Name: Ana Silva" in prompt
    assert "Confirm the consultation" in prompt
    assert "Tone: professional and reassuring." in prompt
    assert '"Dear Ana,"' in prompt


def test_generate_email_requires_fields(client, patient):
    response = client.post("/api/patients/generate-email", json={"patientId": patient.id})

    assert response.status_code == 400
    assert response.json() == {"error": "patientId and description are required"}


def test_generate_email_unknown_patient(client):
    response = client.post(
        "/api/patients/generate-email", json={"patientId": "missing", "description": "Hi"}
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}


def test_generate_email_without_api_key(client, fake_llm, patient):
    fake_llm.is_configured = False

    response = client.post(
        "/api/patients/generate-email", json={"patientId": patient.id, "description": "Hi"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Missing OPENAI_API_KEY environment variable"}


def test_generate_email_unexpected_failure(client, fake_llm, patient):
    fake_llm.error = RuntimeError("boom")

    response = client.post(
        "/api/patients/generate-email", json={"patientId": patient.id, "description": "Hi"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate email"}
