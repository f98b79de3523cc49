import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEAL_STAGES"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["FIREBASE_PROJECT_ID"] = "clinic-crm-test"

import pytest
from fastapi.testclient import TestClient

from app.auth import get_current_user
from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import Deal, DealStage, Patient, StaffUser
from app.services.llm_client import get_llm_client


class FakeLLM:
    """Stands in for LLMClient; replies are returned in order"""

    def __init__(self, replies=None, role="assistant", error=None, configured=True):
        self.replies = list(replies or [])
        self.role = role
        self.error = error
        self.is_configured = configured
        self.calls = []

    def complete(self, messages, temperature):
        self.calls.append({"messages": messages, "temperature": temperature})
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else None
        return self.role, content


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def staff_user(db):
    user = StaffUser(firebase_uid="uid-staff-1", email="nurse@clinic.test", full_name="Nora Nurse")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def fake_llm():
    return FakeLLM(replies=["Hello from the assistant"])


@pytest.fixture
def client(db, staff_user, fake_llm):
    app.dependency_overrides[get_current_user] = lambda: staff_user
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def stages(db):
    rows = [
        DealStage(name="Request for information", type="lead", sort_order=1),
        DealStage(name="Request processed", type="lead", sort_order=2),
        DealStage(name="Consultation booked", type="consultation", sort_order=3),
    ]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@pytest.fixture
def patient(db):
    row = Patient(
        first_name="Ana",
        last_name="Silva",
        email="ana.silva@example.com",
        phone="+41 79 000 00 00",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def deal(db, patient, stages):
    row = Deal(
        title="Rhinoplasty enquiry",
        pipeline="Geneva",
        patient_id=patient.id,
        stage_id=stages[0].id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
