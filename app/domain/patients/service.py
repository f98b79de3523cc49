"""Patient service - Business logic for patient records"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Patient, PatientEmailDraft, PatientInsurance, StaffUser
from ...shared.errors import NotFoundError
from ...shared.validators import clean_optional_text
from .repository import PatientRepository
from .schemas import InsuranceCreate, PatientCreate, PatientDetailResponse, PatientUpdate

logger = logging.getLogger(__name__)


def compute_age(dob: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole years since dob, one less until this year's birthday"""
    if dob is None:
        return None
    today = today or date.today()
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


def _clean(values: dict) -> dict:
    return {
        key: clean_optional_text(value) if isinstance(value, str) else value
        for key, value in values.items()
    }


class PatientService:
    """Service layer for patient business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PatientRepository()

    def list_patients(self, search: Optional[str] = None) -> list[Patient]:
        return self.repo.list_patients(self.db, search)

    def get_patient(self, patient_id: str) -> Patient:
        patient = self.repo.get_patient(self.db, patient_id)
        if not patient:
            raise NotFoundError("Patient not found")
        return patient

    def get_patient_detail(self, patient_id: str, today: Optional[date] = None) -> PatientDetailResponse:
        patient = self.get_patient(patient_id)
        detail = PatientDetailResponse.model_validate(patient)
        detail.age = compute_age(patient.dob, today)
        return detail

    def create_patient(self, data: PatientCreate, user: StaffUser) -> Patient:
        patient = self.repo.create_patient(
            self.db, created_by=user.id, **_clean(data.model_dump())
        )
        logger.info(f"✅ Patient created: {patient.id} by {user.email}")
        return patient

    def update_patient(self, patient_id: str, data: PatientUpdate) -> Patient:
        patient = self.get_patient(patient_id)
        return self.repo.update_patient(
            self.db, patient, **_clean(data.model_dump(exclude_unset=True))
        )

    def add_insurance(self, patient_id: str, data: InsuranceCreate) -> PatientInsurance:
        patient = self.get_patient(patient_id)
        return self.repo.add_insurance(self.db, patient.id, **_clean(data.model_dump()))

    def list_email_drafts(self, patient_id: str) -> list[PatientEmailDraft]:
        patient = self.get_patient(patient_id)
        return self.repo.list_email_drafts(self.db, patient.id)
