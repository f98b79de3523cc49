"""Patient repository - Database operations for patients"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Patient, PatientEmailDraft, PatientInsurance


def patient_full_name():
    """SQL expression for "first last", usable in search filters"""
    return func.coalesce(Patient.first_name, "") + " " + func.coalesce(Patient.last_name, "")


class PatientRepository:
    """Repository for patient database operations"""

    @staticmethod
    def list_patients(db: Session, search: Optional[str] = None, limit: int = 100) -> list[Patient]:
        query = db.query(Patient)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(patient_full_name().ilike(pattern), Patient.email.ilike(pattern))
            )
        return query.order_by(Patient.created_at.desc()).limit(limit).all()

    @staticmethod
    def get_patient(db: Session, patient_id: str) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def create_patient(db: Session, **patient_data) -> Patient:
        patient = Patient(**patient_data)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    @staticmethod
    def update_patient(db: Session, patient: Patient, **updates) -> Patient:
        for field, value in updates.items():
            setattr(patient, field, value)
        db.commit()
        db.refresh(patient)
        return patient

    @staticmethod
    def add_insurance(db: Session, patient_id: str, **insurance_data) -> PatientInsurance:
        insurance = PatientInsurance(patient_id=patient_id, **insurance_data)
        db.add(insurance)
        db.commit()
        db.refresh(insurance)
        return insurance

    @staticmethod
    def list_email_drafts(db: Session, patient_id: str) -> list[PatientEmailDraft]:
        return (
            db.query(PatientEmailDraft)
            .filter(PatientEmailDraft.patient_id == patient_id)
            .order_by(PatientEmailDraft.created_at.desc())
            .all()
        )
