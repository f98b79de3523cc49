"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Patient
from ..patients.repository import patient_full_name


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def list_between(
        db: Session, start: datetime, end: datetime, search: Optional[str] = None
    ) -> list[Appointment]:
        query = (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(Appointment.start_time >= start, Appointment.start_time <= end)
        )
        if search:
            query = query.join(Appointment.patient).filter(
                patient_full_name().ilike(f"%{search}%")
            )
        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def patient_exists(db: Session, patient_id: str) -> bool:
        return db.query(Patient.id).filter(Patient.id == patient_id).first() is not None

    @staticmethod
    def create_appointment(db: Session, **data) -> Appointment:
        appointment = Appointment(**data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
