"""Appointment service - Month listings and bookings"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment
from ...shared.errors import ValidationError
from ...shared.validators import clean_optional_text
from . import calendar
from .repository import AppointmentRepository
from .schemas import (
    AppointmentCreate,
    AppointmentMonth,
    AppointmentResponse,
    CalendarDay,
    CalendarView,
    TimeSlot,
)

logger = logging.getLogger(__name__)


def _month(value: Optional[str], today: Optional[date] = None) -> date:
    try:
        return calendar.parse_month(value, today)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class AppointmentService:
    """Service layer for the appointments calendar"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def list_month(self, month: Optional[str] = None, search: Optional[str] = None) -> AppointmentMonth:
        month_start = _month(month)
        start, end = calendar.month_bounds(month_start)
        rows = self.repo.list_between(self.db, start, end, (search or "").strip() or None)

        appointments = [AppointmentResponse.model_validate(a) for a in rows]
        by_day: dict[str, list[AppointmentResponse]] = {}
        for appointment in appointments:
            by_day.setdefault(appointment.start_time.date().isoformat(), []).append(appointment)

        return AppointmentMonth(
            month=month_start.strftime("%Y-%m"), appointments=appointments, by_day=by_day
        )

    def calendar_view(self, month: Optional[str] = None, today: Optional[date] = None) -> CalendarView:
        today = today or date.today()
        month_start = _month(month, today)
        days = [
            CalendarDay(day=d, in_month=d.month == month_start.month, is_today=d == today)
            for d in calendar.month_grid(month_start)
        ]
        slots = [
            TimeSlot(
                minutes=m,
                time=f"{m // 60:02d}:{m % 60:02d}",
                label=calendar.slot_label(m),
            )
            for m in calendar.day_slots()
        ]
        return CalendarView(month=month_start.strftime("%Y-%m"), days=days, slots=slots)

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        if data.end_time and data.end_time < data.start_time:
            raise ValidationError("End time must be after start time")
        if data.patient_id and not self.repo.patient_exists(self.db, data.patient_id):
            raise ValidationError(f"Unknown patient: {data.patient_id}")

        appointment = self.repo.create_appointment(
            self.db,
            patient_id=data.patient_id,
            title=clean_optional_text(data.title),
            start_time=data.start_time,
            end_time=data.end_time,
            status=data.status,
            reason=clean_optional_text(data.reason),
            location=clean_optional_text(data.location),
            description=clean_optional_text(data.description),
        )
        logger.info(f"📅 Appointment booked for {appointment.start_time.isoformat()}")
        return appointment
