"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

AppointmentStatus = Literal["scheduled", "confirmed", "completed", "cancelled", "no_show"]


class AppointmentCreate(BaseModel):
    patient_id: Optional[str] = None
    title: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: AppointmentStatus = "scheduled"
    reason: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def to_naive_utc(cls, v):
        # Columns store naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class AppointmentPatient(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: str
    patient_id: Optional[str] = None
    title: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    reason: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    patient: Optional[AppointmentPatient] = None

    class Config:
        from_attributes = True


class AppointmentMonth(BaseModel):
    month: str
    appointments: list[AppointmentResponse]
    by_day: dict[str, list[AppointmentResponse]]


class CalendarDay(BaseModel):
    day: date
    in_month: bool
    is_today: bool


class TimeSlot(BaseModel):
    minutes: int
    time: str
    label: str


class CalendarView(BaseModel):
    month: str
    days: list[CalendarDay]
    slots: list[TimeSlot]
