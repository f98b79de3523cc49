"""Appointment router - FastAPI endpoints for the calendar"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from .schemas import AppointmentCreate, AppointmentMonth, AppointmentResponse, CalendarView
from .service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=AppointmentMonth)
async def list_appointments(
    current_user: StaffUser = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    search: Optional[str] = Query(None, description="Patient name"),
):
    """Appointments starting in the month, grouped by day"""
    return service.list_month(month, search)


@router.get("/calendar", response_model=CalendarView)
async def get_calendar(
    current_user: StaffUser = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
    month: Optional[str] = Query(None),
):
    return service.calendar_view(month)


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.create_appointment(data)
