"""Patient router - FastAPI endpoints for patient records"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from ...rate_limiter import create_rate_limiter
from ...services.llm_client import LLMClient, get_llm_client
from ..deals.schemas import EmailDraftResponse
from .email_drafter import PatientEmailDrafter
from .schemas import (
    GeneratedEmail,
    GenerateEmailRequest,
    InsuranceCreate,
    InsuranceResponse,
    PatientCreate,
    PatientDetailResponse,
    PatientResponse,
    PatientUpdate,
)
from .service import PatientService

router = APIRouter(prefix="/patients", tags=["Patients"])
api_router = APIRouter(prefix="/api/patients", tags=["Patients"])

email_rate_limit = create_rate_limiter(key_prefix="patient_email")


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    """Dependency injection for PatientService"""
    return PatientService(db)


def get_email_drafter(
    db: Session = Depends(get_db), llm: LLMClient = Depends(get_llm_client)
) -> PatientEmailDrafter:
    return PatientEmailDrafter(db, llm)


@router.get("", response_model=list[PatientResponse])
async def list_patients(
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
    search: Optional[str] = Query(None, description="Match on name or email"),
):
    return service.list_patients(search)


@router.post("", response_model=PatientResponse, status_code=201)
async def create_patient(
    data: PatientCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.create_patient(data, current_user)


@router.get("/{patient_id}", response_model=PatientDetailResponse)
async def get_patient(
    patient_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Patient record with insurances (newest first) and age"""
    return service.get_patient_detail(patient_id)


@router.patch("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    data: PatientUpdate,
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.update_patient(patient_id, data)


@router.post("/{patient_id}/insurances", response_model=InsuranceResponse, status_code=201)
async def add_insurance(
    patient_id: str,
    data: InsuranceCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.add_insurance(patient_id, data)


@router.get("/{patient_id}/email-drafts", response_model=list[EmailDraftResponse])
async def list_email_drafts(
    patient_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Drafts created by workflow automations, newest first"""
    return service.list_email_drafts(patient_id)


@api_router.post("/generate-email", response_model=GeneratedEmail)
def generate_email(
    data: GenerateEmailRequest,
    _: None = Depends(email_rate_limit),
    drafter: PatientEmailDrafter = Depends(get_email_drafter),
):
    """Draft a one-off email to a patient from a short description"""
    return drafter.generate(data.patient_id, data.description, data.tone)
