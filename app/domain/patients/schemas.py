"""Patient domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import validate_email


class PatientBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    marital_status: Optional[str] = None
    nationality: Optional[str] = None
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    town: Optional[str] = None
    profession: Optional[str] = None
    current_employer: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    avatar_url: Optional[str] = None
    language_preference: Optional[str] = None
    clinic_preference: Optional[str] = None
    lifecycle_stage: Optional[str] = None
    contact_owner_name: Optional[str] = None
    contact_owner_email: Optional[str] = None


class PatientCreate(PatientBase):
    @field_validator("email", "contact_owner_email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class PatientUpdate(PatientBase):
    @field_validator("email", "contact_owner_email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class InsuranceCreate(BaseModel):
    provider_name: Optional[str] = None
    card_number: Optional[str] = None
    insurance_type: Optional[str] = None


class InsuranceResponse(BaseModel):
    id: str
    provider_name: Optional[str] = None
    card_number: Optional[str] = None
    insurance_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PatientResponse(PatientBase):
    id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PatientDetailResponse(PatientResponse):
    age: Optional[int] = None
    insurances: list[InsuranceResponse] = []


class GenerateEmailRequest(BaseModel):
    """One-off patient email request from the patient screen"""

    model_config = ConfigDict(populate_by_name=True)

    patient_id: Optional[str] = Field(None, alias="patientId")
    description: Optional[str] = None
    tone: Optional[str] = None


class GeneratedEmail(BaseModel):
    subject: str
    body: str
