"""Deal domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class DealCreate(BaseModel):
    title: str
    patient_id: Optional[str] = None
    stage_id: Optional[str] = None
    pipeline: Optional[str] = None
    value: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Deal title is required")
        return v.strip()


class DealMove(BaseModel):
    stage_id: str


class DealResponse(BaseModel):
    id: str
    title: str
    patient_id: Optional[str] = None
    stage_id: Optional[str] = None
    pipeline: Optional[str] = None
    value: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmailDraftResponse(BaseModel):
    id: str
    patient_id: Optional[str] = None
    deal_id: Optional[str] = None
    workflow_id: Optional[str] = None
    to_email: Optional[str] = None
    subject: str
    body: str
    status: str
    send_mode: str
    scheduled_for: Optional[datetime] = None
    recurring_every_days: Optional[int] = None
    recurring_times: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DealMoveResult(BaseModel):
    deal: DealResponse
    from_stage_id: Optional[str] = None
    to_stage_id: str
    drafts: list[EmailDraftResponse]
