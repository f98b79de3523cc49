"""Workflow domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

TRIGGER_DEAL_STAGE_CHANGED = "deal_stage_changed"
ACTION_DRAFT_EMAIL_PATIENT = "draft_email_patient"

SendMode = Literal["immediate", "delay", "recurring"]

DEFAULT_WORKFLOW_NAME = "Deal: Request info → Request processed"
FALLBACK_WORKFLOW_NAME = "Deal stage change automation"
DEFAULT_SUBJECT_TEMPLATE = "Your information request has been processed"
DEFAULT_BODY_TEMPLATE = "\n".join(
    [
        "Hi {{patient.first_name}}",
        "",
        "We wanted to let you know that your request for information has now been processed.",
        "",
        "Deal: {{deal.title}}",
        "Pipeline: {{deal.pipeline}}",
        "",
        "Best regards,",
        "Your clinic team",
    ]
)


def _positive_or_none(v):
    if v is not None and v <= 0:
        raise ValueError("Must be a positive number")
    return v


class DealStageResponse(BaseModel):
    id: str
    name: str
    type: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class EmailSchedule(BaseModel):
    """When a drafted email should go out once the workflow fires"""

    send_mode: SendMode = "immediate"
    delay_minutes: Optional[int] = None
    recurring_every_days: Optional[int] = None
    recurring_times: Optional[int] = None

    @field_validator("delay_minutes", "recurring_every_days", "recurring_times")
    @classmethod
    def validate_positive(cls, v):
        return _positive_or_none(v)


class ScheduleInput(EmailSchedule):
    """Schedule sent by a client; each timed mode needs its interval"""

    @model_validator(mode="after")
    def require_mode_fields(self):
        if self.send_mode == "delay" and self.delay_minutes is None:
            raise ValueError("delay_minutes is required when send_mode is 'delay'")
        if self.send_mode == "recurring" and self.recurring_every_days is None:
            raise ValueError("recurring_every_days is required when send_mode is 'recurring'")
        return self


class WorkflowCreate(BaseModel):
    name: str = ""
    trigger_type: str = TRIGGER_DEAL_STAGE_CHANGED
    active: bool = True
    from_stage_id: Optional[str] = None
    to_stage_id: Optional[str] = None
    pipeline: Optional[str] = None


class WorkflowUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied"""

    name: Optional[str] = None
    active: Optional[bool] = None
    from_stage_id: Optional[str] = None
    to_stage_id: Optional[str] = None
    pipeline: Optional[str] = None


class StageChangeWorkflowSave(ScheduleInput):
    """Body of the stage-change editor form"""

    workflow_id: Optional[str] = None
    name: str = ""
    active: bool = True
    from_stage_id: Optional[str] = None
    to_stage_id: Optional[str] = None
    pipeline: Optional[str] = None
    subject_template: str = DEFAULT_SUBJECT_TEMPLATE
    body_template: str = DEFAULT_BODY_TEMPLATE


class WorkflowResponse(BaseModel):
    id: str
    name: str
    trigger_type: str
    active: bool
    config: dict
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkflowActionResponse(BaseModel):
    id: str
    workflow_id: str
    action_type: str
    config: dict
    sort_order: int

    class Config:
        from_attributes = True


class StageChangeWorkflowSaved(BaseModel):
    message: str
    workflow: WorkflowResponse
    action: WorkflowActionResponse


class StageChangeEditorState(EmailSchedule):
    """Everything the editor form needs to render"""

    stages: list[DealStageResponse]
    workflow_id: Optional[str] = None
    name: str
    active: bool
    from_stage_id: Optional[str] = None
    to_stage_id: Optional[str] = None
    pipeline: Optional[str] = None
    subject_template: str
    body_template: str


class WorkflowSummary(BaseModel):
    id: str
    name: str
    trigger_type: str
    active: bool
    from_stage: Optional[DealStageResponse] = None
    to_stage: Optional[DealStageResponse] = None
    pipeline: Optional[str] = None
    subject_template: Optional[str] = None
    send_mode: SendMode = "immediate"
    delay_minutes: Optional[int] = None
    recurring_every_days: Optional[int] = None
    recurring_times: Optional[int] = None
    send_mode_label: str
    created_at: Optional[datetime] = None


class EmailActionUpsert(ScheduleInput):
    subject_template: str
    body_template: str
