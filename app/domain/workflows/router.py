"""Workflow router - FastAPI endpoints for workflow automations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from .schemas import (
    EmailActionUpsert,
    EmailSchedule,
    StageChangeEditorState,
    StageChangeWorkflowSave,
    StageChangeWorkflowSaved,
    WorkflowActionResponse,
    WorkflowCreate,
    WorkflowResponse,
    WorkflowSummary,
    WorkflowUpdate,
)
from .service import SAVED_MESSAGE, WorkflowService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflows", tags=["Workflows"])


def get_workflow_service(db: Session = Depends(get_db)) -> WorkflowService:
    """Dependency injection for WorkflowService"""
    return WorkflowService(db)


@router.get("", response_model=list[WorkflowSummary])
async def list_workflows(
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """All automations with their triggers, stages and email behaviour"""
    return service.list_summaries()


@router.post("", response_model=WorkflowResponse, status_code=201)
async def create_workflow(
    data: WorkflowCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    return service.create_workflow(data)


@router.get("/stage-change", response_model=StageChangeEditorState)
async def get_stage_change_editor(
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Stages plus the current (or default) deal stage change → patient email workflow"""
    return service.get_editor_state()


@router.post("/stage-change", response_model=StageChangeWorkflowSaved)
async def save_stage_change_workflow(
    data: StageChangeWorkflowSave,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Create or update the workflow, then create or update its patient email action"""
    workflow, action = service.save_stage_change_workflow(data)
    logger.info(f"💾 Stage-change workflow {workflow.id} saved by {current_user.email}")
    return StageChangeWorkflowSaved(
        message=SAVED_MESSAGE,
        workflow=WorkflowResponse.model_validate(workflow),
        action=WorkflowActionResponse.model_validate(action),
    )


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    return service.get_workflow(workflow_id)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: str,
    data: WorkflowUpdate,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    return service.update_workflow(workflow_id, data)


@router.delete("/{workflow_id}")
async def delete_workflow(
    workflow_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Delete a workflow and its actions"""
    return service.delete_workflow(workflow_id)


@router.get("/{workflow_id}/actions", response_model=list[WorkflowActionResponse])
async def list_workflow_actions(
    workflow_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    return service.list_actions(workflow_id)


@router.put("/{workflow_id}/email-action", response_model=WorkflowActionResponse)
async def upsert_email_action(
    workflow_id: str,
    data: EmailActionUpsert,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    service.get_workflow(workflow_id)
    schedule = EmailSchedule(**data.model_dump(exclude={"subject_template", "body_template"}))
    return service.upsert_email_action(
        workflow_id, data.subject_template, data.body_template, schedule
    )


@router.delete("/{workflow_id}/actions")
async def delete_workflow_actions(
    workflow_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    service.get_workflow(workflow_id)
    removed = service.delete_actions_for_workflow(workflow_id)
    return {"message": f"Deleted {removed} action(s)", "deletedCount": removed}
