"""Workflow service - Business logic for stage-change automations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import DealStage, Workflow, WorkflowAction
from ...shared.errors import NotFoundError, ValidationError
from ...shared.validators import clean_optional_text
from .renderer import unknown_tokens
from .repository import ActionRepository, StageRepository, WorkflowRepository
from .schemas import (
    ACTION_DRAFT_EMAIL_PATIENT,
    DEFAULT_BODY_TEMPLATE,
    DEFAULT_SUBJECT_TEMPLATE,
    DEFAULT_WORKFLOW_NAME,
    FALLBACK_WORKFLOW_NAME,
    TRIGGER_DEAL_STAGE_CHANGED,
    DealStageResponse,
    EmailSchedule,
    StageChangeEditorState,
    StageChangeWorkflowSave,
    WorkflowCreate,
    WorkflowSummary,
    WorkflowUpdate,
)

logger = logging.getLogger(__name__)

SEND_MODES = ("immediate", "delay", "recurring")
CONFIG_KEYS = ("from_stage_id", "to_stage_id", "pipeline")

SAVED_MESSAGE = (
    "Workflow saved. A draft email will be created when a deal moves between the selected stages."
)


def requires_destination_stage(trigger_type: str) -> bool:
    return trigger_type == TRIGGER_DEAL_STAGE_CHANGED


def _positive_int(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def read_schedule(action_config: Optional[dict]) -> EmailSchedule:
    """Schedule fields stored on an email action; anything unrecognised means immediate"""
    config = action_config or {}
    mode = config.get("send_mode")
    return EmailSchedule(
        send_mode=mode if mode in SEND_MODES else "immediate",
        delay_minutes=_positive_int(config.get("delay_minutes")),
        recurring_every_days=_positive_int(config.get("recurring_every_days")),
        recurring_times=_positive_int(config.get("recurring_times")),
    )


def send_mode_label(schedule: EmailSchedule) -> str:
    """Human readable description of when the email goes out"""
    if schedule.send_mode == "delay":
        if schedule.delay_minutes and schedule.delay_minutes > 0:
            return f"Delay {schedule.delay_minutes} min"
        return "Delay"

    if schedule.send_mode == "recurring":
        parts = []
        if schedule.recurring_every_days and schedule.recurring_every_days > 0:
            parts.append(f"Every {schedule.recurring_every_days} days")
        if schedule.recurring_times and schedule.recurring_times > 0:
            parts.append(f"{schedule.recurring_times} times")
        return ", ".join(parts) if parts else "Recurring"

    return "Immediate"


class WorkflowService:
    """Service layer for workflow definitions and their actions"""

    def __init__(self, db: Session):
        self.db = db
        self.stages = StageRepository()
        self.repo = WorkflowRepository()
        self.actions = ActionRepository()

    # ------------------------------------------------------------------
    # Stage catalog
    # ------------------------------------------------------------------

    def list_stages(self) -> list[DealStage]:
        return self.stages.list_stages(self.db)

    def _check_stage(self, stage_id: Optional[str], label: str) -> None:
        if stage_id and not self.stages.get_stage(self.db, stage_id):
            raise ValidationError(f"Unknown '{label}' stage: {stage_id}")

    # ------------------------------------------------------------------
    # Workflow definitions
    # ------------------------------------------------------------------

    def _normalize_config(self, trigger_type: str, config: dict) -> dict:
        normalized = {
            "from_stage_id": clean_optional_text(config.get("from_stage_id")),
            "to_stage_id": clean_optional_text(config.get("to_stage_id")),
            "pipeline": clean_optional_text(config.get("pipeline")),
        }
        if requires_destination_stage(trigger_type) and not normalized["to_stage_id"]:
            raise ValidationError("Please select the 'to' stage.")

        self._check_stage(normalized["from_stage_id"], "from")
        self._check_stage(normalized["to_stage_id"], "to")
        return normalized

    def list_workflows(self, trigger_type: Optional[str] = None) -> list[Workflow]:
        return self.repo.list_workflows(self.db, trigger_type)

    def get_workflow(self, workflow_id: str) -> Workflow:
        workflow = self.repo.get_workflow(self.db, workflow_id)
        if not workflow:
            raise NotFoundError("Workflow not found")
        return workflow

    def create_workflow(self, data: WorkflowCreate) -> Workflow:
        """Validate and insert a workflow definition"""
        config = self._normalize_config(data.trigger_type, data.model_dump())
        workflow = self.repo.create_workflow(
            self.db,
            name=data.name.strip() or FALLBACK_WORKFLOW_NAME,
            trigger_type=data.trigger_type,
            active=data.active,
            config=config,
        )
        logger.info(f"✅ Workflow {workflow.id} created ({workflow.trigger_type})")
        return workflow

    def update_workflow(self, workflow_id: str, data: WorkflowUpdate) -> Workflow:
        """Partial update, last write wins"""
        workflow = self.get_workflow(workflow_id)
        fields = data.model_dump(exclude_unset=True)

        updates = {}
        if fields.get("name") is not None:
            updates["name"] = fields["name"].strip() or FALLBACK_WORKFLOW_NAME
        if fields.get("active") is not None:
            updates["active"] = fields["active"]

        config_changes = {k: fields[k] for k in CONFIG_KEYS if k in fields}
        if config_changes:
            merged = {**(workflow.config or {}), **config_changes}
            updates["config"] = self._normalize_config(workflow.trigger_type, merged)

        if not updates:
            return workflow

        workflow = self.repo.update_workflow(self.db, workflow, **updates)
        logger.info(f"✏️ Workflow {workflow.id} updated: {sorted(updates)}")
        return workflow

    def delete_workflow(self, workflow_id: str) -> dict:
        """Delete a workflow together with its actions"""
        workflow = self.get_workflow(workflow_id)
        removed = self.repo.delete_workflow_with_actions(self.db, workflow)
        logger.info(f"🗑️ Workflow {workflow_id} deleted with {removed} action(s)")
        return {"message": "Workflow deleted", "deletedActions": removed}

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def list_actions(self, workflow_id: str) -> list[WorkflowAction]:
        self.get_workflow(workflow_id)
        return self.actions.list_actions(self.db, [workflow_id])

    def upsert_email_action(
        self,
        workflow_id: str,
        subject_template: str,
        body_template: str,
        schedule: Optional[EmailSchedule] = None,
    ) -> WorkflowAction:
        """Update the workflow's patient email action, or create it as the first action"""
        schedule = schedule or EmailSchedule()
        unknown = unknown_tokens(subject_template, body_template)
        if unknown:
            logger.warning(
                f"⚠️ Workflow {workflow_id} email uses unknown tokens {unknown}; they render empty"
            )
        config = {
            "subject_template": subject_template,
            "body_template": body_template,
            **schedule.model_dump(),
        }

        existing = self.actions.find_action(self.db, workflow_id, ACTION_DRAFT_EMAIL_PATIENT)
        if existing:
            return self.actions.update_action_config(self.db, existing, config)

        return self.actions.create_action(
            self.db,
            workflow_id=workflow_id,
            action_type=ACTION_DRAFT_EMAIL_PATIENT,
            config=config,
            sort_order=1,
        )

    def delete_actions_for_workflow(self, workflow_id: str) -> int:
        return self.actions.delete_for_workflow(self.db, workflow_id)

    # ------------------------------------------------------------------
    # Stage-change editor
    # ------------------------------------------------------------------

    def save_stage_change_workflow(
        self, data: StageChangeWorkflowSave
    ) -> tuple[Workflow, WorkflowAction]:
        """
        Save the editor form: update the workflow when an id is given, insert it
        otherwise, then upsert its email action. The two writes are separate
        commits, so a failing action write leaves the workflow row saved.
        """
        if not clean_optional_text(data.to_stage_id):
            raise ValidationError("Please select the 'to' stage.")

        if data.workflow_id:
            workflow = self.update_workflow(
                data.workflow_id,
                WorkflowUpdate(
                    name=data.name,
                    active=data.active,
                    from_stage_id=data.from_stage_id,
                    to_stage_id=data.to_stage_id,
                    pipeline=data.pipeline,
                ),
            )
        else:
            workflow = self.create_workflow(
                WorkflowCreate(
                    name=data.name,
                    trigger_type=TRIGGER_DEAL_STAGE_CHANGED,
                    active=data.active,
                    from_stage_id=data.from_stage_id,
                    to_stage_id=data.to_stage_id,
                    pipeline=data.pipeline,
                )
            )

        schedule = EmailSchedule(
            send_mode=data.send_mode,
            delay_minutes=data.delay_minutes,
            recurring_every_days=data.recurring_every_days,
            recurring_times=data.recurring_times,
        )
        action = self.upsert_email_action(
            workflow.id, data.subject_template, data.body_template, schedule
        )
        return workflow, action

    def get_editor_state(self) -> StageChangeEditorState:
        """Load the first stage-change workflow, or defaults for a new one"""
        stages = self.list_stages()
        stage_models = [DealStageResponse.model_validate(s) for s in stages]
        existing = next(iter(self.list_workflows(TRIGGER_DEAL_STAGE_CHANGED)), None)

        if existing is None:
            info_stage = next(
                (s for s in stages if "request for information" in s.name.lower()), None
            )
            processed_stage = next(
                (s for s in stages if "request processed" in s.name.lower()), None
            )
            return StageChangeEditorState(
                stages=stage_models,
                name=DEFAULT_WORKFLOW_NAME,
                active=True,
                from_stage_id=info_stage.id if info_stage else None,
                to_stage_id=processed_stage.id if processed_stage else None,
                subject_template=DEFAULT_SUBJECT_TEMPLATE,
                body_template=DEFAULT_BODY_TEMPLATE,
            )

        config = existing.config or {}
        action = self.actions.find_action(self.db, existing.id, ACTION_DRAFT_EMAIL_PATIENT)
        action_config = action.config if action else {}
        schedule = read_schedule(action_config)

        return StageChangeEditorState(
            stages=stage_models,
            workflow_id=existing.id,
            name=existing.name,
            active=existing.active,
            from_stage_id=config.get("from_stage_id"),
            to_stage_id=config.get("to_stage_id"),
            pipeline=config.get("pipeline"),
            subject_template=action_config.get("subject_template") or DEFAULT_SUBJECT_TEMPLATE,
            body_template=action_config.get("body_template") or DEFAULT_BODY_TEMPLATE,
            **schedule.model_dump(),
        )

    # ------------------------------------------------------------------
    # Summary listing
    # ------------------------------------------------------------------

    def list_summaries(self) -> list[WorkflowSummary]:
        """Every workflow with resolved stages and its email schedule"""
        stage_by_id = {s.id: DealStageResponse.model_validate(s) for s in self.list_stages()}
        workflows = self.list_workflows()
        actions = self.actions.list_actions(self.db, [w.id for w in workflows])

        summaries = []
        for workflow in workflows:
            config = workflow.config or {}
            email_action = next(
                (
                    a
                    for a in actions
                    if a.workflow_id == workflow.id and a.action_type == ACTION_DRAFT_EMAIL_PATIENT
                ),
                None,
            )
            action_config = email_action.config if email_action else {}
            schedule = read_schedule(action_config)

            summaries.append(
                WorkflowSummary(
                    id=workflow.id,
                    name=workflow.name,
                    trigger_type=workflow.trigger_type,
                    active=workflow.active,
                    from_stage=stage_by_id.get(config.get("from_stage_id") or ""),
                    to_stage=stage_by_id.get(config.get("to_stage_id") or ""),
                    pipeline=config.get("pipeline"),
                    subject_template=action_config.get("subject_template") or None,
                    send_mode_label=send_mode_label(schedule),
                    created_at=workflow.created_at,
                    **schedule.model_dump(),
                )
            )

        return summaries
