"""
Stage-change trigger evaluation
Runs the matching workflows when a deal moves from one pipeline stage to another
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Deal, PatientEmailDraft, Workflow
from ...shared.errors import NotFoundError
from .renderer import build_context, render
from .repository import ActionRepository, WorkflowRepository
from .schemas import ACTION_DRAFT_EMAIL_PATIENT, TRIGGER_DEAL_STAGE_CHANGED
from .service import read_schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageChangeEvent:
    deal_id: str
    pipeline: Optional[str]
    from_stage_id: Optional[str]
    to_stage_id: str


def workflow_matches(config: Optional[dict], event: StageChangeEvent) -> bool:
    """
    A workflow fires when its destination stage equals the event's, its source
    stage is unset or equal, and its pipeline filter is unset or equal.
    """
    config = config or {}
    if not config.get("to_stage_id") or config["to_stage_id"] != event.to_stage_id:
        return False

    from_stage_id = config.get("from_stage_id")
    if from_stage_id and from_stage_id != event.from_stage_id:
        return False

    pipeline = config.get("pipeline")
    if pipeline and pipeline != event.pipeline:
        return False

    return True


class TriggerEvaluator:
    def __init__(self, db: Session):
        self.db = db
        self.workflows = WorkflowRepository()
        self.actions = ActionRepository()

    def find_matching(self, event: StageChangeEvent) -> list[Workflow]:
        candidates = self.workflows.list_active_by_trigger(self.db, TRIGGER_DEAL_STAGE_CHANGED)
        return [w for w in candidates if workflow_matches(w.config, event)]

    def handle_stage_change(
        self, event: StageChangeEvent, now: Optional[datetime] = None
    ) -> list[PatientEmailDraft]:
        """Render and persist one draft email per matching workflow action"""
        if event.from_stage_id == event.to_stage_id:
            return []

        matching = self.find_matching(event)
        if not matching:
            logger.debug(f"ℹ️ No workflow matches stage change of deal {event.deal_id}")
            return []

        deal = self.db.query(Deal).filter(Deal.id == event.deal_id).first()
        if not deal:
            raise NotFoundError("Deal not found")
        if not deal.patient:
            logger.warning(
                f"⚠️ Deal {deal.id} has no patient; skipping {len(matching)} matching workflow(s)"
            )
            return []

        now = now or datetime.utcnow()
        context = build_context(deal.patient, deal)
        actions = self.actions.list_actions(self.db, [w.id for w in matching])

        drafts = []
        for workflow in matching:
            for action in actions:
                if action.workflow_id != workflow.id:
                    continue
                if action.action_type != ACTION_DRAFT_EMAIL_PATIENT:
                    logger.warning(f"⚠️ Unsupported workflow action type: {action.action_type}")
                    continue

                config = action.config or {}
                schedule = read_schedule(config)
                scheduled_for = now
                if schedule.send_mode == "delay" and schedule.delay_minutes:
                    scheduled_for = now + timedelta(minutes=schedule.delay_minutes)

                draft = PatientEmailDraft(
                    patient_id=deal.patient.id,
                    deal_id=deal.id,
                    workflow_id=workflow.id,
                    to_email=deal.patient.email,
                    subject=render(config.get("subject_template"), context),
                    body=render(config.get("body_template"), context),
                    send_mode=schedule.send_mode,
                    scheduled_for=scheduled_for,
                    recurring_every_days=schedule.recurring_every_days,
                    recurring_times=schedule.recurring_times,
                )
                self.db.add(draft)
                drafts.append(draft)

        self.db.commit()
        for draft in drafts:
            self.db.refresh(draft)

        logger.info(
            f"📧 Deal {deal.id} moved to stage {event.to_stage_id}: "
            f"{len(drafts)} draft email(s) from {len(matching)} workflow(s)"
        )
        return drafts
