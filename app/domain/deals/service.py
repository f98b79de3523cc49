"""Deal service - Pipeline moves and the automations they trigger"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Deal, PatientEmailDraft, Patient
from ...shared.errors import NotFoundError, ValidationError
from ...shared.validators import clean_optional_text
from ..workflows.repository import StageRepository
from ..workflows.trigger import StageChangeEvent, TriggerEvaluator
from .repository import DealRepository
from .schemas import DealCreate

logger = logging.getLogger(__name__)


class DealService:
    """Service layer for deal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DealRepository()
        self.stages = StageRepository()

    def list_deals(self, pipeline: Optional[str] = None, stage_id: Optional[str] = None) -> list[Deal]:
        return self.repo.list_deals(self.db, pipeline, stage_id)

    def get_deal(self, deal_id: str) -> Deal:
        deal = self.repo.get_deal(self.db, deal_id)
        if not deal:
            raise NotFoundError("Deal not found")
        return deal

    def create_deal(self, data: DealCreate) -> Deal:
        if data.stage_id and not self.stages.get_stage(self.db, data.stage_id):
            raise ValidationError(f"Unknown stage: {data.stage_id}")
        if data.patient_id and not self.db.query(Patient).filter(Patient.id == data.patient_id).first():
            raise ValidationError(f"Unknown patient: {data.patient_id}")

        return self.repo.create_deal(
            self.db,
            title=data.title,
            patient_id=data.patient_id,
            stage_id=data.stage_id,
            pipeline=clean_optional_text(data.pipeline),
            value=data.value,
            notes=clean_optional_text(data.notes),
        )

    def move_deal(self, deal_id: str, stage_id: str) -> tuple[Deal, Optional[str], list[PatientEmailDraft]]:
        """
        Move a deal to another stage and run the stage-change automations.
        Returns (deal, previous_stage_id, drafts_created).
        """
        deal = self.get_deal(deal_id)
        if not self.stages.get_stage(self.db, stage_id):
            raise ValidationError(f"Unknown stage: {stage_id}")

        from_stage_id = deal.stage_id
        if from_stage_id == stage_id:
            return deal, from_stage_id, []

        deal = self.repo.set_stage(self.db, deal, stage_id)
        logger.info(f"➡️ Deal {deal.id} moved: {from_stage_id} → {stage_id}")

        event = StageChangeEvent(
            deal_id=deal.id,
            pipeline=deal.pipeline,
            from_stage_id=from_stage_id,
            to_stage_id=stage_id,
        )
        drafts = TriggerEvaluator(self.db).handle_stage_change(event)
        return deal, from_stage_id, drafts
