"""Deal repository - Database operations for deals"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Deal, DealStage


class DealRepository:
    """Repository for deal database operations"""

    @staticmethod
    def list_deals(
        db: Session, pipeline: Optional[str] = None, stage_id: Optional[str] = None
    ) -> list[Deal]:
        query = db.query(Deal)
        if pipeline:
            query = query.filter(Deal.pipeline == pipeline)
        if stage_id:
            query = query.filter(Deal.stage_id == stage_id)
        return query.order_by(Deal.created_at.desc()).all()

    @staticmethod
    def get_deal(db: Session, deal_id: str) -> Optional[Deal]:
        return db.query(Deal).filter(Deal.id == deal_id).first()

    @staticmethod
    def create_deal(db: Session, **deal_data) -> Deal:
        deal = Deal(**deal_data)
        db.add(deal)
        db.commit()
        db.refresh(deal)
        return deal

    @staticmethod
    def set_stage(db: Session, deal: Deal, stage_id: str) -> Deal:
        deal.stage_id = stage_id
        db.commit()
        db.refresh(deal)
        return deal


DEFAULT_STAGES = [
    ("Request for information", "lead"),
    ("Request processed", "lead"),
    ("Consultation booked", "consultation"),
    ("Quote sent", "consultation"),
    ("Surgery scheduled", "surgery"),
    ("Post-op follow-up", "surgery"),
    ("Closed won", "closed"),
    ("Closed lost", "closed"),
]


def seed_default_stages(db: Session) -> int:
    """Insert the default pipeline stages into an empty catalog; returns rows added"""
    if db.query(DealStage.id).first() is not None:
        return 0
    for order, (name, stage_type) in enumerate(DEFAULT_STAGES, start=1):
        db.add(DealStage(name=name, type=stage_type, sort_order=order))
    db.commit()
    return len(DEFAULT_STAGES)
