"""Deal router - FastAPI endpoints for deals and the stage catalog"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from ..workflows.repository import StageRepository
from ..workflows.schemas import DealStageResponse
from .schemas import DealCreate, DealMove, DealMoveResult, DealResponse, EmailDraftResponse
from .service import DealService

router = APIRouter(prefix="/deals", tags=["Deals"])
stages_router = APIRouter(prefix="/deal-stages", tags=["Deals"])


def get_deal_service(db: Session = Depends(get_db)) -> DealService:
    """Dependency injection for DealService"""
    return DealService(db)


@stages_router.get("", response_model=list[DealStageResponse])
async def list_deal_stages(
    current_user: StaffUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pipeline stages in progression order"""
    return StageRepository.list_stages(db)


@router.get("", response_model=list[DealResponse])
async def list_deals(
    current_user: StaffUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
    pipeline: Optional[str] = Query(None),
    stage_id: Optional[str] = Query(None),
):
    return service.list_deals(pipeline, stage_id)


@router.post("", response_model=DealResponse, status_code=201)
async def create_deal(
    data: DealCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
):
    return service.create_deal(data)


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
):
    return service.get_deal(deal_id)


@router.post("/{deal_id}/move", response_model=DealMoveResult)
async def move_deal(
    deal_id: str,
    data: DealMove,
    current_user: StaffUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
):
    """Move a deal to another stage; matching workflows draft patient emails"""
    deal, from_stage_id, drafts = service.move_deal(deal_id, data.stage_id)
    return DealMoveResult(
        deal=DealResponse.model_validate(deal),
        from_stage_id=from_stage_id,
        to_stage_id=data.stage_id,
        drafts=[EmailDraftResponse.model_validate(d) for d in drafts],
    )
