import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from ..auth import get_current_user
from ..config import CRISALIX_TOKEN_COOKIE
from ..models import StaffUser
from ..services.crisalix_service import CrisalixService, get_crisalix_service, read_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/crisalix", tags=["Crisalix"])


@router.post("/patients")
async def create_crisalix_patient(
    request: Request,
    current_user: StaffUser = Depends(get_current_user),
    service: CrisalixService = Depends(get_crisalix_service),
):
    """Create a patient in Crisalix from the multipart form sent by the 3D screen"""
    access_token = read_access_token(request.cookies.get(CRISALIX_TOKEN_COOKIE))

    form = await request.form()
    parts = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            parts.append((key, (value.filename, await value.read(), value.content_type)))
        else:
            parts.append((key, (None, value)))

    logger.info(f"📤 Forwarding Crisalix patient form with {len(parts)} part(s)")
    return await service.create_patient(access_token, parts)
