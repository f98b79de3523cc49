import logging
from typing import Optional

import firebase_admin
from fastapi import APIRouter, Depends
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from pydantic import BaseModel

from ..auth import get_current_user
from ..config import FIREBASE_PROJECT_ID
from ..models import StaffUser
from ..shared.errors import CRMError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

DIRECTORY_PAGE_SIZE = 100


class DirectoryUser(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None


def get_firebase_app():
    """Return the default Firebase Admin app, initializing it on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        try:
            cred = credentials.ApplicationDefault()
            app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with default credentials")
        except Exception:
            # Initialize without credentials (limited functionality)
            app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with project ID only")
        return app


def display_name(record) -> Optional[str]:
    """Display name, else first/last name claims, else email"""
    if record.display_name:
        return record.display_name

    claims = record.custom_claims or {}
    name = " ".join(part for part in (claims.get("first_name"), claims.get("last_name")) if part)
    return name or record.email or None


@router.get("/list", response_model=list[DirectoryUser])
async def list_users(current_user: StaffUser = Depends(get_current_user)):
    """First page of staff accounts from the identity provider"""
    try:
        page = firebase_auth.list_users(max_results=DIRECTORY_PAGE_SIZE, app=get_firebase_app())
    except FirebaseError as e:
        logger.error(f"Firebase user listing failed: {e}")
        raise CRMError(str(e) or "Failed to list users") from e
    except Exception as e:
        logger.error(f"Unexpected error listing users: {e}")
        raise CRMError("Unexpected error listing users") from e

    return [
        DirectoryUser(id=user.uid, full_name=display_name(user), email=user.email or None)
        for user in page.users
    ]
