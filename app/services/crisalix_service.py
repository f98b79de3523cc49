"""
Crisalix 3D imaging partner client
Forwards patient creation forms with the staff member's Crisalix access token
"""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import CRISALIX_API_BASE_URL
from ..shared.errors import CRMError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)


class CrisalixAuthError(CRMError):
    status_code = 401


class CrisalixUpstreamError(UpstreamError):
    """Crisalix answered with a non-success status"""

    def __init__(self, upstream_status: int, details: Any):
        super().__init__("Crisalix patient creation failed", details)
        self.upstream_status = upstream_status

    def to_dict(self) -> dict:
        return {"error": self.message, "status": self.upstream_status, "details": self.details}


def read_access_token(cookie_value: Optional[str]) -> str:
    """
    Extract the access token from the crisalix_tokens cookie (a JSON object).

    Raises:
        CrisalixAuthError: cookie missing, not JSON, or without an access token
    """
    if not cookie_value:
        raise CrisalixAuthError("Missing Crisalix authentication. Please connect 3D again.")

    try:
        parsed = json.loads(cookie_value)
    except ValueError:
        parsed = None

    token = parsed.get("access_token") if isinstance(parsed, dict) else None
    if not token:
        raise CrisalixAuthError("Missing Crisalix access token. Please reconnect 3D.")
    return token


class CrisalixService:
    """Service for interacting with the Crisalix API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or CRISALIX_API_BASE_URL).rstrip("/")
        self.transport = transport

    async def create_patient(self, access_token: str, parts: list[tuple[str, tuple]]) -> Any:
        """
        POST the multipart form to /patients and return Crisalix's JSON reply.

        parts keeps the incoming form order: plain fields are (name, (None, value)),
        files are (name, (filename, content, content_type)).
        """
        url = f"{self.base_url}/patients"
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, headers=headers, files=parts)
        except httpx.RequestError as e:
            logger.error(f"❌ Crisalix unreachable: {e}")
            raise NetworkError("Could not reach Crisalix") from e

        if not response.is_success:
            try:
                details = response.json()
            except ValueError:
                details = response.text or None
            logger.error(f"❌ Crisalix patient creation failed: {response.status_code}")
            raise CrisalixUpstreamError(response.status_code, details)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Crisalix returned an invalid response") from e


def get_crisalix_service() -> CrisalixService:
    return CrisalixService()
