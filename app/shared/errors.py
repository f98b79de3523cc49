"""Domain errors raised by services and converted to JSON responses in main.py"""

from typing import Any, Optional


class CRMError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(CRMError):
    """Missing or malformed input, e.g. an empty destination stage"""

    status_code = 400


class NotFoundError(CRMError):
    status_code = 404


class ConflictError(CRMError):
    """Operation not allowed in the current state of the data"""

    status_code = 409


class UpstreamError(CRMError):
    """Remote API answered with a non-success status or an unusable payload"""

    status_code = 502


class NetworkError(CRMError):
    """Transport failure while talking to a remote API"""

    status_code = 503
