# admission_frontend/core/errors.py
from __future__ import annotations

from typing import Optional


class AdmissionsError(Exception):
    """Base class for every failure raised by the admissions client."""


class AuthenticationFailure(AdmissionsError):
    """The /jwt exchange failed or returned an unusable body."""


class ServiceUnavailable(AdmissionsError):
    """The admissions service could not be reached (connect, read, timeout)."""


class DeserializationFailure(AdmissionsError):
    """The response body does not match the expected schema."""


class ServiceError(AdmissionsError):
    """The admissions service answered with a non-success status."""

    def __init__(self, status_code: int, detail: Optional[str] = None, operation: str = ""):
        self.status_code = status_code
        self.detail = detail or ""
        self.operation = operation
        msg = f"{operation or 'request'} failed ({status_code})"
        if self.detail:
            msg = f"{msg}: {self.detail}"
        super().__init__(msg)


class Unauthorized(ServiceError):
    """401/403: the current credential is missing, expired or lacks privilege."""
