# admission_frontend/services/actors.py
"""Staff actors the front end authenticates as, from configuration."""
from __future__ import annotations

from admission_frontend.core.config import settings
from admission_frontend.domain.schemas import LoginRequest


def viewer_actor() -> LoginRequest:
    """Read-only pages (hospital list, hospital details, waitlist)."""
    return LoginRequest(email=settings.VIEWER_EMAIL, groups=set(settings.VIEWER_GROUPS))


def admin_actor() -> LoginRequest:
    """Mutations: create patient, admit from waitlist, unadmit."""
    return LoginRequest(email=settings.ADMIN_EMAIL, groups=set(settings.ADMIN_GROUPS))
