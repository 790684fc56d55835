# admission_frontend/core/session.py
"""
Admission session: the one bearer credential of the current actor.

A session belongs to a single workflow (one page request). Privilege is
proven per call: callers re-authenticate as an elevated actor right before
a privileged operation instead of caching a role here.

Usage:
    session = AdmissionSession()
    async with session.replacing() as commit:
        token = await exchange(actor)
        commit(token, actor.email)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Dict, Optional

from admission_frontend.core.log_filter import mask_value

log = logging.getLogger(__name__)


class AdmissionSession:
    def __init__(self):
        self._token: Optional[str] = None
        self._actor_email: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def actor_email(self) -> Optional[str]:
        return self._actor_email

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def auth_headers(self) -> Dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    @asynccontextmanager
    async def replacing(self) -> AsyncGenerator[Callable[[str, str], None], None]:
        """
        Exclusive scope for swapping the credential.

        The credential only changes if the yielded `commit` is called; an
        exception inside the scope leaves the previous credential in place.
        """
        async with self._lock:
            def commit(token: str, actor_email: str) -> None:
                self._token = token
                self._actor_email = actor_email
                log.debug("[AdmissionSession] credential replaced (token %s)", mask_value(token))

            yield commit

    def clear(self) -> None:
        self._token = None
        self._actor_email = None
