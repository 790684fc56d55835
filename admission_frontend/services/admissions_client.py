# admission_frontend/services/admissions_client.py
"""
Async REST client for the admissions service.

- authenticates as an actor via POST /jwt and attaches the bearer token
- maps domain actions onto the versioned JSON API (/api/{version}/...)
- turns responses into pydantic models or the typed errors in core.errors
- 404 on lookup-by-name is the only status treated as "absent" (None)

Settings:
  settings.ADMISSIONS_API_URL        (e.g. http://localhost:8080)
  settings.ADMISSIONS_API_VERSION    (e.g. v1)
  settings.HTTP_TIMEOUT_SECONDS / HTTP_CONNECT_TIMEOUT_SECONDS
  settings.AUTH_MAX_RETRIES
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Set, Type, TypeVar, Union
from urllib.parse import quote
from uuid import UUID

import httpx
from pydantic import TypeAdapter, ValidationError

from admission_frontend.core.config import settings
from admission_frontend.core.errors import (
    AuthenticationFailure,
    DeserializationFailure,
    ServiceError,
    ServiceUnavailable,
    Unauthorized,
)
from admission_frontend.core.log_filter import mask_value
from admission_frontend.core.session import AdmissionSession
from admission_frontend.domain.schemas import (
    Hospital,
    HospitalAllowance,
    HospitalNames,
    LoginRequest,
    Patient,
)
from admission_frontend.services.ordering import sort_hospitals

log = logging.getLogger(__name__)

T = TypeVar("T")

_HOSPITALS = TypeAdapter(List[Hospital])
_PATIENTS = TypeAdapter(List[Patient])


def _detail(resp: httpx.Response) -> str:
    try:
        return json.dumps(resp.json(), ensure_ascii=False)
    except ValueError:
        return resp.text


def _segment(value: Union[str, UUID]) -> str:
    return quote(str(value), safe="")


class AdmissionsClient:
    """
    One client per workflow. Use as an async context manager so the
    underlying httpx.AsyncClient is closed:

        async with AdmissionsClient() as client:
            await client.authenticate_as(viewer_actor())
            hospitals = sort_hospitals(await client.list_hospitals())
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[AdmissionSession] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        api_version: Optional[str] = None,
        auth_max_retries: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.ADMISSIONS_API_URL).rstrip("/")
        self.api_prefix = f"/api/{api_version}" if api_version else settings.api_prefix
        self.session = session or AdmissionSession()
        self.auth_max_retries = (
            settings.AUTH_MAX_RETRIES if auth_max_retries is None else auth_max_retries
        )
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(
                settings.HTTP_TIMEOUT_SECONDS, connect=settings.HTTP_CONNECT_TIMEOUT_SECONDS
            ),
        )

    async def __aenter__(self) -> "AdmissionsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _send(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._http.request(
                method, self._url(path), headers=self.session.auth_headers(), **kwargs
            )
        except httpx.RequestError as e:
            raise ServiceUnavailable(f"{operation}: admissions service unreachable: {e}") from e
        log.debug("[AdmissionsClient] %s %s -> %s", method, path, resp.status_code)
        return resp

    @staticmethod
    def _raise_for_status(resp: httpx.Response, operation: str) -> None:
        if resp.is_success:
            return
        detail = _detail(resp)
        log.warning("[AdmissionsClient] %s failed (%s): %s", operation, resp.status_code, detail)
        if resp.status_code in (401, 403):
            raise Unauthorized(resp.status_code, detail, operation)
        raise ServiceError(resp.status_code, detail, operation)

    @staticmethod
    def _parse(resp: httpx.Response, adapter: Union[TypeAdapter, Type[T]], operation: str) -> Any:
        try:
            if isinstance(adapter, TypeAdapter):
                return adapter.validate_json(resp.content)
            return adapter.model_validate_json(resp.content)
        except ValidationError as e:
            raise DeserializationFailure(
                f"{operation}: unexpected response body: {e.error_count()} error(s)"
            ) from e

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    async def authenticate_as(self, actor: LoginRequest) -> None:
        """
        Exchanges the actor for a bearer token and makes it the session's
        credential. On any failure the previous credential is kept.
        """
        async with self.session.replacing() as commit:
            resp = await self._post_jwt(actor)
            if not resp.is_success:
                raise AuthenticationFailure(
                    f"authentication as {mask_value(actor.email)} failed "
                    f"({resp.status_code}): {_detail(resp)}"
                )
            token = resp.text.strip()
            if not token:
                raise AuthenticationFailure(
                    f"authentication as {mask_value(actor.email)} returned an empty token"
                )
            commit(token, actor.email)
        log.info("[AdmissionsClient] authenticated as %s", mask_value(actor.email))

    async def _post_jwt(self, actor: LoginRequest) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                # /jwt never carries the previous bearer
                return await self._http.post(self._url("/jwt"), json=actor.to_wire())
            except httpx.RequestError as e:
                if attempt > self.auth_max_retries:
                    raise ServiceUnavailable(
                        f"authenticate: admissions service unreachable: {e}"
                    ) from e
                log.warning(
                    "[AdmissionsClient] /jwt transport error (attempt %s): %s", attempt, e
                )

    # ------------------------------------------------------------------
    # Hospitals
    # ------------------------------------------------------------------
    async def list_hospitals(self) -> List[Hospital]:
        """In fetch order; callers sort with ordering.sort_hospitals."""
        op = "list hospitals"
        resp = await self._send("GET", f"{self.api_prefix}/hospitals", op)
        self._raise_for_status(resp, op)
        return self._parse(resp, _HOSPITALS, op)

    async def get_hospital_by_name(self, name: str) -> Optional[Hospital]:
        """Returns None when the service has no hospital with this name."""
        if not name or not name.strip():
            raise ValueError("hospital name must not be empty")
        op = "get hospital"
        resp = await self._send("GET", f"{self.api_prefix}/hospitals/{_segment(name)}", op)
        if resp.status_code == 404:
            log.info("[AdmissionsClient] no hospital named %r", name)
            return None
        self._raise_for_status(resp, op)
        hospital = self._parse(resp, Hospital, op)
        if hospital.name != name:
            raise DeserializationFailure(
                f"{op}: asked for {name!r}, service returned {hospital.name!r}"
            )
        return hospital

    async def get_hospital_names(self) -> Set[str]:
        op = "get hospital names"
        resp = await self._send("GET", f"{self.api_prefix}/hospital-names", op)
        self._raise_for_status(resp, op)
        return self._parse(resp, HospitalNames, op).names

    async def hospital_allowances(self) -> List[HospitalAllowance]:
        """Starting checklist for a new patient: every hospital allowed, by name."""
        hospitals = sort_hospitals(await self.list_hospitals())
        return [HospitalAllowance(hospital_name=h.name, is_allowed=True) for h in hospitals]

    # ------------------------------------------------------------------
    # Waitlist / admissions
    # ------------------------------------------------------------------
    async def list_waitlist(self) -> List[Patient]:
        op = "list waitlist"
        resp = await self._send("GET", f"{self.api_prefix}/waitlist", op)
        self._raise_for_status(resp, op)
        patients = self._parse(resp, _PATIENTS, op)
        waitlisted = [p for p in patients if p.is_waitlisted]
        if len(waitlisted) != len(patients):
            log.warning(
                "[AdmissionsClient] waitlist contained %s admitted patient(s), dropped",
                len(patients) - len(waitlisted),
            )
        return waitlisted

    async def create_patient(self, patient: Patient) -> Optional[Patient]:
        """
        Adds a new patient to the waitlist. Returns the stored patient when
        the service echoes it back, None for an empty acknowledgement.
        """
        if patient.id is not None:
            raise ValueError(f"patient {patient.id} already exists")
        op = "create patient"
        body = patient.to_wire(exclude_none=True, exclude={"id"})
        resp = await self._send("POST", f"{self.api_prefix}/waitlist", op, json=body)
        self._raise_for_status(resp, op)
        if not resp.content.strip():
            return None
        return self._parse(resp, Patient, op)

    async def admit_from_waitlist(self) -> List[Patient]:
        """Privileged: authenticate as an elevated actor first."""
        op = "admit from waitlist"
        resp = await self._send("POST", f"{self.api_prefix}/hospitals/admit-from-waitlist", op)
        self._raise_for_status(resp, op)
        if not resp.content.strip():
            return []
        admitted = self._parse(resp, _PATIENTS, op)
        log.info("[AdmissionsClient] admitted %s patient(s) from the waitlist", len(admitted))
        return admitted

    async def unadmit(self, hospital_name: str, patient_id: Union[UUID, str]) -> None:
        """Privileged: authenticate as an elevated actor first."""
        if not hospital_name or not hospital_name.strip():
            raise ValueError("hospital name must not be empty")
        op = "unadmit patient"
        path = f"{self.api_prefix}/hospitals/{_segment(hospital_name)}/{_segment(patient_id)}"
        resp = await self._send("DELETE", path, op)
        self._raise_for_status(resp, op)
        log.info("[AdmissionsClient] unadmitted %s from %r", patient_id, hospital_name)
