"""
Shared fixtures: an in-process fake of the admissions service served
through httpx.MockTransport, and clients wired to it.
"""

import json
import uuid
from typing import Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from admission_frontend.domain.schemas import LoginRequest
from admission_frontend.services.admissions_client import AdmissionsClient

BASE_URL = "http://admissions.test"
VIEWER = LoginRequest(email="john.doe@dsh.ca.gov")
ADMIN = LoginRequest(email="admin@dsh.ca.gov", groups={"admins"})


class FakeAdmissionsService:
    """Just enough of the admissions API to exercise the client."""

    def __init__(self):
        self.hospitals: Dict[str, dict] = {}
        self.waitlist: List[dict] = []
        self.tokens: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []
        self.jwt_status: Optional[int] = None
        self.jwt_body: Optional[str] = None

    @classmethod
    def seeded(cls) -> "FakeAdmissionsService":
        svc = cls()
        svc.add_hospital("Napa", hospital_id=2)
        svc.add_hospital("Atascadero", hospital_id=1)
        svc.add_hospital("Metropolitan", hospital_id=3)
        return svc

    def add_hospital(self, name: str, hospital_id: Optional[int] = None) -> dict:
        hospital = {"id": hospital_id, "name": name, "patients": []}
        self.hospitals[name] = hospital
        return hospital

    def add_waitlisted(self, name: str, disallow=()) -> dict:
        patient = {
            "id": str(uuid.uuid4()),
            "name": name,
            "disallowAdmissionTo": sorted(disallow),
            "admittedTo": None,
        }
        self.waitlist.append(patient)
        return patient

    # ------------------------------------------------------------------
    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        segments = [unquote(s) for s in request.url.raw_path.decode().split("?")[0].split("/")[1:]]

        if segments == ["jwt"]:
            return self._jwt(request)

        actor = self._actor(request)
        if actor is None:
            return httpx.Response(401, text="missing or invalid bearer token")

        if segments[:2] != ["api", "v1"]:
            return httpx.Response(404)
        route = segments[2:]
        method = request.method

        if route == ["hospitals"] and method == "GET":
            return httpx.Response(200, json=list(self.hospitals.values()))
        if route == ["hospital-names"] and method == "GET":
            return httpx.Response(200, json={"names": sorted(self.hospitals)})
        if route == ["hospitals", "admit-from-waitlist"] and method == "POST":
            if not self._is_admin(actor):
                return httpx.Response(403, text="admins only")
            return httpx.Response(200, json=self._admit_all())
        if len(route) == 2 and route[0] == "hospitals" and method == "GET":
            hospital = self.hospitals.get(route[1])
            if hospital is None:
                return httpx.Response(404, text=f"Invalid hospital name: {route[1]}")
            return httpx.Response(200, json=hospital)
        if len(route) == 3 and route[0] == "hospitals" and method == "DELETE":
            if not self._is_admin(actor):
                return httpx.Response(403, text="admins only")
            return self._unadmit(route[1], route[2])
        if route == ["waitlist"] and method == "GET":
            return httpx.Response(200, json=self.waitlist)
        if route == ["waitlist"] and method == "POST":
            body = json.loads(request.content)
            patient = {
                "id": str(uuid.uuid4()),
                "name": body["name"],
                "disallowAdmissionTo": body.get("disallowAdmissionTo", []),
                "admittedTo": None,
            }
            self.waitlist.append(patient)
            return httpx.Response(201, json=patient)
        return httpx.Response(405)

    def _jwt(self, request: httpx.Request) -> httpx.Response:
        if self.jwt_status is not None:
            return httpx.Response(self.jwt_status, text="no")
        body = json.loads(request.content)
        if self.jwt_body is not None:
            return httpx.Response(200, text=self.jwt_body)
        token = f"token-{len(self.tokens) + 1}"
        self.tokens[token] = body
        return httpx.Response(200, text=token)

    def _actor(self, request: httpx.Request) -> Optional[dict]:
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        return self.tokens.get(auth[len("Bearer "):])

    @staticmethod
    def _is_admin(actor: dict) -> bool:
        return actor["email"].startswith("admin@")

    def _admit_all(self) -> List[dict]:
        admitted = []
        for patient in list(self.waitlist):
            for name in sorted(self.hospitals):
                if name not in patient["disallowAdmissionTo"]:
                    patient["admittedTo"] = name
                    self.hospitals[name]["patients"].append(patient)
                    self.waitlist.remove(patient)
                    admitted.append(patient)
                    break
        return admitted

    def _unadmit(self, hospital_name: str, patient_id: str) -> httpx.Response:
        hospital = self.hospitals.get(hospital_name)
        if hospital is None:
            return httpx.Response(404)
        for patient in hospital["patients"]:
            if patient["id"] == patient_id:
                hospital["patients"].remove(patient)
                patient["admittedTo"] = None
                self.waitlist.append(patient)
                return httpx.Response(204)
        return httpx.Response(500, text=f"patient {patient_id} not admitted to {hospital_name}")


def client_for(handler, **kwargs) -> AdmissionsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AdmissionsClient(base_url=BASE_URL, http_client=http, **kwargs)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def service():
    return FakeAdmissionsService.seeded()


@pytest.fixture
def client(service):
    return client_for(service.handle)


@pytest.fixture
def make_client():
    """Build a client around an arbitrary MockTransport handler."""
    return client_for


@pytest.fixture
def viewer():
    return VIEWER.model_copy(deep=True)


@pytest.fixture
def admin():
    return ADMIN.model_copy(deep=True)
