# admission_frontend/services/census_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from admission_frontend.services.admissions_client import AdmissionsClient

log = logging.getLogger(__name__)


@dataclass
class CensusResult:
    """Patients counted per hospital."""
    patients_per_hospital: Dict[str, int] = field(default_factory=dict)
    total_patients: int = 0

    def count(self, hospital: str, patients: int = 1) -> None:
        self.patients_per_hospital[hospital] = self.patients_per_hospital.get(hospital, 0) + patients
        self.total_patients += patients

    def __str__(self) -> str:
        lines = ["Hospital Patient Census"]
        for hospital in sorted(self.patients_per_hospital):
            lines.append(f" * {hospital:10}: {self.patients_per_hospital[hospital]}")
        lines.append(f"Total: {self.total_patients}")
        return "\n".join(lines)


class CensusService:
    def __init__(self, client: AdmissionsClient):
        self.client = client

    async def conduct_census(self) -> CensusResult:
        """Caller must have authenticated the client already."""
        hospitals = await self.client.list_hospitals()
        result = CensusResult()
        for hospital in hospitals:
            result.count(hospital.name, len(hospital.patients))
        log.info(
            "[Census] %s patient(s) across %s hospital(s)",
            result.total_patients, len(result.patients_per_hospital),
        )
        return result
