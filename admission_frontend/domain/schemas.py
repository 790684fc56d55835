# admission_frontend/domain/schemas.py
from __future__ import annotations

from typing import Optional, List, Set, FrozenSet
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from admission_frontend.domain.enums import AdmissionStatus


class _Wire(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


# ---------------------------
# ACTORS
# ---------------------------
class LoginRequest(_Wire):
    email: str = Field(..., min_length=1)
    groups: Set[str] = Field(default_factory=set)

    def to_wire(self, **kwargs) -> dict:
        # sets serialize in arbitrary order; keep the request body stable
        return {"email": self.email, "groups": sorted(self.groups)}


# ---------------------------
# PATIENTS
# ---------------------------
class Patient(_Wire):
    id: Optional[UUID] = None
    name: str = ""
    disallow_admission_to: FrozenSet[str] = Field(default_factory=frozenset)
    # hospital name; None means new or on the waitlist
    admitted_to: Optional[str] = None
    status: Optional[AdmissionStatus] = None

    model_config = ConfigDict(validate_assignment=True)

    @model_validator(mode="after")
    def _not_admitted_where_disallowed(self):
        if self.admitted_to is not None and self.admitted_to in self.disallow_admission_to:
            raise ValueError(
                f"patient cannot be admitted to {self.admitted_to!r}, it is disallowed"
            )
        return self

    def __setattr__(self, name, value):
        if getattr(self, "id", None) is not None:
            raise TypeError(f"patient {self.id} is persisted and cannot be modified")
        previous = self.__dict__.get(name)
        try:
            super().__setattr__(name, value)
        except ValidationError:
            # model validators run after the field is stored
            self.__dict__[name] = previous
            raise

    @property
    def is_admitted(self) -> bool:
        return self.admitted_to is not None

    @property
    def is_waitlisted(self) -> bool:
        return self.admitted_to is None


# ---------------------------
# HOSPITALS
# ---------------------------
class Hospital(_Wire):
    id: Optional[int] = None
    name: str
    patients: List[Patient] = Field(default_factory=list)

    @model_validator(mode="after")
    def _patients_belong_here(self):
        for p in self.patients:
            if p.admitted_to is not None and p.admitted_to != self.name:
                raise ValueError(
                    f"patient {p.name!r} is admitted to {p.admitted_to!r}, not {self.name!r}"
                )
        return self


class HospitalNames(_Wire):
    names: Set[str] = Field(default_factory=set)


# ---------------------------
# FORMS
# ---------------------------
class HospitalAllowance(_Wire):
    hospital_name: str
    is_allowed: bool = True


class CreatePatientForm(_Wire):
    patient_name: str = ""
    allowed_hospitals: List[HospitalAllowance] = Field(default_factory=list)

    def to_patient(self) -> Patient:
        """
        Inverts the staff checklist into the patient's disallow set.

        Hospitals missing from the checklist are implicitly allowed.
        """
        disallowed = {h.hospital_name for h in self.allowed_hospitals if not h.is_allowed}
        return Patient(
            name=self.patient_name,
            disallow_admission_to=disallowed,
            status=AdmissionStatus.new,
        )
