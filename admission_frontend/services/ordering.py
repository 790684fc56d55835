# admission_frontend/services/ordering.py
"""
Display ordering for hospitals and patients.

The admissions service does not guarantee response order, so pages sort
before rendering. All sorts are stable (`sorted` is), so ties keep their
fetch order.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, List

from admission_frontend.domain.schemas import Hospital, Patient


def _cmp(a: str, b: str) -> int:
    return (a > b) - (a < b)


def compare_hospitals(a: Hospital, b: Hospital) -> int:
    return _cmp(a.name, b.name)


def compare_patients_by_id(a: Patient, b: Patient) -> int:
    """Patients without an id first; ids compared by their string form."""
    if a.id is None and b.id is None:
        return 0
    if a.id is None:
        return -1
    if b.id is None:
        return 1
    return _cmp(str(a.id), str(b.id))


def compare_patients_by_name(a: Patient, b: Patient) -> int:
    return _cmp(a.name, b.name)


def sort_hospitals(hospitals: Iterable[Hospital]) -> List[Hospital]:
    return sorted(hospitals, key=cmp_to_key(compare_hospitals))


def sort_patients_by_id(patients: Iterable[Patient]) -> List[Patient]:
    return sorted(patients, key=cmp_to_key(compare_patients_by_id))


def sort_patients_by_name(patients: Iterable[Patient]) -> List[Patient]:
    """Waitlist order."""
    return sorted(patients, key=cmp_to_key(compare_patients_by_name))
