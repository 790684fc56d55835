from enum import Enum


class AdmissionStatus(str, Enum):
    """
    Lifecycle stage of a patient, independent of hospital assignment.

    Open enumeration: unknown non-empty values coming from the admissions
    service become ad-hoc members instead of failing validation.
    """
    new = "New"
    on_waitlist = "OnWaitlist"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str) or not value.strip():
            return None
        member = str.__new__(cls, value)
        member._name_ = value
        member._value_ = value
        return member
