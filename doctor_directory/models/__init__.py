"""SQLAlchemy models for the doctor directory."""

from doctor_directory.models.office import Office
from doctor_directory.models.referral import (
    DOCTOR_TYPE_LABELS,
    ApprovalStatus,
    DoctorReferral,
    DoctorType,
    Gender,
    WaitTime,
)

__all__ = [
    "ApprovalStatus",
    "DOCTOR_TYPE_LABELS",
    "DoctorReferral",
    "DoctorType",
    "Gender",
    "Office",
    "WaitTime",
]
