from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doctor_directory.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from doctor_directory.models.office import Office


class DoctorType(str, enum.Enum):
    """Medical specialty of a referred doctor."""

    GENERAL_PRACTITIONER = "general_practitioner"
    DENTIST = "dentist"
    OBGYN = "obgyn"
    CARDIOLOGIST = "cardiologist"
    DERMATOLOGIST = "dermatologist"
    PSYCHIATRIST = "psychiatrist"
    NEUROLOGIST = "neurologist"
    ORTHOPEDIST = "orthopedist"
    PEDIATRICIAN = "pediatrician"
    OPHTHALMOLOGIST = "ophthalmologist"
    OTHER = "other"

    @property
    def label(self) -> str:
        return DOCTOR_TYPE_LABELS[self]


class Gender(str, enum.Enum):
    """Gender of a referred doctor as reported by the submitter."""

    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non_binary"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class WaitTime(str, enum.Enum):
    """Typical wait before an appointment is available."""

    SAME_DAY = "same_day"
    WITHIN_WEEK = "within_week"
    WITHIN_MONTH = "within_month"
    OVER_MONTH = "over_month"
    UNKNOWN = "unknown"


class ApprovalStatus(str, enum.Enum):
    """Moderation state of a referral."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


DOCTOR_TYPE_LABELS: dict[DoctorType, str] = {
    DoctorType.GENERAL_PRACTITIONER: "General Practitioner",
    DoctorType.DENTIST: "Dentist",
    DoctorType.OBGYN: "OB/GYN",
    DoctorType.CARDIOLOGIST: "Cardiologist",
    DoctorType.DERMATOLOGIST: "Dermatologist",
    DoctorType.PSYCHIATRIST: "Psychiatrist",
    DoctorType.NEUROLOGIST: "Neurologist",
    DoctorType.ORTHOPEDIST: "Orthopedist",
    DoctorType.PEDIATRICIAN: "Pediatrician",
    DoctorType.OPHTHALMOLOGIST: "Ophthalmologist",
    DoctorType.OTHER: "Other",
}


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    # persist the lowercase wire spelling, not the member name
    return [member.value for member in enum_cls]


class DoctorReferral(Base, TimestampMixin):
    """User-submitted doctor recommendation awaiting or past moderation."""

    __tablename__ = "doctor_referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    office_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("offices.id"), nullable=False, index=True
    )
    doctor_name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[DoctorType] = mapped_column(
        Enum(DoctorType, name="doctor_type", values_callable=_enum_values),
        nullable=False,
    )
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(Text, nullable=True)
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="gender", values_callable=_enum_values),
        nullable=False,
    )
    online_appointments: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    wait_time: Mapped[WaitTime] = mapped_column(
        Enum(WaitTime, name="wait_time", values_callable=_enum_values),
        nullable=False,
    )
    same_day_service: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus, name="approval_status", values_callable=_enum_values),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    submitted_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(Text, nullable=True)

    office: Mapped[Office] = relationship(back_populates="referrals")

    @property
    def office_name(self) -> str:
        """Name of the joined office, used by directory projections."""

        return self.office.name
