from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doctor_directory.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from doctor_directory.models.referral import DoctorReferral


class Office(Base, TimestampMixin):
    """Medical office that referrals are attached to."""

    __tablename__ = "offices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    referrals: Mapped[list[DoctorReferral]] = relationship(back_populates="office")
