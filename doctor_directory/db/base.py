"""Import SQLAlchemy models for Alembic's autogenerate feature."""

from doctor_directory.models.base import Base
from doctor_directory.models import DoctorReferral, Office  # noqa: F401

__all__ = [
    "Base",
    "DoctorReferral",
    "Office",
]
