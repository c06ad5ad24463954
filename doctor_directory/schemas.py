"""Pydantic models describing the boundary of the directory core."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, TypeVar

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from doctor_directory.core.exceptions import ValidationError
from doctor_directory.models import ApprovalStatus, DoctorType, Gender, WaitTime

_URL_ADAPTER = TypeAdapter(AnyUrl)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: ModelT | Mapping[str, Any]) -> ModelT:
    """Validate ``payload`` against ``model``, raising the directory ``ValidationError``."""

    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        raise ValidationError(
            f"Invalid {model.__name__} payload", details={"errors": errors}
        ) from exc


class OfficeCreate(BaseModel):
    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Office name is required")
        return value


class OfficeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class ReferralSubmission(BaseModel):
    """Fields a member of the public supplies when recommending a doctor.

    Moderation fields are not part of the submission; any supplied by the
    caller are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    office_id: int
    doctor_name: str = Field(min_length=1)
    type: DoctorType
    address: str | None = None
    phone_number: str | None = None
    gender: Gender
    online_appointments: bool = False
    url: str | None = None
    wait_time: WaitTime
    same_day_service: bool = False
    comments: str | None = None
    submitted_by: str | None = None

    @field_validator("doctor_name")
    @classmethod
    def _require_doctor_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Doctor name is required")
        return value

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        try:
            _URL_ADAPTER.validate_python(value)
        except PydanticValidationError as exc:
            raise ValueError("url must be an absolute URL") from exc
        return value


class ReviewDecision(BaseModel):
    approval_status: ApprovalStatus
    approved_by: str = Field(min_length=1)

    @field_validator("approval_status")
    @classmethod
    def _reject_pending(cls, value: ApprovalStatus) -> ApprovalStatus:
        if value is ApprovalStatus.PENDING:
            raise ValueError("A review must approve or reject the referral")
        return value


class DirectoryFilter(BaseModel):
    """Optional constraints combined with AND; ``None`` means unconstrained."""

    office_id: int | None = None
    doctor_name: str | None = None
    type: DoctorType | None = None
    gender: Gender | None = None
    wait_time: WaitTime | None = None
    online_appointments: bool | None = None
    same_day_service: bool | None = None
    search: str | None = None


class ReferralRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    office_id: int
    doctor_name: str
    type: DoctorType
    address: str | None
    phone_number: str | None
    gender: Gender
    online_appointments: bool
    url: str | None
    wait_time: WaitTime
    same_day_service: bool
    comments: str | None
    approval_status: ApprovalStatus
    submitted_by: str | None
    approved_by: str | None
    created_at: datetime
    updated_at: datetime


class DirectoryEntry(ReferralRead):
    """Referral joined with the name of its office."""

    office_name: str


__all__ = [
    "DirectoryEntry",
    "DirectoryFilter",
    "OfficeCreate",
    "OfficeRead",
    "ReferralRead",
    "ReferralSubmission",
    "ReviewDecision",
    "parse_payload",
]
