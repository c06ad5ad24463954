"""Read-only queries over approved referrals joined with their office.

Nothing in this module mutates state. Every public query is restricted to
``ApprovalStatus.APPROVED`` regardless of the filter values supplied.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import Session, contains_eager
from sqlalchemy.sql.elements import ColumnElement

from doctor_directory.core.exceptions import ValidationError
from doctor_directory.models import ApprovalStatus, DoctorReferral, DoctorType, Office
from doctor_directory.schemas import DirectoryEntry, DirectoryFilter, parse_payload
from doctor_directory.services.store import store_errors

_LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Build a LIKE pattern matching ``term`` literally anywhere in a value."""

    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _ilike(column: Any, term: str) -> ColumnElement[bool]:
    return column.ilike(contains_pattern(term), escape=_LIKE_ESCAPE)


def joined_referrals() -> Select[tuple[DoctorReferral]]:
    """Select referrals with their office loaded by the same inner join."""

    return (
        select(DoctorReferral)
        .join(DoctorReferral.office)
        .options(contains_eager(DoctorReferral.office))
    )


def to_entries(referrals: Iterable[DoctorReferral]) -> list[DirectoryEntry]:
    return [DirectoryEntry.model_validate(referral) for referral in referrals]


def _run(db: Session, stmt: Select[tuple[DoctorReferral]], operation: str) -> list[DirectoryEntry]:
    with store_errors(operation):
        referrals = db.execute(stmt).scalars().unique().all()
        return to_entries(referrals)


def matching_doctor_types(term: str) -> list[DoctorType]:
    """Specialties whose wire value or display label contains ``term``."""

    needle = term.lower()
    return [
        doctor_type
        for doctor_type in DoctorType
        if needle in doctor_type.value or needle in doctor_type.label.lower()
    ]


def filter_conditions(filters: DirectoryFilter) -> list[ColumnElement[bool]]:
    """Translate a filter into SQL conditions, one per supplied option."""

    conditions: list[ColumnElement[bool]] = []
    if filters.office_id is not None:
        conditions.append(DoctorReferral.office_id == filters.office_id)
    if filters.doctor_name:
        conditions.append(_ilike(DoctorReferral.doctor_name, filters.doctor_name))
    if filters.type is not None:
        conditions.append(DoctorReferral.type == filters.type)
    if filters.gender is not None:
        conditions.append(DoctorReferral.gender == filters.gender)
    if filters.wait_time is not None:
        conditions.append(DoctorReferral.wait_time == filters.wait_time)
    if filters.online_appointments is not None:
        conditions.append(DoctorReferral.online_appointments == filters.online_appointments)
    if filters.same_day_service is not None:
        conditions.append(DoctorReferral.same_day_service == filters.same_day_service)
    if filters.search:
        conditions.append(
            or_(
                _ilike(DoctorReferral.doctor_name, filters.search),
                _ilike(Office.name, filters.search),
            )
        )
    return conditions


def query_directory(
    db: Session, filters: DirectoryFilter | Mapping[str, Any] | None = None
) -> list[DirectoryEntry]:
    """Return approved entries satisfying every supplied filter option."""

    parsed = parse_payload(DirectoryFilter, filters or {})
    stmt = (
        joined_referrals()
        .where(
            DoctorReferral.approval_status == ApprovalStatus.APPROVED,
            *filter_conditions(parsed),
        )
        .order_by(DoctorReferral.id)
    )
    return _run(db, stmt, "query_directory")


def search_directory(db: Session, term: str) -> list[DirectoryEntry]:
    """Free-text search over approved entries.

    Broader than the ``search`` filter option: the term is matched against
    the doctor name, office name, comments, address and the specialty.
    """

    if term is None or not term.strip():
        raise ValidationError("Search term is required", details={"field": "term"})

    alternatives: list[ColumnElement[bool]] = [
        _ilike(DoctorReferral.doctor_name, term),
        _ilike(Office.name, term),
        _ilike(DoctorReferral.comments, term),
        _ilike(DoctorReferral.address, term),
    ]
    doctor_types = matching_doctor_types(term)
    if doctor_types:
        alternatives.append(DoctorReferral.type.in_(doctor_types))

    stmt = (
        joined_referrals()
        .where(
            DoctorReferral.approval_status == ApprovalStatus.APPROVED,
            or_(*alternatives),
        )
        .order_by(DoctorReferral.id)
    )
    return _run(db, stmt, "search_directory")


def list_with_locations(db: Session) -> list[DirectoryEntry]:
    """Approved entries that carry an address, for the map view."""

    stmt = (
        joined_referrals()
        .where(
            DoctorReferral.approval_status == ApprovalStatus.APPROVED,
            DoctorReferral.address.is_not(None),
        )
        .order_by(DoctorReferral.id)
    )
    return _run(db, stmt, "list_with_locations")
