from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from doctor_directory.db.session import SessionLocal
from doctor_directory.logging_utils import configure_logging
from doctor_directory.models import (
    ApprovalStatus,
    DoctorReferral,
    DoctorType,
    Gender,
    Office,
    WaitTime,
)
from doctor_directory.services import create_office, review_referral, submit_referral

logger = logging.getLogger(__name__)

SEED_REVIEWER = "seed"

OFFICES: list[str] = [
    "Downtown Medical Center",
    "Riverside Family Clinic",
    "Northside Specialists",
]

# (office, doctor, type, gender, wait time, address, comments, decision)
REFERRALS: list[
    tuple[str, str, DoctorType, Gender, WaitTime, str | None, str | None, ApprovalStatus | None]
] = [
    (
        "Downtown Medical Center",
        "Dr. Jane Smith",
        DoctorType.GENERAL_PRACTITIONER,
        Gender.FEMALE,
        WaitTime.WITHIN_WEEK,
        "100 Main St",
        "Listens carefully and explains everything.",
        ApprovalStatus.APPROVED,
    ),
    (
        "Northside Specialists",
        "Dr. Omar Haddad",
        DoctorType.CARDIOLOGIST,
        Gender.MALE,
        WaitTime.WITHIN_MONTH,
        "42 North Ave",
        "Great with heart conditions.",
        ApprovalStatus.APPROVED,
    ),
    (
        "Riverside Family Clinic",
        "Dr. Sam Lee",
        DoctorType.PEDIATRICIAN,
        Gender.NON_BINARY,
        WaitTime.SAME_DAY,
        None,
        None,
        None,
    ),
]


def ensure_offices(session: Session) -> dict[str, Office]:
    offices: dict[str, Office] = {}
    created = 0
    for name in OFFICES:
        office = (
            session.execute(select(Office).where(Office.name == name).limit(1))
            .scalars()
            .first()
        )
        if not office:
            office = create_office(session, name)
            created += 1
        offices[name] = office

    logger.info("ensured offices", extra={"created": created, "total": len(offices)})
    return offices


def ensure_referrals(session: Session, offices: dict[str, Office]) -> list[DoctorReferral]:
    created = 0
    referrals: list[DoctorReferral] = []
    for office_name, doctor, doctor_type, gender, wait_time, address, comments, decision in REFERRALS:
        office = offices[office_name]
        referral = (
            session.execute(
                select(DoctorReferral).where(
                    DoctorReferral.office_id == office.id,
                    DoctorReferral.doctor_name == doctor,
                )
            )
            .scalars()
            .first()
        )
        if not referral:
            referral = submit_referral(
                session,
                {
                    "office_id": office.id,
                    "doctor_name": doctor,
                    "type": doctor_type,
                    "gender": gender,
                    "wait_time": wait_time,
                    "address": address,
                    "comments": comments,
                    "submitted_by": SEED_REVIEWER,
                },
            )
            if decision is not None:
                referral = review_referral(session, referral.id, decision, SEED_REVIEWER)
            created += 1
        referrals.append(referral)

    logger.info(
        "ensured referrals", extra={"created": created, "total": len(referrals)}
    )
    return referrals


def seed(session: Session | None = None) -> None:
    configure_logging()
    logger.info("starting seed process")

    owns_session = session is None
    if session is None:
        session = SessionLocal()
    try:
        offices = ensure_offices(session)
        ensure_referrals(session, offices)
        session.commit()
        logger.info("seed complete")
    except Exception:
        session.rollback()
        logger.exception("seed failed")
        raise
    finally:
        if owns_session:
            session.close()


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    seed()
