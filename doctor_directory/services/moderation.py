"""Referral submission and the approval state machine.

A referral enters as ``pending``. A review moves it to ``approved`` or
``rejected`` from whatever state it is in; nothing moves it back to
``pending``. ``approved_by`` is set exactly when the status is not
``pending``, and ``apply_review``/``initial_review_state`` are the only
places that decide those two fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from prometheus_client import Counter
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from doctor_directory.core.exceptions import NotFoundError, ValidationError
from doctor_directory.models import ApprovalStatus, DoctorReferral
from doctor_directory.models.base import utcnow
from doctor_directory.schemas import DirectoryEntry, ReferralSubmission, parse_payload
from doctor_directory.services.directory import joined_referrals, to_entries
from doctor_directory.services.offices import get_office
from doctor_directory.services.store import store_errors

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})

REFERRALS_SUBMITTED = Counter(
    "doctor_directory_referrals_submitted_total",
    "Total number of referrals submitted for moderation.",
)
REFERRAL_REVIEWS = Counter(
    "doctor_directory_referral_reviews_total",
    "Total number of moderation decisions recorded.",
    ["decision"],
)


@dataclass(frozen=True)
class ReviewOutcome:
    """Moderation fields of a referral after a transition."""

    approval_status: ApprovalStatus
    approved_by: str | None
    previous_status: ApprovalStatus | None = None

    @property
    def is_rereview(self) -> bool:
        return self.previous_status not in (None, ApprovalStatus.PENDING)


def initial_review_state() -> ReviewOutcome:
    return ReviewOutcome(approval_status=ApprovalStatus.PENDING, approved_by=None)


def apply_review(
    current: ApprovalStatus,
    decision: ApprovalStatus | str,
    reviewer: str,
) -> ReviewOutcome:
    """Compute the moderation fields produced by reviewing a referral.

    Any current state may be reviewed again; the latest decision wins.
    """

    try:
        status = ApprovalStatus(decision)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown review decision {decision!r}", details={"field": "approval_status"}
        ) from exc
    if status not in REVIEW_DECISIONS:
        raise ValidationError(
            "A review must approve or reject the referral",
            details={"field": "approval_status"},
        )
    if not reviewer or not reviewer.strip():
        raise ValidationError("Reviewer is required", details={"field": "approved_by"})

    return ReviewOutcome(
        approval_status=status, approved_by=reviewer, previous_status=current
    )


def submit_referral(
    db: Session, payload: ReferralSubmission | Mapping[str, Any]
) -> DoctorReferral:
    """Create a pending referral for an existing office."""

    submission = parse_payload(ReferralSubmission, payload)
    initial = initial_review_state()

    get_office(db, submission.office_id)
    with store_errors("submit_referral"):
        referral = DoctorReferral(
            **submission.model_dump(),
            approval_status=initial.approval_status,
            approved_by=initial.approved_by,
        )
        db.add(referral)
        db.flush()

    REFERRALS_SUBMITTED.inc()
    logger.info(
        "referral submitted",
        extra={"referral_id": referral.id, "office_id": referral.office_id},
    )
    return referral


def review_referral(
    db: Session,
    referral_id: int,
    decision: ApprovalStatus | str,
    reviewer: str,
) -> DoctorReferral:
    """Approve or reject a referral, returning the updated row."""

    with store_errors("review_referral"):
        stmt = (
            select(DoctorReferral)
            .where(DoctorReferral.id == referral_id)
            .with_for_update()
        )
        referral = db.execute(stmt).scalars().first()
        if referral is None:
            raise NotFoundError("Referral", referral_id)

        outcome = apply_review(referral.approval_status, decision, reviewer)
        referral.approval_status = outcome.approval_status
        referral.approved_by = outcome.approved_by
        # set explicitly: an identical re-review changes no other column
        referral.updated_at = utcnow()
        db.flush()

    REFERRAL_REVIEWS.labels(decision=outcome.approval_status.value).inc()
    logger.info(
        "referral reviewed",
        extra={
            "referral_id": referral.id,
            "decision": outcome.approval_status.value,
            "previous_status": outcome.previous_status.value
            if outcome.previous_status
            else None,
            "rereview": outcome.is_rereview,
        },
    )
    return referral


def list_pending(db: Session) -> list[DirectoryEntry]:
    """Pending referrals with their office name, newest submission first."""

    stmt = (
        joined_referrals()
        .where(DoctorReferral.approval_status == ApprovalStatus.PENDING)
        .order_by(DoctorReferral.created_at.desc(), DoctorReferral.id.desc())
    )
    with store_errors("list_pending"):
        return to_entries(db.execute(stmt).scalars().unique().all())


def count_pending_older_than(db: Session, cutoff: datetime) -> int:
    """Number of referrals still pending that were submitted before ``cutoff``."""

    stmt = select(func.count(DoctorReferral.id)).where(
        DoctorReferral.approval_status == ApprovalStatus.PENDING,
        DoctorReferral.created_at < cutoff,
    )
    with store_errors("count_pending_older_than"):
        return int(db.execute(stmt).scalar_one())
