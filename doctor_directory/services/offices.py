"""Registry of the medical offices referrals attach to."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from doctor_directory.core.exceptions import NotFoundError, ValidationError
from doctor_directory.models import Office
from doctor_directory.services.store import store_errors

logger = logging.getLogger(__name__)


def create_office(db: Session, name: str) -> Office:
    """Persist a new office. Duplicate names are allowed."""

    if not name or not name.strip():
        raise ValidationError("Office name is required", details={"field": "name"})

    with store_errors("create_office"):
        office = Office(name=name)
        db.add(office)
        db.flush()

    logger.info("office created", extra={"office_id": office.id})
    return office


def list_offices(db: Session) -> list[Office]:
    """Return every office in creation order."""

    with store_errors("list_offices"):
        stmt = select(Office).order_by(Office.created_at, Office.id)
        return list(db.execute(stmt).scalars().all())


def get_office(db: Session, office_id: int) -> Office:
    with store_errors("get_office"):
        office = db.get(Office, office_id)
    if office is None:
        raise NotFoundError("Office", office_id)
    return office
