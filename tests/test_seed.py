from sqlalchemy import func, select

from doctor_directory.models import ApprovalStatus, DoctorReferral, Office
from doctor_directory.seed import OFFICES, REFERRALS, seed
from doctor_directory.services import list_pending, query_directory


def test_seed_is_idempotent(db):
    seed(db)
    seed(db)

    assert db.execute(select(func.count(Office.id))).scalar_one() == len(OFFICES)
    assert db.execute(select(func.count(DoctorReferral.id))).scalar_one() == len(REFERRALS)

    approved = [r for r in REFERRALS if r[-1] is ApprovalStatus.APPROVED]
    assert len(query_directory(db)) == len(approved)
    assert [entry.doctor_name for entry in list_pending(db)] == ["Dr. Sam Lee"]
