from datetime import timedelta

from doctor_directory.jobs import tasks
from doctor_directory.models import ApprovalStatus
from doctor_directory.models.base import utcnow


def test_report_pending_backlog_counts_stale_referrals(db, session_factory, make_referral, monkeypatch):
    stale = make_referral(doctor_name="Dr. Stale")
    make_referral(doctor_name="Dr. Fresh")
    reviewed = make_referral(doctor_name="Dr. Done", decision=ApprovalStatus.REJECTED)
    stale.created_at = utcnow() - timedelta(hours=10)
    reviewed.created_at = utcnow() - timedelta(hours=10)
    db.commit()
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)

    result = tasks.report_pending_backlog(max_age_hours=2)

    assert result["pending_over_threshold"] == 1
    assert "cutoff" in result


def test_report_pending_backlog_empty_queue(session_factory, monkeypatch):
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)

    result = tasks.report_pending_backlog()

    assert result["pending_over_threshold"] == 0
