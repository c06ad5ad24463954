import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from doctor_directory.db.base import Base
from doctor_directory.db.session import get_db
from doctor_directory.main import app
from doctor_directory.models import ApprovalStatus
from doctor_directory.services import create_office, review_referral, submit_referral


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def office(db):
    return create_office(db, "Test Medical Center")


@pytest.fixture
def referral_data(office):
    def build(**overrides):
        data = {
            "office_id": office.id,
            "doctor_name": "Dr. Jane Smith",
            "type": "general_practitioner",
            "address": "123 Main St",
            "phone_number": "555-0123",
            "gender": "female",
            "online_appointments": True,
            "url": "https://example.com",
            "wait_time": "within_week",
            "same_day_service": False,
            "comments": "Great doctor",
            "submitted_by": "user123",
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def make_referral(db, referral_data):
    def create(decision: ApprovalStatus | None = None, **overrides):
        referral = submit_referral(db, referral_data(**overrides))
        if decision is not None:
            referral = review_referral(db, referral.id, decision, "admin")
        return referral

    return create
