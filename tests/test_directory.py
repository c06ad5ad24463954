import pytest

from doctor_directory.core.exceptions import ValidationError
from doctor_directory.models import ApprovalStatus, DoctorType
from doctor_directory.schemas import DirectoryFilter
from doctor_directory.services import (
    create_office,
    list_pending,
    list_with_locations,
    query_directory,
    review_referral,
    search_directory,
    submit_referral,
)

APPROVED = ApprovalStatus.APPROVED
REJECTED = ApprovalStatus.REJECTED


def ids(entries):
    return sorted(entry.id for entry in entries)


def test_moderation_to_directory_walkthrough(db, referral_data):
    referral = submit_referral(db, referral_data())
    assert referral.approval_status is ApprovalStatus.PENDING
    assert [entry.id for entry in list_pending(db)] == [referral.id]
    assert query_directory(db, {"type": "general_practitioner"}) == []

    review_referral(db, referral.id, APPROVED, "admin")

    results = query_directory(db, {"type": "general_practitioner"})
    assert len(results) == 1
    assert results[0].id == referral.id
    assert results[0].doctor_name == "Dr. Jane Smith"
    assert results[0].office_name == "Test Medical Center"
    assert results[0].approved_by == "admin"
    assert list_pending(db) == []


def test_no_filter_returns_every_approved_entry(db, make_referral):
    approved = [make_referral(decision=APPROVED, doctor_name=f"Dr. {n}") for n in "AB"]
    make_referral(doctor_name="Dr. Pending")
    make_referral(decision=REJECTED, doctor_name="Dr. Rejected")

    assert ids(query_directory(db)) == sorted(r.id for r in approved)
    assert ids(query_directory(db, {})) == sorted(r.id for r in approved)
    assert ids(query_directory(db, DirectoryFilter())) == sorted(r.id for r in approved)


def test_rejected_referral_never_visible(db, make_referral):
    rejected = make_referral(
        decision=REJECTED,
        doctor_name="Dr. Hidden",
        comments="heart specialist",
        address="1 Hidden Rd",
    )

    assert rejected.id not in ids(query_directory(db, {"doctor_name": "Hidden"}))
    assert rejected.id not in ids(search_directory(db, "heart"))
    assert rejected.id not in ids(list_with_locations(db))


def test_rejecting_approved_referral_removes_it(db, make_referral):
    referral = make_referral(decision=APPROVED)
    assert ids(query_directory(db)) == [referral.id]

    review_referral(db, referral.id, REJECTED, "admin")

    assert query_directory(db) == []


def test_doctor_name_filter_is_case_insensitive_substring(db, make_referral):
    smith = make_referral(decision=APPROVED, doctor_name="Dr. John Smith")
    make_referral(decision=APPROVED, doctor_name="Dr. Alice Brown")

    assert ids(query_directory(db, {"doctor_name": "SMITH"})) == [smith.id]
    assert ids(query_directory(db, {"doctor_name": "ohn sm"})) == [smith.id]


def test_exact_filters(db, make_referral):
    dentist = make_referral(
        decision=APPROVED,
        doctor_name="Dr. Tooth",
        type="dentist",
        gender="male",
        wait_time="same_day",
        online_appointments=False,
        same_day_service=True,
    )
    gp = make_referral(decision=APPROVED)

    assert ids(query_directory(db, {"type": "dentist"})) == [dentist.id]
    assert ids(query_directory(db, {"gender": "female"})) == [gp.id]
    assert ids(query_directory(db, {"wait_time": "same_day"})) == [dentist.id]
    assert ids(query_directory(db, {"online_appointments": True})) == [gp.id]
    assert ids(query_directory(db, {"online_appointments": False})) == [dentist.id]
    assert ids(query_directory(db, {"same_day_service": True})) == [dentist.id]


def test_office_filter(db, office, make_referral):
    other_office = create_office(db, "Uptown Clinic")
    here = make_referral(decision=APPROVED)
    there = make_referral(decision=APPROVED, office_id=other_office.id)

    assert ids(query_directory(db, {"office_id": office.id})) == [here.id]
    assert ids(query_directory(db, {"office_id": other_office.id})) == [there.id]


def test_filters_combine_conjunctively(db, make_referral):
    match = make_referral(
        decision=APPROVED, doctor_name="Dr. Match", type="cardiologist", gender="male"
    )
    make_referral(decision=APPROVED, doctor_name="Dr. Wrong Type", type="dentist", gender="male")
    make_referral(
        decision=APPROVED, doctor_name="Dr. Wrong Gender", type="cardiologist", gender="female"
    )

    results = query_directory(db, {"type": "cardiologist", "gender": "male"})

    assert ids(results) == [match.id]
    assert query_directory(db, {"type": "cardiologist", "doctor_name": "Wrong Type"}) == []


def test_search_option_matches_doctor_or_office_name(db, make_referral):
    cardiology = create_office(db, "Cardiology Specialists")
    by_office = make_referral(decision=APPROVED, office_id=cardiology.id, doctor_name="Dr. Doe")
    by_name = make_referral(decision=APPROVED, doctor_name="Dr. Cardio Kid")
    make_referral(decision=APPROVED, doctor_name="Dr. Other", comments="cardiology fan")

    results = query_directory(db, {"search": "cardio"})

    assert ids(results) == sorted([by_office.id, by_name.id])


def test_search_option_combines_with_other_filters(db, make_referral):
    cardiology = create_office(db, "Cardiology Specialists")
    make_referral(decision=APPROVED, office_id=cardiology.id, type="dentist")
    wanted = make_referral(decision=APPROVED, office_id=cardiology.id, type="cardiologist")

    results = query_directory(db, {"search": "cardiology", "type": "cardiologist"})

    assert ids(results) == [wanted.id]


def test_invalid_filter_value_is_rejected(db):
    with pytest.raises(ValidationError):
        query_directory(db, {"gender": "unknown"})


def test_search_directory_matches_comments_only_when_approved(db, make_referral):
    approved = make_referral(decision=APPROVED, comments="Wonderful with HEART patients")
    make_referral(comments="heart pending")

    results = search_directory(db, "heart")

    assert ids(results) == [approved.id]


def test_search_directory_covers_address_and_office(db, make_referral):
    by_address = make_referral(decision=APPROVED, doctor_name="Dr. A", address="77 Elm Street")
    results = search_directory(db, "elm street")
    assert ids(results) == [by_address.id]

    assert by_address.id in ids(search_directory(db, "medical center"))


def test_search_directory_matches_specialty_value_and_label(db, make_referral):
    obgyn = make_referral(decision=APPROVED, doctor_name="Dr. B", type="obgyn", comments=None)
    gp = make_referral(decision=APPROVED, doctor_name="Dr. C", comments=None)

    assert ids(search_directory(db, "OB/GYN")) == [obgyn.id]
    assert ids(search_directory(db, "general_practitioner")) == [gp.id]
    assert ids(search_directory(db, "General Practitioner")) == [gp.id]


@pytest.mark.parametrize("term", ["", "   "])
def test_search_directory_requires_term(db, term):
    with pytest.raises(ValidationError):
        search_directory(db, term)


def test_search_terms_are_matched_literally(db, make_referral):
    make_referral(decision=APPROVED, doctor_name="Dr. Plain", comments="nothing special")
    percent = make_referral(decision=APPROVED, doctor_name="Dr. Percent", comments="100% great")

    assert ids(search_directory(db, "%")) == [percent.id]
    assert query_directory(db, {"doctor_name": "_"}) == []


def test_list_with_locations_requires_address(db, make_referral):
    located = make_referral(decision=APPROVED, address="5 Map Lane")
    make_referral(decision=APPROVED, doctor_name="Dr. Nowhere", address=None)
    make_referral(doctor_name="Dr. Pending", address="9 Pending Rd")

    results = list_with_locations(db)

    assert ids(results) == [located.id]
    assert all(entry.address is not None for entry in results)
    assert set(ids(results)) <= set(ids(query_directory(db)))
    assert results[0].approval_status is APPROVED
    assert results[0].type is DoctorType.GENERAL_PRACTITIONER


def test_search_term_is_matched_as_typed(db, make_referral):
    leading = make_referral(decision=APPROVED, doctor_name="Dr. Smith Jones")
    make_referral(decision=APPROVED, doctor_name="Dr. John Smith")

    assert ids(search_directory(db, "Smith ")) == [leading.id]
    assert ids(query_directory(db, {"search": "Smith "})) == [leading.id]
