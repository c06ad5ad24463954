"""Service layer for the doctor directory."""

from doctor_directory.services.directory import (
    list_with_locations,
    query_directory,
    search_directory,
)
from doctor_directory.services.moderation import (
    ReviewOutcome,
    apply_review,
    count_pending_older_than,
    list_pending,
    review_referral,
    submit_referral,
)
from doctor_directory.services.offices import create_office, get_office, list_offices

__all__ = [
    "ReviewOutcome",
    "apply_review",
    "count_pending_older_than",
    "create_office",
    "get_office",
    "list_offices",
    "list_pending",
    "list_with_locations",
    "query_directory",
    "review_referral",
    "search_directory",
    "submit_referral",
]
