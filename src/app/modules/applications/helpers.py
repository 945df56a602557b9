"""
Applications Shared Helpers

Field filtering, required-field checks and application numbering used by
the lifecycle service and the bulk update path.
"""

from datetime import datetime
from typing import Any

from app.core.auth import Actor
from app.modules.applications.models import Application
from app.modules.users.models import UserRole

# Required on create and re-checked on submit, with the message shown when missing
REQUIRED_FIELDS: dict[str, str] = {
    "program_id": "Program is required",
    "academic_year": "Academic year is required",
    "student_name": "Student name is required",
    "father_name": "Father name is required",
    "mother_name": "Mother name is required",
    "date_of_birth": "Date of birth is required",
    "gender": "Gender is required",
    "mobile_number": "Mobile number is required",
    "email": "Email is required",
}

# Never writable through an update, whoever the caller is
IMMUTABLE_FIELDS = frozenset({"application_number", "user_id"})

# Dropped from a student's update in addition to IMMUTABLE_FIELDS
STUDENT_PROTECTED_FIELDS = frozenset(
    {
        "status",
        "submitted_at",
        "reviewed_by",
        "reviewed_at",
        "program_id",
        "academic_year",
        "approval_comments",
    }
)

# Columns that cannot hold null; a null in a payload leaves them unchanged
NON_NULLABLE_FIELDS = frozenset(REQUIRED_FIELDS) | {
    "reservation_category",
    "is_physically_handicapped",
}

# Keys accepted by the bulk update
BULK_UPDATE_FIELDS = frozenset({"status", "academic_year"})

# Whitelisted sort fields for listing
SORT_FIELDS = frozenset(
    {
        "created_at",
        "updated_at",
        "status",
        "student_name",
        "submitted_at",
        "application_number",
    }
)
DEFAULT_SORT_FIELD = "created_at"


def filter_update_fields(actor: Actor, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Drop the fields the actor may not write.

    Students lose every lifecycle and identity field; staff lose only the
    application number and owner. Dropped fields are ignored silently.

    Args:
        actor: The caller
        changes: Supplied update fields

    Returns:
        The subset of changes the actor may apply
    """
    blocked = IMMUTABLE_FIELDS
    if actor.role == UserRole.STUDENT:
        blocked = blocked | STUDENT_PROTECTED_FIELDS
    return {field: value for field, value in changes.items() if field not in blocked}


def missing_required_fields(values: dict[str, Any] | Application) -> list[str]:
    """
    List the messages of required fields that are absent or empty.

    Accepts either a dict of field values or an Application instance.
    """
    if isinstance(values, dict):
        get = values.get
    else:

        def get(field: str) -> Any:
            return getattr(values, field, None)

    missing = []
    for field, message in REQUIRED_FIELDS.items():
        value = get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(message)
    return missing


def format_application_number(created_on: datetime, sequence: int) -> str:
    """APP + two-digit year + six-digit zero-padded sequence, e.g. APP25000042."""
    return f"APP{created_on.year % 100:02d}{sequence:06d}"


def normalize_sort(sort_field: str | None, sort_order: str | None) -> tuple[str, str]:
    """Fall back to created_at / desc for unknown sort fields and orders."""
    field = sort_field if sort_field in SORT_FIELDS else DEFAULT_SORT_FIELD
    order = "asc" if (sort_order or "").lower() == "asc" else "desc"
    return field, order


def clean_profile_payload(values: dict[str, Any]) -> dict[str, Any]:
    """
    Normalise nested profile sections before they are stored.

    Nulls for mandatory columns are dropped. Blank identification marks and
    empty study detail rows are removed.
    """
    cleaned = {
        field: value
        for field, value in values.items()
        if value is not None or field not in NON_NULLABLE_FIELDS
    }

    marks = cleaned.get("identification_marks")
    if marks is not None:
        cleaned["identification_marks"] = [m.strip() for m in marks if m and m.strip()]

    studies = cleaned.get("study_details")
    if studies is not None:
        cleaned["study_details"] = [
            s
            for s in studies
            if s.get("class_name") or s.get("place_of_study") or s.get("institution_name")
        ]
    return cleaned
