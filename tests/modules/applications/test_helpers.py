"""
Unit tests for applications helpers.
"""

from datetime import UTC, datetime
from uuid import uuid4

from app.modules.applications.helpers import (
    clean_profile_payload,
    filter_update_fields,
    format_application_number,
    missing_required_fields,
    normalize_sort,
)


class TestFilterUpdateFields:
    """Tests for role-based update filtering."""

    def test_student_loses_lifecycle_fields(self, student):
        changes = {
            "student_name": "New Name",
            "status": "approved",
            "program_id": uuid4(),
            "academic_year": "2030-31",
            "approval_comments": "self approved",
            "reviewed_by": uuid4(),
            "reviewed_at": datetime.now(UTC),
            "submitted_at": datetime.now(UTC),
            "application_number": "APP99999999",
            "user_id": uuid4(),
        }

        result = filter_update_fields(student, changes)

        assert result == {"student_name": "New Name"}

    def test_staff_keep_lifecycle_fields_but_not_identity(self, admin):
        program_id = uuid4()
        changes = {
            "status": "approved",
            "program_id": program_id,
            "application_number": "APP99999999",
            "user_id": uuid4(),
        }

        result = filter_update_fields(admin, changes)

        assert result == {"status": "approved", "program_id": program_id}

    def test_program_admin_treated_as_staff(self, program_admin):
        result = filter_update_fields(program_admin, {"academic_year": "2026-27"})
        assert result == {"academic_year": "2026-27"}


class TestMissingRequiredFields:
    """Tests for required-field presence checks."""

    def test_complete_payload_has_nothing_missing(self, sample_application_create):
        assert missing_required_fields(sample_application_create.model_dump()) == []

    def test_blank_strings_count_as_missing(self, sample_application_create):
        values = sample_application_create.model_dump()
        values["student_name"] = "   "
        values["email"] = None

        missing = missing_required_fields(values)

        assert missing == ["Student name is required", "Email is required"]

    def test_accepts_model_instances(self, sample_application_model):
        sample_application_model.father_name = ""
        assert missing_required_fields(sample_application_model) == ["Father name is required"]


class TestFormatApplicationNumber:
    def test_year_and_padded_sequence(self):
        assert format_application_number(datetime(2025, 7, 1), 42) == "APP25000042"

    def test_year_wraps_to_two_digits(self):
        assert format_application_number(datetime(2100, 1, 1), 1) == "APP00000001"


class TestNormalizeSort:
    def test_whitelisted_field_kept(self):
        assert normalize_sort("student_name", "asc") == ("student_name", "asc")

    def test_unknown_field_falls_back_to_created_at(self):
        assert normalize_sort("password", "asc") == ("created_at", "asc")

    def test_unknown_order_falls_back_to_desc(self):
        assert normalize_sort(None, "sideways") == ("created_at", "desc")


class TestCleanProfilePayload:
    def test_drops_blank_identification_marks(self):
        result = clean_profile_payload({"identification_marks": [" scar ", "", "  "]})
        assert result["identification_marks"] == ["scar"]

    def test_drops_empty_study_rows(self):
        rows = [
            {"class_name": "", "place_of_study": "", "institution_name": ""},
            {"class_name": "10th", "place_of_study": "Guntur", "institution_name": ""},
        ]
        result = clean_profile_payload({"study_details": rows})
        assert result["study_details"] == [rows[1]]

    def test_null_for_mandatory_column_is_dropped(self):
        result = clean_profile_payload(
            {"student_name": None, "is_physically_handicapped": None, "religion": None}
        )
        assert result == {"religion": None}
