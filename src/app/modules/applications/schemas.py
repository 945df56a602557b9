"""
Application Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.modules.applications.models import (
    ApplicationStatus,
    Gender,
    ReservationCategory,
)
from app.modules.programs.models import ProgramType

# ============================================
# Nested profile sections
# ============================================


class Address(BaseModel):
    door_no: str = ""
    street: str = ""
    village: str = ""
    mandal: str = ""
    district: str = ""
    pincode: str = ""


class MeesevaDetails(BaseModel):
    caste_certificate: str = ""
    income_certificate: str = ""


class AcademicDetails(BaseModel):
    """Intermediate (qualifying exam) details."""

    inter_board: str = ""
    inter_hall_ticket_number: str = ""
    ssc_hall_ticket_number: str = ""
    inter_pass_year: int | None = None
    inter_passout_type: str = ""
    bridge_course: str = ""
    inter_course_name: str = ""
    inter_medium: str = ""
    inter_second_language: str = ""
    inter_marks_secured: int | None = Field(None, ge=0)
    inter_maximum_marks: int | None = Field(None, ge=0)
    inter_languages_total: int | None = Field(None, ge=0)
    inter_languages_percentage: float | None = Field(None, ge=0, le=100)
    inter_group_subjects_percentage: float | None = Field(None, ge=0, le=100)
    inter_college_name: str = ""


class StudyDetail(BaseModel):
    class_name: str = ""
    place_of_study: str = ""
    institution_name: str = ""


# ============================================
# Requests
# ============================================


class ApplicationProfile(BaseModel):
    """Optional profile fields shared by create and update."""

    aadhar_number: str | None = Field(None, max_length=20)
    parent_mobile: str | None = Field(None, max_length=20)
    guardian_mobile: str | None = Field(None, max_length=20)
    present_address: Address | None = None
    permanent_address: Address | None = None
    religion: str | None = Field(None, max_length=100)
    caste: str | None = Field(None, max_length=100)
    is_physically_handicapped: bool | None = None
    sadaram_number: str | None = Field(None, max_length=50)
    identification_marks: list[str] | None = None
    special_reservation: str | None = Field(None, max_length=200)
    meeseva_details: MeesevaDetails | None = None
    ration_card_number: str | None = Field(None, max_length=50)
    photo_attachment_id: UUID | None = None
    signature_attachment_id: UUID | None = None
    academic_details: AcademicDetails | None = None
    study_details: list[StudyDetail] | None = None


class ApplicationCreate(ApplicationProfile):
    """Request body for POST /applications."""

    program_id: UUID
    academic_year: str = Field(..., min_length=1, max_length=20)
    student_name: str = Field(..., min_length=1, max_length=200)
    father_name: str = Field(..., min_length=1, max_length=200)
    mother_name: str = Field(..., min_length=1, max_length=200)
    date_of_birth: date
    gender: Gender
    mobile_number: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    reservation_category: ReservationCategory = ReservationCategory.OC


class ApplicationUpdate(ApplicationProfile):
    """
    Request body for PUT /applications/{id}.

    Only supplied fields change. Fields the caller may not set are dropped
    by the service, not rejected.
    """

    model_config = ConfigDict(extra="ignore")

    student_name: str | None = Field(None, min_length=1, max_length=200)
    father_name: str | None = Field(None, min_length=1, max_length=200)
    mother_name: str | None = Field(None, min_length=1, max_length=200)
    date_of_birth: date | None = None
    gender: Gender | None = None
    mobile_number: str | None = Field(None, min_length=1, max_length=20)
    email: EmailStr | None = None
    reservation_category: ReservationCategory | None = None

    # Staff-only fields
    program_id: UUID | None = None
    academic_year: str | None = Field(None, min_length=1, max_length=20)
    status: ApplicationStatus | None = None
    approval_comments: str | None = None
    remarks: str | None = Field(None, description="History remarks when status changes")

    # Never writable through this endpoint
    application_number: str | None = None
    user_id: UUID | None = None
    submitted_at: datetime | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None


class StatusChangeRequest(BaseModel):
    """Request body for PUT /applications/{id}/status."""

    status: ApplicationStatus
    remarks: str | None = Field(None, max_length=2000)
    approval_comments: str | None = None


class BulkUpdateRequest(BaseModel):
    """Request body for PUT /applications/bulk."""

    application_ids: list[UUID] = Field(..., min_length=1)
    updates: dict[str, Any] = Field(..., description="Allowed keys: status, academic_year")
    remarks: str | None = Field(None, max_length=2000)


# ============================================
# Responses
# ============================================


class ProgramSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_code: str
    program_name: str
    department: str
    program_type: ProgramType


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_number: str
    user_id: UUID
    program_id: UUID
    program: ProgramSummary | None = None
    academic_year: str
    status: ApplicationStatus
    submitted_at: datetime | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    approval_comments: str | None = None

    student_name: str
    father_name: str
    mother_name: str
    date_of_birth: date
    gender: Gender
    aadhar_number: str | None = None
    mobile_number: str
    parent_mobile: str | None = None
    guardian_mobile: str | None = None
    email: str
    present_address: dict[str, Any] | None = None
    permanent_address: dict[str, Any] | None = None
    religion: str | None = None
    caste: str | None = None
    reservation_category: ReservationCategory
    is_physically_handicapped: bool
    sadaram_number: str | None = None
    identification_marks: list[str] | None = None
    special_reservation: str | None = None
    meeseva_details: dict[str, Any] | None = None
    ration_card_number: str | None = None
    photo_attachment_id: UUID | None = None
    signature_attachment_id: UUID | None = None
    academic_details: dict[str, Any] | None = None
    study_details: list[dict[str, Any]] | None = None

    created_at: datetime
    updated_at: datetime


class ApplicationPermissions(BaseModel):
    can_edit: bool
    can_submit: bool
    can_review: bool


class ApplicationDetailResponse(ApplicationResponse):
    """Single application with the caller's permissions on it."""

    permissions: ApplicationPermissions


class FilterApplied(BaseModel):
    status: ApplicationStatus | None = None
    program_id: UUID | None = None
    academic_year: str | None = None
    search: str | None = None


class SortApplied(BaseModel):
    field: str
    order: str


class UserInfo(BaseModel):
    role: str
    can_create_new: bool
    can_bulk_edit: bool


class ApplicationListResponse(BaseModel):
    """Paginated application listing."""

    docs: list[ApplicationResponse]
    total_docs: int
    limit: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None = None
    prev_page: int | None = None
    filter_applied: FilterApplied
    sort_applied: SortApplied
    user_info: UserInfo


class StatusHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: UUID
    from_status: ApplicationStatus | None = None
    to_status: ApplicationStatus
    changed_by: UUID
    remarks: str | None = None
    created_at: datetime


class ProgramStatusStats(BaseModel):
    program_id: UUID
    program_name: str
    department: str
    total_applications: int = 0
    draft_applications: int = 0
    submitted_applications: int = 0
    under_review_applications: int = 0
    approved_applications: int = 0
    rejected_applications: int = 0
    cancelled_applications: int = 0
    frozen_applications: int = 0


class MonthlyCount(BaseModel):
    month: int = Field(..., ge=1, le=12)
    count: int


class StatisticsFilters(BaseModel):
    academic_year: str
    program_id: UUID | None = None


class ApplicationStatisticsResponse(BaseModel):
    total_applications: int
    status_stats: dict[str, int]
    program_stats: list[ProgramStatusStats]
    monthly_stats: list[MonthlyCount]
    generated_at: datetime
    filters: StatisticsFilters


class BulkUpdateFailure(BaseModel):
    id: UUID
    error: str
    message: str


class BulkUpdateResponse(BaseModel):
    message: str
    updated: list[UUID]
    failed: list[BulkUpdateFailure]
