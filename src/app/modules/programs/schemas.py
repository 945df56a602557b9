"""
Program Catalog Schemas

Pydantic schemas for programs, certificate types and program requirements.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.modules.programs.models import ProgramType

# ============================================
# Programs
# ============================================


class ProgramBase(BaseModel):
    program_name: str = Field(..., min_length=1, max_length=200)
    program_type: ProgramType
    department: str = Field(..., min_length=1, max_length=200)
    duration_years: int = Field(..., ge=1, le=10)
    total_seats: int = Field(0, ge=0)
    application_start_date: datetime | None = None
    application_end_date: datetime | None = None
    program_admin_id: UUID | None = None
    eligibility_criteria: str | None = None
    fees_structure: str | None = None
    description: str | None = None
    is_active: bool = True
    display_order: int = 0


class ProgramCreate(ProgramBase):
    """Request body for POST /programs."""

    program_code: str = Field(..., min_length=1, max_length=50)

    @model_validator(mode="after")
    def validate_application_window(self) -> "ProgramCreate":
        if (
            self.application_start_date
            and self.application_end_date
            and self.application_end_date < self.application_start_date
        ):
            raise ValueError("application_end_date cannot be before application_start_date")
        return self


class ProgramUpdate(BaseModel):
    """Request body for PUT /programs/{id}. Only supplied fields change."""

    program_code: str | None = Field(None, min_length=1, max_length=50)
    program_name: str | None = Field(None, min_length=1, max_length=200)
    program_type: ProgramType | None = None
    department: str | None = Field(None, min_length=1, max_length=200)
    duration_years: int | None = Field(None, ge=1, le=10)
    total_seats: int | None = Field(None, ge=0)
    application_start_date: datetime | None = None
    application_end_date: datetime | None = None
    program_admin_id: UUID | None = None
    eligibility_criteria: str | None = None
    fees_structure: str | None = None
    description: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class ProgramResponse(ProgramBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_code: str
    created_at: datetime
    updated_at: datetime


class ProgramStatisticsItem(BaseModel):
    """Per-program application counts for one academic year."""

    program_id: UUID
    program_code: str
    program_name: str
    total_seats: int
    draft_applications: int = 0
    submitted_applications: int = 0
    under_review_applications: int = 0
    approved_applications: int = 0
    rejected_applications: int = 0
    total_applications: int = 0


# ============================================
# Certificate Types
# ============================================


class CertificateTypeBase(BaseModel):
    description: str | None = None
    file_types_allowed: str = Field("pdf,jpg,jpeg,png", min_length=1, max_length=200)
    max_file_size_mb: int = Field(5, ge=1, le=100)
    is_required: bool = True
    display_order: int = 0
    is_active: bool = True


class CertificateTypeCreate(CertificateTypeBase):
    """Request body for POST /certificate-types."""

    name: str = Field(..., min_length=1, max_length=200)


class CertificateTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    file_types_allowed: str | None = Field(None, min_length=1, max_length=200)
    max_file_size_mb: int | None = Field(None, ge=1, le=100)
    is_required: bool | None = None
    display_order: int | None = None
    is_active: bool | None = None


class CertificateTypeResponse(CertificateTypeBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class CertificateTypeSummary(BaseModel):
    """Certificate type fields embedded in requirement and document responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    file_types_allowed: str
    max_file_size_mb: int


# ============================================
# Program Certificate Requirements
# ============================================


class RequirementCreate(BaseModel):
    """Request body for POST /programs/{program_id}/certificates."""

    certificate_type_id: UUID
    is_required: bool = True
    special_instructions: str | None = Field(None, max_length=2000)
    display_order: int = 0


class RequirementUpdate(BaseModel):
    """Request body for PUT /programs/{program_id}/certificates/{requirement_id}."""

    is_required: bool | None = None
    special_instructions: str | None = Field(None, max_length=2000)
    display_order: int | None = None


class RequirementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_id: UUID
    certificate_type_id: UUID
    is_required: bool
    special_instructions: str | None = None
    display_order: int
    is_active: bool
    certificate_type: CertificateTypeSummary | None = None
    created_at: datetime
    updated_at: datetime


class ReorderItem(BaseModel):
    id: UUID
    display_order: int


class ReorderRequest(BaseModel):
    """Request body for PUT /programs/{program_id}/certificates/reorder."""

    requirements: list[ReorderItem] = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class ReorderResponse(BaseModel):
    requirements: list[RequirementResponse]
    skipped: list[UUID] = []


class ProgramStatisticsResponse(BaseModel):
    academic_year: str
    programs: list[ProgramStatisticsItem]
    generated_at: datetime
