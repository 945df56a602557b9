"""
Application Document Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.modules.files.schemas import FileSummary
from app.modules.programs.schemas import CertificateTypeSummary


class DocumentCreate(BaseModel):
    """Request body for POST /applications/{application_id}/documents."""

    certificate_type_id: UUID
    file_upload_id: UUID
    document_name: str | None = Field(None, max_length=255)
    remarks: str | None = Field(None, max_length=2000)


class DocumentUpdate(BaseModel):
    """
    Request body for PUT .../documents/{document_id}.

    Students may change document_name, remarks and file_upload_id; the
    verification fields are staff-only and dropped for students.
    """

    document_name: str | None = Field(None, min_length=1, max_length=255)
    remarks: str | None = Field(None, max_length=2000)
    file_upload_id: UUID | None = None
    is_verified: bool | None = None
    verification_remarks: str | None = Field(None, max_length=2000)


class DocumentVerifyRequest(BaseModel):
    is_verified: bool
    verification_remarks: str | None = Field(None, max_length=2000)


class VerifierSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: UUID
    certificate_type_id: UUID
    file_upload_id: UUID
    document_name: str
    remarks: str | None = None
    is_verified: bool
    verified_by: UUID | None = None
    verified_at: datetime | None = None
    verification_remarks: str | None = None
    certificate_type: CertificateTypeSummary | None = None
    file_upload: FileSummary | None = None
    verifier: VerifierSummary | None = None
    created_at: datetime
    updated_at: datetime


class MissingDocument(BaseModel):
    requirement_id: UUID
    certificate_type_id: UUID
    name: str
    description: str | None = None
    special_instructions: str | None = None


class VerificationStatusResponse(BaseModel):
    """Completeness and verification report for one application."""

    total_required: int
    total_submitted: int
    total_verified: int
    missing_documents: list[MissingDocument]
    unverified_documents: list[DocumentResponse]
    verified_documents: list[DocumentResponse]
    completion_percentage: int
    verification_percentage: int


class AvailableCertificateType(BaseModel):
    """An active program requirement and whether a document already covers it."""

    requirement_id: UUID
    certificate_type: CertificateTypeSummary
    is_required: bool
    special_instructions: str | None = None
    display_order: int
    has_document: bool


class MessageResponse(BaseModel):
    message: str
