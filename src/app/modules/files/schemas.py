"""
File Upload Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FileRegister(BaseModel):
    """
    Request body for POST /files.

    Registers a file already written to storage. file_path defaults to
    <storage_root>/<filename>.
    """

    filename: str = Field(..., min_length=1, max_length=255)
    original_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., gt=0)
    mime_type: str | None = Field(None, max_length=100)
    file_path: str | None = Field(None, max_length=1000)
    description: str | None = Field(None, max_length=2000)


class FileVerifyRequest(BaseModel):
    is_verified: bool = True


class FileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str | None = None
    description: str | None = None
    uploaded_by: UUID | None = None
    is_verified: bool
    verified_by: UUID | None = None
    verified_at: datetime | None = None
    created_at: datetime


class FileSummary(BaseModel):
    """File fields embedded in document responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    original_name: str
    file_size: int
    mime_type: str | None = None
    created_at: datetime


class FileListResponse(BaseModel):
    docs: list[FileResponse]
    total_docs: int
    limit: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None = None
    prev_page: int | None = None


class MessageResponse(BaseModel):
    message: str
