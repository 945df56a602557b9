"""
Application Document Models

Links an application to the file submitted for one certificate type, along
with its verification sub-state.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.modules.shared import BaseModel

if TYPE_CHECKING:
    from app.modules.files.models import FileUpload
    from app.modules.programs.models import CertificateType


class ApplicationDocument(BaseModel):
    """
    A document submitted for one certificate type of an application.

    At most one document per (application, certificate type). Replacing the
    file resets is_verified, verified_by, verified_at and verification_remarks.
    """

    __tablename__ = "application_documents"

    application_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    certificate_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("certificate_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    file_upload_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("file_uploads.id", ondelete="RESTRICT"),
        nullable=False,
    )
    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Verification
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verification_remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    certificate_type: Mapped["CertificateType"] = relationship("CertificateType", lazy="joined")
    file_upload: Mapped["FileUpload"] = relationship("FileUpload", lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "application_id",
            "certificate_type_id",
            name="uq_application_documents_application_certificate",
        ),
        Index("ix_application_documents_application", "application_id"),
    )

    def reset_verification(self) -> None:
        self.is_verified = False
        self.verified_by = None
        self.verified_at = None
        self.verification_remarks = None

    def __repr__(self) -> str:
        return f"<ApplicationDocument {self.document_name} verified={self.is_verified}>"
