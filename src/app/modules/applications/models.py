"""
Application Models

Student applications to academic programs and their append-only status
history. Applications are never hard-deleted.
"""

import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.modules.shared import BaseModel

if TYPE_CHECKING:
    from app.modules.programs.models import Program


class ApplicationStatus(str, enum.Enum):
    """Lifecycle status of an application."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    FROZEN = "frozen"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ReservationCategory(str, enum.Enum):
    """Reservation categories recognised on the application form."""

    OC = "OC"
    BC_A = "BC-A"
    BC_B = "BC-B"
    BC_C = "BC-C"
    BC_D = "BC-D"
    BC_E = "BC-E"
    SC = "SC"
    ST = "ST"
    EWS = "EWS"
    PH = "PH"


def _enum_values(e: type[enum.Enum]) -> list[str]:
    return [m.value for m in e]


class Application(BaseModel):
    """
    A student's application to a program for one academic year.

    The profile payload is presence-validated only. Nested sections
    (addresses, meeseva details, academic and study details) are stored as JSON.
    """

    __tablename__ = "applications"

    # Identity
    application_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    program_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("programs.id", ondelete="RESTRICT"),
        nullable=False,
    )
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)

    # Status
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status", values_callable=_enum_values),
        default=ApplicationStatus.DRAFT,
        nullable=False,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Personal details
    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    father_name: Mapped[str] = mapped_column(String(200), nullable=False)
    mother_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="gender", values_callable=_enum_values),
        nullable=False,
    )
    aadhar_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Contact
    mobile_number: Mapped[str] = mapped_column(String(20), nullable=False)
    parent_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    guardian_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Addresses: {door_no, street, village, mandal, district, pincode}
    present_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    permanent_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Category and reservation
    religion: Mapped[str | None] = mapped_column(String(100), nullable=True)
    caste: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reservation_category: Mapped[ReservationCategory] = mapped_column(
        Enum(ReservationCategory, name="reservation_category", values_callable=_enum_values),
        default=ReservationCategory.OC,
        nullable=False,
    )
    is_physically_handicapped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sadaram_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    identification_marks: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    special_reservation: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # {caste_certificate, income_certificate}
    meeseva_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ration_card_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Attachments (file_uploads references)
    photo_attachment_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("file_uploads.id", ondelete="SET NULL"),
        nullable=True,
    )
    signature_attachment_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("file_uploads.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Education
    academic_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # [{class_name, place_of_study, institution_name}]
    study_details: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    program: Mapped["Program"] = relationship("Program", lazy="joined")

    history: Mapped[list["ApplicationStatusHistory"]] = relationship(
        "ApplicationStatusHistory",
        back_populates="application",
        order_by="ApplicationStatusHistory.created_at.desc()",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "program_id",
            "academic_year",
            name="uq_applications_user_program_year",
        ),
        Index("ix_applications_status", "status"),
        Index("ix_applications_program_status", "program_id", "status"),
        Index("ix_applications_year_status", "academic_year", "status"),
        Index("ix_applications_program_year", "program_id", "academic_year"),
    )

    def __repr__(self) -> str:
        return f"<Application {self.application_number} ({self.status.value})>"


class ApplicationStatusHistory(Base):
    """
    Append-only status ledger.

    One row per accepted transition, including creation (from_status is
    null for the creation entry). Rows are never updated.
    """

    __tablename__ = "application_status_history"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    application_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    from_status: Mapped[ApplicationStatus | None] = mapped_column(
        Enum(ApplicationStatus, name="application_status", values_callable=_enum_values),
        nullable=True,
    )
    to_status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status", values_callable=_enum_values),
        nullable=False,
    )
    changed_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    application: Mapped["Application"] = relationship("Application", back_populates="history")

    __table_args__ = (Index("ix_application_status_history_application", "application_id"),)

    def __repr__(self) -> str:
        from_value = self.from_status.value if self.from_status else None
        return f"<ApplicationStatusHistory {from_value} -> {self.to_status.value}>"
