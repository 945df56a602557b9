"""
Program Catalog Models

Programs, certificate types, and the per-program certificate requirements
that define which documents an application must carry.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.modules.shared import BaseModel


class ProgramType(str, enum.Enum):
    """Kinds of academic programs."""

    UG = "UG"
    PG = "PG"
    DIPLOMA = "Diploma"
    CERTIFICATE = "Certificate"


class Program(BaseModel):
    """An academic program that students apply to."""

    __tablename__ = "programs"

    program_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    program_name: Mapped[str] = mapped_column(String(200), nullable=False)
    program_type: Mapped[ProgramType] = mapped_column(
        Enum(ProgramType, name="program_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    duration_years: Mapped[int] = mapped_column(Integer, nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    application_start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    application_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # No FK: users.program_id already references programs
    program_admin_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    eligibility_criteria: Mapped[str | None] = mapped_column(Text, nullable=True)
    fees_structure: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    requirements: Mapped[list["ProgramCertificateRequirement"]] = relationship(
        "ProgramCertificateRequirement",
        back_populates="program",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_programs_active_order", "is_active", "display_order"),
        Index("ix_programs_program_type", "program_type"),
    )


class CertificateType(BaseModel):
    """A named document category with its upload policy."""

    __tablename__ = "certificate_types"

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_types_allowed: Mapped[str] = mapped_column(
        String(200), nullable=False, default="pdf,jpg,jpeg,png"
    )
    max_file_size_mb: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_certificate_types_active_order", "is_active", "display_order"),)


class ProgramCertificateRequirement(BaseModel):
    """Links a program to a certificate type it requires."""

    __tablename__ = "program_certificate_requirements"

    program_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
    )
    certificate_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("certificate_types.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    program: Mapped["Program"] = relationship("Program", back_populates="requirements")
    certificate_type: Mapped["CertificateType"] = relationship("CertificateType", lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "program_id",
            "certificate_type_id",
            name="uq_program_certificate_requirements_program_certificate",
        ),
        Index("ix_program_certificate_requirements_program_order", "program_id", "display_order"),
    )
