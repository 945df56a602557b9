"""initial admissions schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-17 09:00:00.000000

This migration creates:
1. Program catalog: programs, certificate_types, program_certificate_requirements
2. Identity directory: users (role and program scope)
3. File references: file_uploads
4. Applications with their status history and documents
5. In-app notifications

Enum types are created explicitly with checkfirst and referenced with
create_type=False so tables sharing a type don't try to create it twice.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7c1d2e3f4a5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


program_type_enum = postgresql.ENUM(
    "UG", "PG", "Diploma", "Certificate", name="program_type", create_type=False
)
# Stored by member name (the model maps UserRole without values_callable)
user_role_enum = postgresql.ENUM(
    "ADMIN", "PROGRAM_ADMIN", "STUDENT", name="user_role", create_type=False
)
application_status_enum = postgresql.ENUM(
    "draft",
    "submitted",
    "under_review",
    "approved",
    "rejected",
    "cancelled",
    "frozen",
    name="application_status",
    create_type=False,
)
gender_enum = postgresql.ENUM("Male", "Female", "Other", name="gender", create_type=False)
reservation_category_enum = postgresql.ENUM(
    "OC",
    "BC-A",
    "BC-B",
    "BC-C",
    "BC-D",
    "BC-E",
    "SC",
    "ST",
    "EWS",
    "PH",
    name="reservation_category",
    create_type=False,
)
notification_type_enum = postgresql.ENUM(
    "info", "success", "warning", "danger", name="notification_type", create_type=False
)

ENUMS = (
    program_type_enum,
    user_role_enum,
    application_status_enum,
    gender_enum,
    reservation_category_enum,
    notification_type_enum,
)


def _id_and_timestamps() -> list[sa.Column]:
    """Primary key and audit columns (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the admissions schema."""
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    # Program catalog
    op.create_table(
        "programs",
        *_id_and_timestamps(),
        sa.Column("program_code", sa.String(length=50), nullable=False),
        sa.Column("program_name", sa.String(length=200), nullable=False),
        sa.Column("program_type", program_type_enum, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("duration_years", sa.Integer(), nullable=False),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("application_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("application_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("program_admin_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("eligibility_criteria", sa.Text(), nullable=True),
        sa.Column("fees_structure", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("program_code"),
    )
    op.create_index(
        "ix_programs_active_order", "programs", ["is_active", "display_order"], unique=False
    )
    op.create_index("ix_programs_program_type", "programs", ["program_type"], unique=False)

    op.create_table(
        "certificate_types",
        *_id_and_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_types_allowed", sa.String(length=200), nullable=False),
        sa.Column("max_file_size_mb", sa.Integer(), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(
        "ix_certificate_types_active_order",
        "certificate_types",
        ["is_active", "display_order"],
        unique=False,
    )

    op.create_table(
        "program_certificate_requirements",
        *_id_and_timestamps(),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("certificate_type_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("special_instructions", sa.Text(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["certificate_type_id"], ["certificate_types.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint(
            "program_id",
            "certificate_type_id",
            name="uq_program_certificate_requirements_program_certificate",
        ),
    )
    op.create_index(
        "ix_program_certificate_requirements_program_order",
        "program_certificate_requirements",
        ["program_id", "display_order"],
        unique=False,
    )

    # Identity directory
    op.create_table(
        "users",
        *_id_and_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], ondelete="SET NULL"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_program_id"), "users", ["program_id"], unique=False)

    # File references
    op.create_table(
        "file_uploads",
        *_id_and_timestamps(),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=1000), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("verified_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["verified_by"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index(
        "ix_file_uploads_uploaded_by_created",
        "file_uploads",
        ["uploaded_by", "created_at"],
        unique=False,
    )

    # Applications
    op.create_table(
        "applications",
        *_id_and_timestamps(),
        sa.Column("application_number", sa.String(length=20), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column(
            "status", application_status_enum, nullable=False, server_default="draft"
        ),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_comments", sa.Text(), nullable=True),
        # Personal details
        sa.Column("student_name", sa.String(length=200), nullable=False),
        sa.Column("father_name", sa.String(length=200), nullable=False),
        sa.Column("mother_name", sa.String(length=200), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", gender_enum, nullable=False),
        sa.Column("aadhar_number", sa.String(length=20), nullable=True),
        # Contact
        sa.Column("mobile_number", sa.String(length=20), nullable=False),
        sa.Column("parent_mobile", sa.String(length=20), nullable=True),
        sa.Column("guardian_mobile", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("present_address", sa.JSON(), nullable=True),
        sa.Column("permanent_address", sa.JSON(), nullable=True),
        # Category and reservation
        sa.Column("religion", sa.String(length=100), nullable=True),
        sa.Column("caste", sa.String(length=100), nullable=True),
        sa.Column(
            "reservation_category",
            reservation_category_enum,
            nullable=False,
            server_default="OC",
        ),
        sa.Column(
            "is_physically_handicapped", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("sadaram_number", sa.String(length=50), nullable=True),
        sa.Column("identification_marks", sa.JSON(), nullable=True),
        sa.Column("special_reservation", sa.String(length=200), nullable=True),
        sa.Column("meeseva_details", sa.JSON(), nullable=True),
        sa.Column("ration_card_number", sa.String(length=50), nullable=True),
        # Attachments
        sa.Column("photo_attachment_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("signature_attachment_id", postgresql.UUID(as_uuid=True), nullable=True),
        # Education
        sa.Column("academic_details", sa.JSON(), nullable=True),
        sa.Column("study_details", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
        sa.UniqueConstraint(
            "user_id", "program_id", "academic_year", name="uq_applications_user_program_year"
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["photo_attachment_id"], ["file_uploads.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["signature_attachment_id"], ["file_uploads.id"], ondelete="SET NULL"
        ),
    )
    op.create_index("ix_applications_status", "applications", ["status"], unique=False)
    op.create_index(
        "ix_applications_program_status", "applications", ["program_id", "status"], unique=False
    )
    op.create_index(
        "ix_applications_year_status", "applications", ["academic_year", "status"], unique=False
    )
    op.create_index(
        "ix_applications_program_year",
        "applications",
        ["program_id", "academic_year"],
        unique=False,
    )

    op.create_table(
        "application_status_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("application_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("from_status", application_status_enum, nullable=True),
        sa.Column("to_status", application_status_enum, nullable=False),
        sa.Column("changed_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["changed_by"], ["users.id"], ondelete="RESTRICT"),
    )
    op.create_index(
        "ix_application_status_history_application",
        "application_status_history",
        ["application_id"],
        unique=False,
    )

    op.create_table(
        "application_documents",
        *_id_and_timestamps(),
        sa.Column("application_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("certificate_type_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_upload_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("document_name", sa.String(length=255), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("verified_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_remarks", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["certificate_type_id"], ["certificate_types.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(["file_upload_id"], ["file_uploads.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["verified_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint(
            "application_id",
            "certificate_type_id",
            name="uq_application_documents_application_certificate",
        ),
    )
    op.create_index(
        "ix_application_documents_application",
        "application_documents",
        ["application_id"],
        unique=False,
    )

    # Notifications
    op.create_table(
        "notifications",
        *_id_and_timestamps(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False, server_default="info"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("action_url", sa.String(length=500), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_notifications_user_read", "notifications", ["user_id", "is_read"], unique=False
    )
    op.create_index(
        "ix_notifications_user_created", "notifications", ["user_id", "created_at"], unique=False
    )
    op.create_index("ix_notifications_expires_at", "notifications", ["expires_at"], unique=False)


def downgrade() -> None:
    """Drop the admissions schema."""
    op.drop_table("notifications")
    op.drop_table("application_documents")
    op.drop_table("application_status_history")
    op.drop_table("applications")
    op.drop_table("file_uploads")
    op.drop_table("users")
    op.drop_table("program_certificate_requirements")
    op.drop_table("certificate_types")
    op.drop_table("programs")

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
