"""
Program Catalog Repository

Database operations for programs, certificate types and program certificate
requirements. Only data access lives here; rules live in the service layer.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.applications.models import Application
from app.modules.programs.models import (
    CertificateType,
    Program,
    ProgramCertificateRequirement,
    ProgramType,
)

# ============================================
# Programs
# ============================================


async def list_programs(
    db: AsyncSession,
    *,
    program_type: ProgramType | None = None,
    is_active: bool | None = True,
) -> list[Program]:
    """List programs ordered by display_order then name."""
    query = select(Program)
    if program_type is not None:
        query = query.where(Program.program_type == program_type)
    if is_active is not None:
        query = query.where(Program.is_active == is_active)

    result = await db.execute(query.order_by(Program.display_order, Program.program_name))
    return list(result.scalars().all())


async def get_program(db: AsyncSession, program_id: UUID) -> Program | None:
    """Get program by ID."""
    return await db.get(Program, program_id)


async def get_program_by_code(db: AsyncSession, program_code: str) -> Program | None:
    result = await db.execute(select(Program).where(Program.program_code == program_code))
    return result.scalar_one_or_none()


async def create_program(db: AsyncSession, values: dict[str, Any]) -> Program:
    """Create a new program."""
    program = Program(**values)
    db.add(program)
    await db.commit()
    await db.refresh(program)
    return program


async def update_program(db: AsyncSession, program: Program, changes: dict[str, Any]) -> Program:
    """Apply field changes to a program."""
    for field, value in changes.items():
        setattr(program, field, value)
    await db.commit()
    await db.refresh(program)
    return program


async def delete_program(db: AsyncSession, program: Program) -> None:
    """
    Raises:
        IntegrityError: If applications still reference the program
    """
    await db.delete(program)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise


async def get_program_status_counts(
    db: AsyncSession, academic_year: str
) -> list[tuple[Program, str | None, int]]:
    """
    Count applications per status for every active program in a year.

    Programs without applications appear once with a None status and zero count.

    Returns:
        List of (program, status value or None, count) rows
    """
    query = (
        select(Program, Application.status, func.count(Application.id))
        .outerjoin(
            Application,
            and_(
                Application.program_id == Program.id,
                Application.academic_year == academic_year,
            ),
        )
        .where(Program.is_active == True)  # noqa: E712
        .group_by(Program.id, Application.status)
        .order_by(Program.display_order, Program.program_name)
    )
    result = await db.execute(query)
    return [
        (program, status.value if status is not None else None, count)
        for program, status, count in result.all()
    ]


# ============================================
# Certificate Types
# ============================================


async def list_certificate_types(
    db: AsyncSession, *, is_active: bool | None = True
) -> list[CertificateType]:
    """List certificate types ordered by display_order then name."""
    query = select(CertificateType)
    if is_active is not None:
        query = query.where(CertificateType.is_active == is_active)
    result = await db.execute(query.order_by(CertificateType.display_order, CertificateType.name))
    return list(result.scalars().all())


async def get_certificate_type(
    db: AsyncSession, certificate_type_id: UUID
) -> CertificateType | None:
    return await db.get(CertificateType, certificate_type_id)


async def get_certificate_type_by_name(db: AsyncSession, name: str) -> CertificateType | None:
    result = await db.execute(select(CertificateType).where(CertificateType.name == name))
    return result.scalar_one_or_none()


async def create_certificate_type(db: AsyncSession, values: dict[str, Any]) -> CertificateType:
    certificate_type = CertificateType(**values)
    db.add(certificate_type)
    await db.commit()
    await db.refresh(certificate_type)
    return certificate_type


async def update_certificate_type(
    db: AsyncSession, certificate_type: CertificateType, changes: dict[str, Any]
) -> CertificateType:
    for field, value in changes.items():
        setattr(certificate_type, field, value)
    await db.commit()
    await db.refresh(certificate_type)
    return certificate_type


async def delete_certificate_type(db: AsyncSession, certificate_type: CertificateType) -> None:
    """
    Raises:
        IntegrityError: If documents still reference the certificate type
    """
    await db.delete(certificate_type)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise


# ============================================
# Program Certificate Requirements
# ============================================


async def list_requirements(
    db: AsyncSession,
    program_id: UUID,
    *,
    required_only: bool = False,
) -> list[ProgramCertificateRequirement]:
    """
    List the active requirements of a program ordered by display_order.

    Args:
        db: Database session
        program_id: Program UUID
        required_only: Restrict to requirements with is_required = True

    Returns:
        Requirements with their certificate type loaded
    """
    query = select(ProgramCertificateRequirement).where(
        ProgramCertificateRequirement.program_id == program_id,
        ProgramCertificateRequirement.is_active == True,  # noqa: E712
    )
    if required_only:
        query = query.where(ProgramCertificateRequirement.is_required == True)  # noqa: E712

    result = await db.execute(query.order_by(ProgramCertificateRequirement.display_order))
    return list(result.scalars().unique().all())


async def get_requirement(
    db: AsyncSession, requirement_id: UUID
) -> ProgramCertificateRequirement | None:
    return await db.get(ProgramCertificateRequirement, requirement_id)


async def get_requirement_for_certificate(
    db: AsyncSession,
    program_id: UUID,
    certificate_type_id: UUID,
    *,
    active_only: bool = True,
) -> ProgramCertificateRequirement | None:
    """Get the requirement linking a program to a certificate type."""
    query = select(ProgramCertificateRequirement).where(
        ProgramCertificateRequirement.program_id == program_id,
        ProgramCertificateRequirement.certificate_type_id == certificate_type_id,
    )
    if active_only:
        query = query.where(ProgramCertificateRequirement.is_active == True)  # noqa: E712

    result = await db.execute(query)
    return result.unique().scalar_one_or_none()


async def create_requirement(
    db: AsyncSession, values: dict[str, Any]
) -> ProgramCertificateRequirement:
    requirement = ProgramCertificateRequirement(**values)
    db.add(requirement)
    await db.commit()
    await db.refresh(requirement)
    return requirement


async def update_requirement(
    db: AsyncSession,
    requirement: ProgramCertificateRequirement,
    changes: dict[str, Any],
) -> ProgramCertificateRequirement:
    for field, value in changes.items():
        setattr(requirement, field, value)
    await db.commit()
    await db.refresh(requirement)
    return requirement


async def delete_requirement(db: AsyncSession, requirement: ProgramCertificateRequirement) -> None:
    await db.delete(requirement)
    await db.commit()


async def list_unassigned_certificate_types(
    db: AsyncSession, program_id: UUID
) -> list[CertificateType]:
    """
    List active certificate types not yet linked to a program.

    Returns:
        Certificate types ordered by display_order then name
    """
    linked = select(ProgramCertificateRequirement.certificate_type_id).where(
        ProgramCertificateRequirement.program_id == program_id
    )
    result = await db.execute(
        select(CertificateType)
        .where(
            CertificateType.is_active == True,  # noqa: E712
            CertificateType.id.not_in(linked),
        )
        .order_by(CertificateType.display_order, CertificateType.name)
    )
    return list(result.scalars().all())
