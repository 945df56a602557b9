"""
Program Catalog Service Layer

Business rules for programs, certificate types and the program requirement
catalog consumed by the document verification engine.

Uniqueness rules:
- program_code is unique across programs
- certificate type name is unique
- at most one requirement per (program, certificate type)

Reordering applies per item: requirements that do not belong to the program
are skipped and reported, the rest are updated.
"""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor
from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.core.permissions import Action, ensure_can
from app.modules.programs import repository
from app.modules.programs.models import (
    CertificateType,
    Program,
    ProgramCertificateRequirement,
    ProgramType,
)
from app.modules.programs.schemas import (
    CertificateTypeCreate,
    CertificateTypeUpdate,
    ProgramCreate,
    ProgramUpdate,
    ReorderItem,
    RequirementCreate,
    RequirementUpdate,
)

logger = logging.getLogger(__name__)


class ProgramNotFoundError(NotFoundError):
    def __init__(self, program_id: UUID | None = None):
        message = f"Program {program_id} not found" if program_id else "Program not found"
        super().__init__(message=message, error_code="PROGRAM_NOT_FOUND")


class DuplicateProgramCodeError(ConflictError):
    def __init__(self, program_code: str):
        super().__init__(
            message=f"Program with code '{program_code}' already exists",
            error_code="DUPLICATE_PROGRAM_CODE",
        )


class ProgramInUseError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Program still has applications and cannot be deleted",
            error_code="PROGRAM_IN_USE",
        )


class CertificateTypeNotFoundError(NotFoundError):
    def __init__(self, certificate_type_id: UUID | None = None):
        message = (
            f"Certificate type {certificate_type_id} not found"
            if certificate_type_id
            else "Certificate type not found"
        )
        super().__init__(message=message, error_code="CERTIFICATE_TYPE_NOT_FOUND")


class DuplicateCertificateTypeError(ConflictError):
    def __init__(self, name: str):
        super().__init__(
            message=f"Certificate type '{name}' already exists",
            error_code="DUPLICATE_CERTIFICATE_TYPE",
        )


class CertificateTypeInUseError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Certificate type is still used by submitted documents",
            error_code="CERTIFICATE_TYPE_IN_USE",
        )


class RequirementNotFoundError(NotFoundError):
    def __init__(self, requirement_id: UUID | None = None):
        message = (
            f"Requirement {requirement_id} not found" if requirement_id else "Requirement not found"
        )
        super().__init__(message=message, error_code="REQUIREMENT_NOT_FOUND")


class DuplicateRequirementError(ConflictError):
    def __init__(self):
        super().__init__(
            message="This certificate type is already required for this program",
            error_code="DUPLICATE_REQUIREMENT",
        )


class RequirementProgramMismatchError(InvalidArgumentError):
    def __init__(self):
        super().__init__(
            message="Requirement does not belong to this program",
            error_code="REQUIREMENT_PROGRAM_MISMATCH",
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
    return await repository.list_programs(db, program_type=program_type, is_active=is_active)


async def get_program(db: AsyncSession, program_id: UUID) -> Program:
    """
    Get a program by ID.

    Raises:
        ProgramNotFoundError: If the program doesn't exist
    """
    program = await repository.get_program(db, program_id)
    if not program:
        logger.warning(f"Program not found: {program_id}")
        raise ProgramNotFoundError(program_id)
    return program


async def create_program(db: AsyncSession, actor: Actor, data: ProgramCreate) -> Program:
    """
    Create a program.

    Raises:
        ForbiddenError: If the actor cannot manage programs
        DuplicateProgramCodeError: If program_code is taken
    """
    ensure_can(actor, Action.PROGRAM_MANAGE)

    if await repository.get_program_by_code(db, data.program_code):
        logger.warning(f"Duplicate program code: {data.program_code}")
        raise DuplicateProgramCodeError(data.program_code)

    program = await repository.create_program(db, data.model_dump())
    logger.info(f"Program {program.id} ({program.program_code}) created by {actor.id}")
    return program


async def update_program(
    db: AsyncSession, actor: Actor, program_id: UUID, data: ProgramUpdate
) -> Program:
    """
    Update the supplied fields of a program.

    Raises:
        ProgramNotFoundError: If the program doesn't exist
        DuplicateProgramCodeError: If the new program_code is taken
    """
    ensure_can(actor, Action.PROGRAM_MANAGE)
    program = await get_program(db, program_id)

    changes = data.model_dump(exclude_unset=True)
    new_code = changes.get("program_code")
    if new_code and new_code != program.program_code:
        if await repository.get_program_by_code(db, new_code):
            raise DuplicateProgramCodeError(new_code)

    program = await repository.update_program(db, program, changes)
    logger.info(f"Program {program_id} updated by {actor.id}: {sorted(changes)}")
    return program


async def delete_program(db: AsyncSession, actor: Actor, program_id: UUID) -> None:
    """
    Delete a program and its requirements.

    Raises:
        ProgramNotFoundError: If the program doesn't exist
        ProgramInUseError: If applications still reference it
    """
    ensure_can(actor, Action.PROGRAM_MANAGE)
    program = await get_program(db, program_id)
    try:
        await repository.delete_program(db, program)
    except IntegrityError:
        logger.warning(f"Program {program_id} still has applications, not deleted")
        raise ProgramInUseError() from None
    logger.info(f"Program {program_id} deleted by {actor.id}")


async def get_program_statistics(
    db: AsyncSession, actor: Actor, academic_year: str | None
) -> dict[str, Any]:
    """
    Per-program application counts for an academic year.

    Raises:
        InvalidArgumentError: If academic_year is missing
    """
    ensure_can(actor, Action.PROGRAM_MANAGE)

    if not academic_year:
        raise InvalidArgumentError("Academic year is required", error_code="ACADEMIC_YEAR_REQUIRED")

    rows = await repository.get_program_status_counts(db, academic_year)

    programs: dict[UUID, dict[str, Any]] = {}
    for program, status, count in rows:
        item = programs.setdefault(
            program.id,
            {
                "program_id": program.id,
                "program_code": program.program_code,
                "program_name": program.program_name,
                "total_seats": program.total_seats,
                "draft_applications": 0,
                "submitted_applications": 0,
                "under_review_applications": 0,
                "approved_applications": 0,
                "rejected_applications": 0,
                "total_applications": 0,
            },
        )
        if status is None:
            continue
        key = f"{status}_applications"
        if key in item:
            item[key] += count
        item["total_applications"] += count

    return {
        "academic_year": academic_year,
        "programs": list(programs.values()),
        "generated_at": datetime.now(UTC),
    }


# ============================================
# Certificate Types
# ============================================


async def list_certificate_types(
    db: AsyncSession, *, is_active: bool | None = True
) -> list[CertificateType]:
    return await repository.list_certificate_types(db, is_active=is_active)


async def get_certificate_type(db: AsyncSession, certificate_type_id: UUID) -> CertificateType:
    certificate_type = await repository.get_certificate_type(db, certificate_type_id)
    if not certificate_type:
        raise CertificateTypeNotFoundError(certificate_type_id)
    return certificate_type


async def create_certificate_type(
    db: AsyncSession, actor: Actor, data: CertificateTypeCreate
) -> CertificateType:
    """
    Create a certificate type.

    Raises:
        DuplicateCertificateTypeError: If the name is taken
    """
    ensure_can(actor, Action.CERTIFICATE_TYPE_MANAGE)

    if await repository.get_certificate_type_by_name(db, data.name):
        raise DuplicateCertificateTypeError(data.name)

    certificate_type = await repository.create_certificate_type(db, data.model_dump())
    logger.info(f"Certificate type {certificate_type.id} ({certificate_type.name}) created")
    return certificate_type


async def update_certificate_type(
    db: AsyncSession, actor: Actor, certificate_type_id: UUID, data: CertificateTypeUpdate
) -> CertificateType:
    ensure_can(actor, Action.CERTIFICATE_TYPE_MANAGE)
    certificate_type = await get_certificate_type(db, certificate_type_id)

    changes = data.model_dump(exclude_unset=True)
    new_name = changes.get("name")
    if new_name and new_name != certificate_type.name:
        if await repository.get_certificate_type_by_name(db, new_name):
            raise DuplicateCertificateTypeError(new_name)

    return await repository.update_certificate_type(db, certificate_type, changes)


async def delete_certificate_type(
    db: AsyncSession, actor: Actor, certificate_type_id: UUID
) -> None:
    ensure_can(actor, Action.CERTIFICATE_TYPE_MANAGE)
    certificate_type = await get_certificate_type(db, certificate_type_id)
    try:
        await repository.delete_certificate_type(db, certificate_type)
    except IntegrityError:
        logger.warning(f"Certificate type {certificate_type_id} is still in use, not deleted")
        raise CertificateTypeInUseError() from None
    logger.info(f"Certificate type {certificate_type_id} deleted by {actor.id}")


# ============================================
# Program Certificate Requirements
# ============================================


async def _get_program_requirement(
    db: AsyncSession, program_id: UUID, requirement_id: UUID
) -> ProgramCertificateRequirement:
    requirement = await repository.get_requirement(db, requirement_id)
    if not requirement:
        raise RequirementNotFoundError(requirement_id)
    if requirement.program_id != program_id:
        logger.warning(f"Requirement {requirement_id} does not belong to program {program_id}")
        raise RequirementProgramMismatchError()
    return requirement


async def list_requirements(
    db: AsyncSession, program_id: UUID
) -> list[ProgramCertificateRequirement]:
    """
    List a program's active requirements in display order.

    Raises:
        ProgramNotFoundError: If the program doesn't exist
    """
    await get_program(db, program_id)
    return await repository.list_requirements(db, program_id)


async def add_requirement(
    db: AsyncSession, actor: Actor, program_id: UUID, data: RequirementCreate
) -> ProgramCertificateRequirement:
    """
    Link a certificate type to a program.

    Raises:
        ProgramNotFoundError: If the program doesn't exist
        CertificateTypeNotFoundError: If the certificate type doesn't exist
        DuplicateRequirementError: If the pair is already linked
    """
    ensure_can(actor, Action.REQUIREMENT_MANAGE)

    await get_program(db, program_id)
    await get_certificate_type(db, data.certificate_type_id)

    existing = await repository.get_requirement_for_certificate(
        db, program_id, data.certificate_type_id, active_only=False
    )
    if existing:
        raise DuplicateRequirementError()

    requirement = await repository.create_requirement(
        db,
        {
            "program_id": program_id,
            "certificate_type_id": data.certificate_type_id,
            "is_required": data.is_required,
            "special_instructions": data.special_instructions,
            "display_order": data.display_order,
        },
    )
    logger.info(
        f"Requirement {requirement.id} added to program {program_id} "
        f"(certificate type {data.certificate_type_id})"
    )
    return requirement


async def update_requirement(
    db: AsyncSession,
    actor: Actor,
    program_id: UUID,
    requirement_id: UUID,
    data: RequirementUpdate,
) -> ProgramCertificateRequirement:
    """
    Update is_required, special_instructions or display_order.

    Raises:
        RequirementNotFoundError: If the requirement doesn't exist
        RequirementProgramMismatchError: If it belongs to another program
    """
    ensure_can(actor, Action.REQUIREMENT_MANAGE)
    requirement = await _get_program_requirement(db, program_id, requirement_id)
    return await repository.update_requirement(
        db, requirement, data.model_dump(exclude_unset=True)
    )


async def delete_requirement(
    db: AsyncSession, actor: Actor, program_id: UUID, requirement_id: UUID
) -> None:
    ensure_can(actor, Action.REQUIREMENT_MANAGE)
    requirement = await _get_program_requirement(db, program_id, requirement_id)
    await repository.delete_requirement(db, requirement)
    logger.info(f"Requirement {requirement_id} removed from program {program_id}")


async def get_unassigned_certificate_types(
    db: AsyncSession, actor: Actor, program_id: UUID
) -> list[CertificateType]:
    """Active certificate types that can still be added to the program."""
    ensure_can(actor, Action.REQUIREMENT_MANAGE)
    await get_program(db, program_id)
    return await repository.list_unassigned_certificate_types(db, program_id)


async def reorder_requirements(
    db: AsyncSession, actor: Actor, program_id: UUID, items: list[ReorderItem]
) -> dict[str, Any]:
    """
    Apply new display orders item by item.

    Items that don't exist or belong to another program are skipped; earlier
    updates are kept when a later item fails.

    Returns:
        Dict with the program's requirements after reordering and the
        ids that were skipped
    """
    ensure_can(actor, Action.REQUIREMENT_MANAGE)
    await get_program(db, program_id)

    skipped: list[UUID] = []
    for item in items:
        requirement = await repository.get_requirement(db, item.id)
        if not requirement or requirement.program_id != program_id:
            logger.warning(f"Skipping reorder of requirement {item.id} for program {program_id}")
            skipped.append(item.id)
            continue
        await repository.update_requirement(db, requirement, {"display_order": item.display_order})

    requirements = await repository.list_requirements(db, program_id)
    logger.info(
        f"Reordered {len(items) - len(skipped)} requirements for program {program_id}, "
        f"skipped {len(skipped)}"
    )
    return {"requirements": requirements, "skipped": skipped}
