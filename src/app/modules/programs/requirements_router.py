"""
Program Certificate Requirements Router

Mounted under /programs/{program_id}/certificates.

Endpoints:
- GET / - Active requirements in display order (authenticated)
- POST / - Link a certificate type to the program (admin)
- GET /available - Certificate types not yet linked (admin)
- PUT /reorder - Apply new display orders, per item (admin)
- PUT /{requirement_id} - Update a requirement (admin)
- DELETE /{requirement_id} - Remove a requirement (admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.modules.programs import service
from app.modules.programs.schemas import (
    CertificateTypeResponse,
    MessageResponse,
    ReorderRequest,
    ReorderResponse,
    RequirementCreate,
    RequirementResponse,
    RequirementUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[RequirementResponse], summary="List Program Requirements")
async def list_requirements(
    program_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[RequirementResponse]:
    try:
        requirements = await service.list_requirements(db, program_id)
        return [RequirementResponse.model_validate(r) for r in requirements]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"listing requirements for program {program_id}")


@router.post(
    "",
    response_model=RequirementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Program Requirement",
    responses={409: {"description": "Certificate type already required"}},
)
async def add_requirement(
    program_id: UUID,
    data: RequirementCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> RequirementResponse:
    try:
        requirement = await service.add_requirement(db, actor, program_id, data)
        return RequirementResponse.model_validate(requirement)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"adding requirement to program {program_id}")


@router.get(
    "/available",
    response_model=list[CertificateTypeResponse],
    summary="Certificate Types Available To Add",
)
async def available_certificate_types(
    program_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[CertificateTypeResponse]:
    try:
        certificate_types = await service.get_unassigned_certificate_types(db, actor, program_id)
        return [CertificateTypeResponse.model_validate(c) for c in certificate_types]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"listing available certificate types for {program_id}")


@router.put("/reorder", response_model=ReorderResponse, summary="Reorder Requirements")
async def reorder_requirements(
    program_id: UUID,
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ReorderResponse:
    try:
        result = await service.reorder_requirements(db, actor, program_id, data.requirements)
        return ReorderResponse(
            requirements=[RequirementResponse.model_validate(r) for r in result["requirements"]],
            skipped=result["skipped"],
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"reordering requirements for program {program_id}")


@router.put(
    "/{requirement_id}",
    response_model=RequirementResponse,
    summary="Update Program Requirement",
)
async def update_requirement(
    program_id: UUID,
    requirement_id: UUID,
    data: RequirementUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> RequirementResponse:
    try:
        requirement = await service.update_requirement(db, actor, program_id, requirement_id, data)
        return RequirementResponse.model_validate(requirement)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"updating requirement {requirement_id}")


@router.delete(
    "/{requirement_id}",
    response_model=MessageResponse,
    summary="Remove Program Requirement",
)
async def delete_requirement(
    program_id: UUID,
    requirement_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_requirement(db, actor, program_id, requirement_id)
        return MessageResponse(message="Requirement removed")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"removing requirement {requirement_id}")
