"""
Programs Router

Endpoints:
- GET /programs - List programs (public)
- GET /programs/statistics - Per-program application counts (admin)
- GET /programs/{id} - Program details (public)
- POST /programs - Create program (admin)
- PUT /programs/{id} - Update program (admin)
- DELETE /programs/{id} - Delete program (admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.modules.programs import service
from app.modules.programs.models import ProgramType
from app.modules.programs.schemas import (
    MessageResponse,
    ProgramCreate,
    ProgramResponse,
    ProgramStatisticsResponse,
    ProgramUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[ProgramResponse], summary="List Programs")
async def list_programs(
    program_type: ProgramType | None = Query(None, description="Filter by program type"),
    is_active: bool | None = Query(True, description="Filter by active flag"),
    db: AsyncSession = Depends(get_db),
) -> list[ProgramResponse]:
    """List programs ordered by display order then name. Public."""
    try:
        programs = await service.list_programs(db, program_type=program_type, is_active=is_active)
        return [ProgramResponse.model_validate(p) for p in programs]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "listing programs")


@router.get(
    "/statistics",
    response_model=ProgramStatisticsResponse,
    summary="Program Application Statistics",
)
async def program_statistics(
    academic_year: str | None = Query(None, description="Academic year, e.g. 2025-26"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ProgramStatisticsResponse:
    """Application counts per status for every active program in a year. Admin only."""
    try:
        result = await service.get_program_statistics(db, actor, academic_year)
        return ProgramStatisticsResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "computing program statistics")


@router.get("/{program_id}", response_model=ProgramResponse, summary="Get Program")
async def get_program(
    program_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ProgramResponse:
    try:
        program = await service.get_program(db, program_id)
        return ProgramResponse.model_validate(program)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"getting program {program_id}")


@router.post(
    "",
    response_model=ProgramResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Program",
    responses={409: {"description": "Program code already exists"}},
)
async def create_program(
    data: ProgramCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ProgramResponse:
    try:
        program = await service.create_program(db, actor, data)
        return ProgramResponse.model_validate(program)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "creating program")


@router.put("/{program_id}", response_model=ProgramResponse, summary="Update Program")
async def update_program(
    program_id: UUID,
    data: ProgramUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ProgramResponse:
    try:
        program = await service.update_program(db, actor, program_id, data)
        return ProgramResponse.model_validate(program)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"updating program {program_id}")


@router.delete("/{program_id}", response_model=MessageResponse, summary="Delete Program")
async def delete_program(
    program_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_program(db, actor, program_id)
        return MessageResponse(message="Program removed")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"deleting program {program_id}")
