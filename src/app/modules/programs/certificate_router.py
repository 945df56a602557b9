"""
Certificate Types Router

Endpoints:
- GET /certificate-types - List certificate types (public)
- GET /certificate-types/{id} - Certificate type details (public)
- POST /certificate-types - Create (admin)
- PUT /certificate-types/{id} - Update (admin)
- DELETE /certificate-types/{id} - Delete (admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.modules.programs import service
from app.modules.programs.schemas import (
    CertificateTypeCreate,
    CertificateTypeResponse,
    CertificateTypeUpdate,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[CertificateTypeResponse], summary="List Certificate Types")
async def list_certificate_types(
    is_active: bool | None = Query(True, description="Filter by active flag"),
    db: AsyncSession = Depends(get_db),
) -> list[CertificateTypeResponse]:
    try:
        certificate_types = await service.list_certificate_types(db, is_active=is_active)
        return [CertificateTypeResponse.model_validate(c) for c in certificate_types]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "listing certificate types")


@router.get(
    "/{certificate_type_id}",
    response_model=CertificateTypeResponse,
    summary="Get Certificate Type",
)
async def get_certificate_type(
    certificate_type_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CertificateTypeResponse:
    try:
        certificate_type = await service.get_certificate_type(db, certificate_type_id)
        return CertificateTypeResponse.model_validate(certificate_type)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"getting certificate type {certificate_type_id}")


@router.post(
    "",
    response_model=CertificateTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Certificate Type",
    responses={409: {"description": "Certificate type name already exists"}},
)
async def create_certificate_type(
    data: CertificateTypeCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CertificateTypeResponse:
    try:
        certificate_type = await service.create_certificate_type(db, actor, data)
        return CertificateTypeResponse.model_validate(certificate_type)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "creating certificate type")


@router.put(
    "/{certificate_type_id}",
    response_model=CertificateTypeResponse,
    summary="Update Certificate Type",
)
async def update_certificate_type(
    certificate_type_id: UUID,
    data: CertificateTypeUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CertificateTypeResponse:
    try:
        certificate_type = await service.update_certificate_type(
            db, actor, certificate_type_id, data
        )
        return CertificateTypeResponse.model_validate(certificate_type)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"updating certificate type {certificate_type_id}")


@router.delete(
    "/{certificate_type_id}",
    response_model=MessageResponse,
    summary="Delete Certificate Type",
)
async def delete_certificate_type(
    certificate_type_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_certificate_type(db, actor, certificate_type_id)
        return MessageResponse(message="Certificate type removed")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"deleting certificate type {certificate_type_id}")
