"""
Files Router

Endpoints:
- GET /files - The caller's uploads, paginated
- POST /files - Register a stored file
- GET /files/{id} - File reference details
- PUT /files/{id}/verify - Mark a file verified (staff)
- DELETE /files/{id} - Delete a file reference (uploader or admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.modules.files import service
from app.modules.files.schemas import (
    FileListResponse,
    FileRegister,
    FileResponse,
    FileVerifyRequest,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=FileListResponse, summary="List My Files")
async def list_files(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> FileListResponse:
    try:
        result = await service.list_my_files(db, actor, page, limit)
        result["docs"] = [FileResponse.model_validate(f) for f in result["docs"]]
        return FileListResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "listing files")


@router.post(
    "",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register File",
    responses={400: {"description": "File too large or type not allowed"}},
)
async def register_file(
    data: FileRegister,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> FileResponse:
    try:
        file_upload = await service.register_file(db, actor, data)
        return FileResponse.model_validate(file_upload)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "registering file")


@router.get("/{file_id}", response_model=FileResponse, summary="Get File")
async def get_file(
    file_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> FileResponse:
    try:
        file_upload = await service.get_file(db, actor, file_id)
        return FileResponse.model_validate(file_upload)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"getting file {file_id}")


@router.put("/{file_id}/verify", response_model=FileResponse, summary="Verify File")
async def verify_file(
    file_id: UUID,
    data: FileVerifyRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> FileResponse:
    try:
        file_upload = await service.verify_file(db, actor, file_id, data.is_verified)
        return FileResponse.model_validate(file_upload)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"verifying file {file_id}")


@router.delete("/{file_id}", response_model=MessageResponse, summary="Delete File")
async def delete_file(
    file_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_file(db, actor, file_id)
        return MessageResponse(message="File removed")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"deleting file {file_id}")
