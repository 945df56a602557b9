"""
Application Documents Router

Mounted under /applications/{application_id}/documents.

Endpoints:
- GET / - Documents with certificate type, file and verifier expanded
- POST / - Attach a document
- GET /verification-status - Completeness and verification report
- GET /available-types - Program requirements flagged with coverage
- PUT /{document_id} - Update a document
- PUT /{document_id}/verify - Record a verification decision (staff)
- DELETE /{document_id} - Remove a document
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.core.rate_limit import enforce_rate_limit
from app.modules.documents import service
from app.modules.documents.schemas import (
    AvailableCertificateType,
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
    DocumentVerifyRequest,
    MessageResponse,
    VerificationStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Verification decisions: 60 per minute per actor
VERIFY_LIMIT = 60
VERIFY_WINDOW_SECONDS = 60


@router.get("", response_model=list[DocumentResponse], summary="List Application Documents")
async def list_documents(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[DocumentResponse]:
    try:
        return await service.list_documents(db, actor, application_id)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"listing documents of application {application_id}")


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Application Document",
    responses={
        400: {"description": "Certificate type not required for this program"},
        404: {"description": "Application or file not found"},
        409: {"description": "Document for this certificate type already exists"},
    },
)
async def add_document(
    application_id: UUID,
    data: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> DocumentResponse:
    try:
        return await service.add_document(db, actor, application_id, data)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"adding document to application {application_id}")


@router.get(
    "/verification-status",
    response_model=VerificationStatusResponse,
    summary="Document Verification Status",
)
async def verification_status(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> VerificationStatusResponse:
    try:
        return await service.get_verification_status(db, actor, application_id)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"computing verification status of {application_id}")


@router.get(
    "/available-types",
    response_model=list[AvailableCertificateType],
    summary="Certificate Types For This Application",
)
async def available_types(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[AvailableCertificateType]:
    try:
        return await service.get_available_types(db, actor, application_id)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"listing available certificate types for {application_id}")


@router.put("/{document_id}", response_model=DocumentResponse, summary="Update Document")
async def update_document(
    application_id: UUID,
    document_id: UUID,
    data: DocumentUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> DocumentResponse:
    try:
        return await service.update_document(db, actor, application_id, document_id, data)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"updating document {document_id}")


@router.put("/{document_id}/verify", response_model=DocumentResponse, summary="Verify Document")
async def verify_document(
    application_id: UUID,
    document_id: UUID,
    data: DocumentVerifyRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> DocumentResponse:
    await enforce_rate_limit(actor.id, "documents_verify", VERIFY_LIMIT, VERIFY_WINDOW_SECONDS)

    try:
        return await service.verify_document(
            db, actor, application_id, document_id, data.is_verified, data.verification_remarks
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"verifying document {document_id}")


@router.delete("/{document_id}", response_model=MessageResponse, summary="Delete Document")
async def delete_document(
    application_id: UUID,
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_document(db, actor, application_id, document_id)
        return MessageResponse(message="Document removed")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"deleting document {document_id}")
