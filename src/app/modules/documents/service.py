"""
Application Documents Service Layer

Document attachment and the read-only verification engine.

Verification report for an application:
- R: active, required requirements of the application's program
- S: documents submitted for the application
- V: submitted documents that are verified
- completion_percentage = round(S / R * 100), 0 when R = 0
- verification_percentage = round(V / S * 100), 0 when S = 0

Percentages round half-up (2/3 -> 67).
"""

import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor
from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.core.permissions import Action, ensure_can
from app.modules.applications import repository as applications_repository
from app.modules.applications.models import Application
from app.modules.documents import repository
from app.modules.documents.models import ApplicationDocument
from app.modules.documents.schemas import (
    AvailableCertificateType,
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
    MissingDocument,
    VerificationStatusResponse,
    VerifierSummary,
)
from app.modules.files import repository as files_repository
from app.modules.programs import repository as programs_repository
from app.modules.programs.schemas import CertificateTypeSummary
from app.modules.users.models import UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Fields a student may change on their own document
STUDENT_DOCUMENT_FIELDS = frozenset({"document_name", "remarks", "file_upload_id"})


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: UUID):
        super().__init__(
            message=f"Application {application_id} not found",
            error_code="APPLICATION_NOT_FOUND",
        )


class DocumentNotFoundError(NotFoundError):
    def __init__(self, document_id: UUID):
        super().__init__(
            message=f"Document {document_id} not found",
            error_code="DOCUMENT_NOT_FOUND",
        )


class FileUploadNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__(message="File upload not found", error_code="FILE_NOT_FOUND")


class CertificateNotRequiredError(InvalidArgumentError):
    def __init__(self):
        super().__init__(
            message="This certificate type is not required for this program",
            error_code="CERTIFICATE_NOT_REQUIRED",
        )


class DuplicateDocumentError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Document for this certificate type already exists",
            error_code="DUPLICATE_DOCUMENT",
        )


def percentage(part: int, whole: int) -> int:
    """part / whole as a whole-number percentage rounded half-up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def _get_application(
    db: AsyncSession, actor: Actor, application_id: UUID, action: Action, message: str
) -> Application:
    application = await applications_repository.get_by_id(db, application_id)
    if not application:
        raise ApplicationNotFoundError(application_id)
    ensure_can(actor, action, application, message)
    return application


async def _get_document(
    db: AsyncSession, application_id: UUID, document_id: UUID
) -> ApplicationDocument:
    document = await repository.get_by_id(db, document_id)
    if not document or document.application_id != application_id:
        raise DocumentNotFoundError(document_id)
    return document


async def _to_responses(
    db: AsyncSession, documents: list[ApplicationDocument]
) -> list[DocumentResponse]:
    """Serialize documents with their verifier expanded."""
    verifier_ids = [d.verified_by for d in documents if d.verified_by]
    verifiers = await UserRepository.get_by_ids(db, verifier_ids)

    responses = []
    for document in documents:
        response = DocumentResponse.model_validate(document)
        verifier = verifiers.get(document.verified_by) if document.verified_by else None
        if verifier:
            response.verifier = VerifierSummary(id=verifier.id, email=verifier.email)
        responses.append(response)
    return responses


async def _to_response(db: AsyncSession, document: ApplicationDocument) -> DocumentResponse:
    return (await _to_responses(db, [document]))[0]


# ============================================
# Read
# ============================================


async def list_documents(
    db: AsyncSession, actor: Actor, application_id: UUID
) -> list[DocumentResponse]:
    await _get_application(
        db, actor, application_id, Action.DOCUMENT_READ, "Not authorized to access these documents"
    )
    documents = await repository.list_for_application(db, application_id)
    return await _to_responses(db, documents)


async def get_verification_status(
    db: AsyncSession, actor: Actor, application_id: UUID
) -> VerificationStatusResponse:
    """
    Completeness and verification report against the program's required certificates.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor may not view the application
    """
    application = await _get_application(
        db, actor, application_id, Action.DOCUMENT_READ, "Not authorized to access this application"
    )

    requirements = await programs_repository.list_requirements(
        db, application.program_id, required_only=True
    )
    documents = await repository.list_for_application(db, application_id)
    submitted_types = {d.certificate_type_id for d in documents}

    missing = [
        MissingDocument(
            requirement_id=r.id,
            certificate_type_id=r.certificate_type_id,
            name=r.certificate_type.name,
            description=r.certificate_type.description,
            special_instructions=r.special_instructions,
        )
        for r in requirements
        if r.certificate_type_id not in submitted_types
    ]

    responses = await _to_responses(db, documents)
    verified = [d for d in responses if d.is_verified]
    unverified = [d for d in responses if not d.is_verified]

    total_required = len(requirements)
    total_submitted = len(documents)
    total_verified = len(verified)

    logger.info(
        f"Verification status for {application_id}: {total_submitted}/{total_required} "
        f"submitted, {total_verified} verified"
    )
    return VerificationStatusResponse(
        total_required=total_required,
        total_submitted=total_submitted,
        total_verified=total_verified,
        missing_documents=missing,
        unverified_documents=unverified,
        verified_documents=verified,
        completion_percentage=percentage(total_submitted, total_required),
        verification_percentage=percentage(total_verified, total_submitted),
    )


async def get_available_types(
    db: AsyncSession, actor: Actor, application_id: UUID
) -> list[AvailableCertificateType]:
    """Active requirements of the program in display order, flagged when already covered."""
    application = await _get_application(
        db, actor, application_id, Action.DOCUMENT_READ, "Not authorized to access this application"
    )

    requirements = await programs_repository.list_requirements(db, application.program_id)
    documents = await repository.list_for_application(db, application_id)
    submitted_types = {d.certificate_type_id for d in documents}

    return [
        AvailableCertificateType(
            requirement_id=r.id,
            certificate_type=CertificateTypeSummary.model_validate(r.certificate_type),
            is_required=r.is_required,
            special_instructions=r.special_instructions,
            display_order=r.display_order,
            has_document=r.certificate_type_id in submitted_types,
        )
        for r in requirements
    ]


# ============================================
# Mutations
# ============================================


async def add_document(
    db: AsyncSession, actor: Actor, application_id: UUID, data: DocumentCreate
) -> DocumentResponse:
    """
    Attach a file to an application for one certificate type.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor may not add documents to it
        CertificateNotRequiredError: If the program has no active requirement
            for the certificate type
        FileUploadNotFoundError: If the file doesn't exist
        ForbiddenError: If a student links a file they did not upload
        DuplicateDocumentError: If a document already covers the certificate type
    """
    application = await _get_application(
        db,
        actor,
        application_id,
        Action.DOCUMENT_ADD,
        "Not authorized to add documents to this application",
    )

    requirement = await programs_repository.get_requirement_for_certificate(
        db, application.program_id, data.certificate_type_id
    )
    if not requirement:
        raise CertificateNotRequiredError()

    file_upload = await files_repository.get_by_id(db, data.file_upload_id)
    if not file_upload:
        raise FileUploadNotFoundError()
    ensure_can(actor, Action.FILE_READ, file_upload, "You can only attach your own files")

    if await repository.get_for_certificate(db, application_id, data.certificate_type_id):
        raise DuplicateDocumentError()

    try:
        document = await repository.create(
            db,
            {
                "application_id": application_id,
                "certificate_type_id": data.certificate_type_id,
                "file_upload_id": data.file_upload_id,
                "document_name": data.document_name or file_upload.original_name,
                "remarks": data.remarks,
            },
        )
    except IntegrityError:
        raise DuplicateDocumentError() from None

    logger.info(f"Document {document.id} ({document.document_name}) added to {application_id}")
    return await _to_response(db, document)


async def update_document(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    document_id: UUID,
    data: DocumentUpdate,
) -> DocumentResponse:
    """
    Update a document.

    Students may change only document_name, remarks and file_upload_id.
    Changing the file resets verification unless the same request sets
    is_verified.
    """
    await _get_application(
        db, actor, application_id, Action.DOCUMENT_UPDATE, "Not authorized to update this document"
    )
    document = await _get_document(db, application_id, document_id)

    changes = data.model_dump(exclude_unset=True)
    if actor.role == UserRole.STUDENT:
        changes = {k: v for k, v in changes.items() if k in STUDENT_DOCUMENT_FIELDS}

    new_file_id = changes.get("file_upload_id")
    if new_file_id is not None and new_file_id != document.file_upload_id:
        new_file = await files_repository.get_by_id(db, new_file_id)
        if not new_file:
            raise FileUploadNotFoundError()
        ensure_can(actor, Action.FILE_READ, new_file, "You can only attach your own files")
        document.file_upload_id = new_file_id
        if "is_verified" not in changes:
            document.reset_verification()
    changes.pop("file_upload_id", None)

    if "is_verified" in changes:
        is_verified = changes.pop("is_verified")
        document.is_verified = is_verified
        document.verified_by = actor.id if is_verified else None
        document.verified_at = datetime.now(UTC) if is_verified else None

    for field, value in changes.items():
        if value is not None or field in ("remarks", "verification_remarks"):
            setattr(document, field, value)

    document = await repository.save(db, document)
    logger.info(f"Document {document_id} updated by {actor.id}")
    return await _to_response(db, document)


async def verify_document(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    document_id: UUID,
    is_verified: bool,
    remarks: str | None = None,
) -> DocumentResponse:
    """
    Record a verification decision (admin, or the program's admin).

    Stamps the verifier and time whatever the decision.
    """
    await _get_application(
        db, actor, application_id, Action.DOCUMENT_VERIFY, "Not authorized to verify this document"
    )
    document = await _get_document(db, application_id, document_id)

    document.is_verified = is_verified
    document.verified_by = actor.id
    document.verified_at = datetime.now(UTC)
    document.verification_remarks = remarks

    document = await repository.save(db, document)
    logger.info(f"Document {document_id} verification set to {is_verified} by {actor.id}")
    return await _to_response(db, document)


async def delete_document(
    db: AsyncSession, actor: Actor, application_id: UUID, document_id: UUID
) -> None:
    await _get_application(
        db, actor, application_id, Action.DOCUMENT_DELETE, "Not authorized to delete this document"
    )
    document = await _get_document(db, application_id, document_id)
    await repository.delete(db, document)
    logger.info(f"Document {document_id} removed from {application_id} by {actor.id}")
