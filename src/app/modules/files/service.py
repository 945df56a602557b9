"""
File Upload Service Layer

Registers references to files held in external storage and enforces the
configured size and type limits. Verification of a file is a staff action
separate from document verification.
"""

import logging
import posixpath
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor
from app.core.config import settings
from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.core.permissions import Action, ensure_can
from app.modules.files import repository
from app.modules.files.models import FileUpload
from app.modules.files.schemas import FileRegister
from app.modules.shared import PageParams, build_page

logger = logging.getLogger(__name__)


class UploadNotFoundError(NotFoundError):
    def __init__(self, file_id: UUID | None = None):
        message = f"File {file_id} not found" if file_id else "File not found"
        super().__init__(message=message, error_code="FILE_NOT_FOUND")


class FileTooLargeError(InvalidArgumentError):
    def __init__(self, max_size_mb: int):
        super().__init__(
            message=f"File exceeds the {max_size_mb}MB size limit",
            error_code="FILE_TOO_LARGE",
        )


class FileTypeNotAllowedError(InvalidArgumentError):
    def __init__(self, extension: str):
        super().__init__(
            message=f"File type '{extension or 'unknown'}' is not allowed",
            error_code="FILE_TYPE_NOT_ALLOWED",
        )


class FileInUseError(ConflictError):
    def __init__(self):
        super().__init__(
            message="File is still attached to a document",
            error_code="FILE_IN_USE",
        )


def file_extension(name: str) -> str:
    """Lower-case extension without the dot, or '' if there is none."""
    _, ext = posixpath.splitext(name)
    return ext.lstrip(".").lower()


def validate_upload(data: FileRegister) -> None:
    """
    Check a registration against the configured limits.

    Raises:
        FileTooLargeError: If file_size exceeds upload_max_size_mb
        FileTypeNotAllowedError: If the extension is not in upload_allowed_types
    """
    if data.file_size > settings.upload_max_size_bytes:
        raise FileTooLargeError(settings.upload_max_size_mb)

    extension = file_extension(data.original_name)
    if extension not in settings.upload_allowed_types_list:
        raise FileTypeNotAllowedError(extension)


async def register_file(db: AsyncSession, actor: Actor, data: FileRegister) -> FileUpload:
    """Record a stored file uploaded by the actor."""
    ensure_can(actor, Action.FILE_UPLOAD)
    validate_upload(data)

    values = data.model_dump()
    if not values.get("file_path"):
        values["file_path"] = posixpath.join(settings.storage_root, data.filename)
    values["uploaded_by"] = actor.id

    file_upload = await repository.create(db, values)
    logger.info(
        f"File {file_upload.id} ({file_upload.original_name}, {file_upload.file_size} bytes) "
        f"registered by {actor.id}"
    )
    return file_upload


async def get_file(db: AsyncSession, actor: Actor, file_id: UUID) -> FileUpload:
    """
    Raises:
        UploadNotFoundError: If the file doesn't exist
        ForbiddenError: If the actor may not read it
    """
    file_upload = await repository.get_by_id(db, file_id)
    if not file_upload:
        raise UploadNotFoundError(file_id)
    ensure_can(actor, Action.FILE_READ, file_upload, "You do not have access to this file")
    return file_upload


async def list_my_files(
    db: AsyncSession, actor: Actor, page: int | None = None, limit: int | None = None
) -> dict[str, Any]:
    params = PageParams.create(page, limit)
    items, total = await repository.list_by_uploader(
        db, actor.id, skip=params.skip, limit=params.limit
    )
    return build_page(items, total, params)


async def verify_file(
    db: AsyncSession, actor: Actor, file_id: UUID, is_verified: bool = True
) -> FileUpload:
    ensure_can(actor, Action.FILE_VERIFY)
    file_upload = await repository.get_by_id(db, file_id)
    if not file_upload:
        raise UploadNotFoundError(file_id)

    file_upload = await repository.set_verified(
        db, file_upload, is_verified=is_verified, verified_by=actor.id
    )
    logger.info(f"File {file_id} verification set to {is_verified} by {actor.id}")
    return file_upload


async def delete_file(db: AsyncSession, actor: Actor, file_id: UUID) -> None:
    """
    Delete a file reference (owner or admin).

    Raises:
        UploadNotFoundError: If the file doesn't exist
        ForbiddenError: If the actor is neither the uploader nor an admin
        FileInUseError: If a document still points at the file
    """
    file_upload = await repository.get_by_id(db, file_id)
    if not file_upload:
        raise UploadNotFoundError(file_id)
    ensure_can(actor, Action.FILE_DELETE, file_upload, "Not authorized to delete this file")

    try:
        await repository.delete(db, file_upload)
    except IntegrityError:
        logger.warning(f"File {file_id} is still referenced, not deleted")
        raise FileInUseError() from None
    logger.info(f"File {file_id} deleted by {actor.id}")
