"""
File Upload Repository

Database operations for file reference records.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import FileUpload


async def create(db: AsyncSession, values: dict[str, Any]) -> FileUpload:
    file_upload = FileUpload(**values)
    db.add(file_upload)
    await db.commit()
    await db.refresh(file_upload)
    return file_upload


async def get_by_id(db: AsyncSession, file_id: UUID) -> FileUpload | None:
    return await db.get(FileUpload, file_id)


async def get_by_ids(db: AsyncSession, file_ids: list[UUID]) -> dict[UUID, FileUpload]:
    if not file_ids:
        return {}
    result = await db.execute(select(FileUpload).where(FileUpload.id.in_(set(file_ids))))
    return {f.id: f for f in result.scalars().all()}


async def list_by_uploader(
    db: AsyncSession, user_id: UUID, *, skip: int = 0, limit: int = 10
) -> tuple[list[FileUpload], int]:
    """A user's uploads, newest first."""
    condition = FileUpload.uploaded_by == user_id
    total = await db.scalar(select(func.count(FileUpload.id)).where(condition))
    result = await db.execute(
        select(FileUpload)
        .where(condition)
        .order_by(FileUpload.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def set_verified(
    db: AsyncSession, file_upload: FileUpload, *, is_verified: bool, verified_by: UUID
) -> FileUpload:
    file_upload.is_verified = is_verified
    file_upload.verified_by = verified_by if is_verified else None
    file_upload.verified_at = datetime.now(UTC) if is_verified else None
    await db.commit()
    await db.refresh(file_upload)
    return file_upload


async def delete(db: AsyncSession, file_upload: FileUpload) -> None:
    """
    Raises:
        IntegrityError: If a document still references the file
    """
    await db.delete(file_upload)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
