"""
Application Documents Repository

Database operations for documents attached to applications.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.programs.models import CertificateType

from .models import ApplicationDocument


async def list_for_application(
    db: AsyncSession, application_id: UUID
) -> list[ApplicationDocument]:
    """Documents of an application ordered by certificate type display order."""
    result = await db.execute(
        select(ApplicationDocument)
        .join(CertificateType, CertificateType.id == ApplicationDocument.certificate_type_id)
        .where(ApplicationDocument.application_id == application_id)
        .order_by(CertificateType.display_order, ApplicationDocument.created_at)
    )
    return list(result.scalars().unique().all())


async def get_by_id(db: AsyncSession, document_id: UUID) -> ApplicationDocument | None:
    return await db.get(ApplicationDocument, document_id)


async def get_for_certificate(
    db: AsyncSession, application_id: UUID, certificate_type_id: UUID
) -> ApplicationDocument | None:
    result = await db.execute(
        select(ApplicationDocument).where(
            ApplicationDocument.application_id == application_id,
            ApplicationDocument.certificate_type_id == certificate_type_id,
        )
    )
    return result.unique().scalar_one_or_none()


async def create(db: AsyncSession, values: dict[str, Any]) -> ApplicationDocument:
    """
    Raises:
        IntegrityError: If the (application, certificate type) pair exists
    """
    document = ApplicationDocument(**values)
    db.add(document)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(document)
    return document


async def save(db: AsyncSession, document: ApplicationDocument) -> ApplicationDocument:
    await db.commit()
    await db.refresh(document)
    return document


async def delete(db: AsyncSession, document: ApplicationDocument) -> None:
    await db.delete(document)
    await db.commit()
