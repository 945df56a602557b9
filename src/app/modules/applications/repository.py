"""
Applications Repository

Database operations for applications and their status history.
Only data access lives here; lifecycle rules live in the service layer.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.programs.models import Program

from .models import Application, ApplicationStatus, ApplicationStatusHistory


async def count_all(db: AsyncSession) -> int:
    """Count every application ever created (the numbering base)."""
    total = await db.scalar(select(func.count(Application.id)))
    return total or 0


async def get_by_id(db: AsyncSession, application_id: UUID) -> Application | None:
    return await db.get(Application, application_id)


async def get_for_user_program_year(
    db: AsyncSession, user_id: UUID, program_id: UUID, academic_year: str
) -> Application | None:
    result = await db.execute(
        select(Application).where(
            Application.user_id == user_id,
            Application.program_id == program_id,
            Application.academic_year == academic_year,
        )
    )
    return result.scalar_one_or_none()


async def create_with_history(
    db: AsyncSession,
    values: dict[str, Any],
    *,
    changed_by: UUID,
    remarks: str,
) -> Application:
    """
    Insert an application and its creation history entry in one commit.

    Raises:
        IntegrityError: On a unique constraint violation (the session is
            rolled back before re-raising)
    """
    application = Application(**values)
    db.add(application)
    try:
        await db.flush()
        db.add(
            ApplicationStatusHistory(
                application_id=application.id,
                from_status=None,
                to_status=application.status,
                changed_by=changed_by,
                remarks=remarks,
            )
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(application)
    return application


async def save(db: AsyncSession, application: Application) -> Application:
    """Commit pending field changes on an application."""
    await db.commit()
    await db.refresh(application)
    return application


async def save_with_history(
    db: AsyncSession,
    application: Application,
    *,
    from_status: ApplicationStatus,
    changed_by: UUID,
    remarks: str,
) -> Application:
    """Commit a status change together with its history entry."""
    db.add(
        ApplicationStatusHistory(
            application_id=application.id,
            from_status=from_status,
            to_status=application.status,
            changed_by=changed_by,
            remarks=remarks,
        )
    )
    await db.commit()
    await db.refresh(application)
    return application


async def list_history(db: AsyncSession, application_id: UUID) -> list[ApplicationStatusHistory]:
    """History entries newest first."""
    result = await db.execute(
        select(ApplicationStatusHistory)
        .where(ApplicationStatusHistory.application_id == application_id)
        .order_by(ApplicationStatusHistory.created_at.desc())
    )
    return list(result.scalars().all())


async def list_applications(
    db: AsyncSession,
    *,
    user_id: UUID | None = None,
    program_id: UUID | None = None,
    status: ApplicationStatus | None = None,
    academic_year: str | None = None,
    search: str | None = None,
    sort_field: str = "created_at",
    sort_order: str = "desc",
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Application], int]:
    """
    Filtered, sorted, paginated listing.

    search matches application number, student and parent names, email and
    mobile number, case-insensitively.

    Returns:
        Tuple of (applications on the page, total matching count)
    """
    conditions = []
    if user_id is not None:
        conditions.append(Application.user_id == user_id)
    if program_id is not None:
        conditions.append(Application.program_id == program_id)
    if status is not None:
        conditions.append(Application.status == status)
    if academic_year:
        conditions.append(Application.academic_year == academic_year)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(
                Application.application_number.ilike(pattern),
                Application.student_name.ilike(pattern),
                Application.father_name.ilike(pattern),
                Application.mother_name.ilike(pattern),
                Application.email.ilike(pattern),
                Application.mobile_number.ilike(pattern),
            )
        )

    total = await db.scalar(select(func.count(Application.id)).where(*conditions))

    column = getattr(Application, sort_field)
    order_by = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        select(Application).where(*conditions).order_by(order_by).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total or 0


# ============================================
# Statistics
# ============================================


def _statistics_conditions(academic_year: str, program_id: UUID | None) -> list:
    conditions = [Application.academic_year == academic_year]
    if program_id is not None:
        conditions.append(Application.program_id == program_id)
    return conditions


async def count_by_status(
    db: AsyncSession, academic_year: str, program_id: UUID | None = None
) -> dict[str, int]:
    result = await db.execute(
        select(Application.status, func.count(Application.id))
        .where(*_statistics_conditions(academic_year, program_id))
        .group_by(Application.status)
    )
    return {status.value: count for status, count in result.all()}


async def count_by_program_and_status(
    db: AsyncSession, academic_year: str, program_id: UUID | None = None
) -> list[tuple[UUID, str, str, str, int]]:
    """
    Returns:
        Rows of (program id, program name, department, status value, count)
    """
    result = await db.execute(
        select(
            Program.id,
            Program.program_name,
            Program.department,
            Application.status,
            func.count(Application.id),
        )
        .join(Program, Program.id == Application.program_id)
        .where(*_statistics_conditions(academic_year, program_id))
        .group_by(Program.id, Program.program_name, Program.department, Application.status)
        .order_by(Program.program_name)
    )
    return [
        (pid, name, dept, status.value, count) for pid, name, dept, status, count in result.all()
    ]


async def count_by_month(
    db: AsyncSession, academic_year: str, program_id: UUID | None = None
) -> list[tuple[int, int]]:
    """
    Returns:
        Rows of (month number 1-12, count) ordered by month
    """
    month = extract("month", Application.created_at)
    result = await db.execute(
        select(month, func.count(Application.id))
        .where(*_statistics_conditions(academic_year, program_id))
        .group_by(month)
        .order_by(month)
    )
    return [(int(m), count) for m, count in result.all()]
