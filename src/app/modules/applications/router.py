"""
Applications Router

Endpoints:
- GET /applications - List applications visible to the caller
- POST /applications - Create a draft application (student)
- GET /applications/statistics - Counts for an academic year (staff)
- PUT /applications/bulk - Bulk status / academic year update (staff)
- GET /applications/{id} - Application with the caller's permissions
- PUT /applications/{id} - Update fields
- PUT /applications/{id}/submit - Submit a draft (owning student)
- PUT /applications/{id}/status - Change status (staff)
- GET /applications/{id}/history - Status history, newest first
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.core.rate_limit import enforce_rate_limit
from app.modules.applications import service
from app.modules.applications.models import ApplicationStatus
from app.modules.applications.schemas import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationPermissions,
    ApplicationResponse,
    ApplicationStatisticsResponse,
    ApplicationUpdate,
    BulkUpdateRequest,
    BulkUpdateResponse,
    StatusChangeRequest,
    StatusHistoryResponse,
)
from app.modules.notifications.emitter import NotificationEmitter, get_notification_emitter

logger = logging.getLogger(__name__)

router = APIRouter()

# Bulk updates: 10 per minute per actor
BULK_UPDATE_LIMIT = 10
BULK_UPDATE_WINDOW_SECONDS = 60


@router.get("", response_model=ApplicationListResponse, summary="List Applications")
async def list_applications(
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
    program_id: UUID | None = Query(None),
    academic_year: str | None = Query(None),
    search: str | None = Query(None, description="Number, name, email or mobile"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_field: str = Query("created_at"),
    sort_order: str = Query("desc"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ApplicationListResponse:
    """
    List applications.

    Students see their own applications, program admins their program's,
    admins all of them.
    """
    try:
        result = await service.list_applications(
            db,
            actor,
            status=status_filter,
            program_id=program_id,
            academic_year=academic_year,
            search=search,
            page=page,
            limit=limit,
            sort_field=sort_field,
            sort_order=sort_order,
        )
        result["docs"] = [ApplicationResponse.model_validate(a) for a in result["docs"]]
        return ApplicationListResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "listing applications")


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Application",
    responses={
        404: {"description": "Program not found"},
        409: {"description": "Application already exists for this program and year"},
    },
)
async def create_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ApplicationResponse:
    try:
        application = await service.create_application(db, actor, data, emitter)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "creating application")


@router.get(
    "/statistics",
    response_model=ApplicationStatisticsResponse,
    summary="Application Statistics",
)
async def application_statistics(
    academic_year: str | None = Query(None, description="Academic year, e.g. 2025-26"),
    program_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ApplicationStatisticsResponse:
    try:
        result = await service.get_application_statistics(db, actor, academic_year, program_id)
        return ApplicationStatisticsResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "computing application statistics")


@router.put("/bulk", response_model=BulkUpdateResponse, summary="Bulk Update Applications")
async def bulk_update_applications(
    data: BulkUpdateRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> BulkUpdateResponse:
    """Apply status and/or academic_year per item; failures are reported, not raised."""
    await enforce_rate_limit(
        actor.id, "applications_bulk_update", BULK_UPDATE_LIMIT, BULK_UPDATE_WINDOW_SECONDS
    )

    try:
        result = await service.bulk_update_applications(
            db, actor, data.application_ids, data.updates, data.remarks, emitter
        )
        return BulkUpdateResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "bulk updating applications")


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailResponse,
    summary="Get Application",
)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ApplicationDetailResponse:
    try:
        application, permissions = await service.get_application(db, actor, application_id)
        return ApplicationDetailResponse(
            **ApplicationResponse.model_validate(application).model_dump(),
            permissions=ApplicationPermissions(**permissions),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"getting application {application_id}")


@router.put("/{application_id}", response_model=ApplicationResponse, summary="Update Application")
async def update_application(
    application_id: UUID,
    data: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ApplicationResponse:
    try:
        application = await service.update_application(db, actor, application_id, data, emitter)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"updating application {application_id}")


@router.put(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    summary="Submit Application",
)
async def submit_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ApplicationResponse:
    try:
        application = await service.submit_application(db, actor, application_id, emitter)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"submitting application {application_id}")


@router.put(
    "/{application_id}/status",
    response_model=ApplicationResponse,
    summary="Change Application Status",
)
async def change_application_status(
    application_id: UUID,
    data: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ApplicationResponse:
    try:
        application = await service.change_status(db, actor, application_id, data, emitter)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"changing status of application {application_id}")


@router.get(
    "/{application_id}/history",
    response_model=list[StatusHistoryResponse],
    summary="Application Status History",
)
async def application_history(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> list[StatusHistoryResponse]:
    try:
        history = await service.get_application_history(db, actor, application_id)
        return [StatusHistoryResponse.model_validate(h) for h in history]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"getting history of application {application_id}")
