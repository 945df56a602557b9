"""
Applications Service Layer

The application lifecycle engine. Every mutation follows the same order:
1. Resolve the application (NotFound)
2. Check capability with can() (Forbidden)
3. Check the current status (InvalidState)
4. Mutate, and append a history row for every status change
5. Hand the transition to the notification emitter

Notifications are best effort: a failing emitter is logged and never
undoes the committed status change.

Requesting an application's current status is a strict no-op: no history
row, no notification, no timestamp change.

Application numbers are APP + two-digit year + the count of all
applications plus one, zero-padded to six digits. Two concurrent creates
can compute the same number; the unique constraint rejects the second and
the create retries with the next sequence.
"""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor
from app.core.config import settings
from app.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)
from app.core.permissions import Action, can, ensure_can
from app.modules.applications import repository
from app.modules.applications.helpers import (
    BULK_UPDATE_FIELDS,
    clean_profile_payload,
    filter_update_fields,
    format_application_number,
    missing_required_fields,
    normalize_sort,
)
from app.modules.applications.models import (
    Application,
    ApplicationStatus,
    ApplicationStatusHistory,
)
from app.modules.applications.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    StatusChangeRequest,
)
from app.modules.applications.transitions import (
    NOTIFICATION_RULES,
    STUDENT_EDITABLE_STATUSES,
    Audience,
    TransitionEvent,
    application_action_url,
    is_transition_allowed,
    stamp_transition,
)
from app.modules.notifications.emitter import (
    NotificationEmitter,
    NotificationMessage,
    get_notification_emitter,
)
from app.modules.programs import service as programs_service
from app.modules.shared import PageParams, build_page
from app.modules.users.models import UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: UUID | None = None):
        message = (
            f"Application {application_id} not found" if application_id else "Application not found"
        )
        super().__init__(message=message, error_code="APPLICATION_NOT_FOUND")


class DuplicateApplicationError(ConflictError):
    def __init__(self):
        super().__init__(
            message="You already have an application for this program and academic year",
            error_code="DUPLICATE_APPLICATION",
        )


class ApplicationNumberConflictError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Could not allocate an application number, please retry",
            error_code="APPLICATION_NUMBER_CONFLICT",
        )


class MissingRequiredFieldsError(InvalidArgumentError):
    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Missing required fields: {', '.join(missing)}",
            error_code="MISSING_REQUIRED_FIELDS",
        )


class ProgramInactiveError(InvalidArgumentError):
    def __init__(self):
        super().__init__(
            message="This program is not accepting applications",
            error_code="PROGRAM_INACTIVE",
        )


class ApplicationNotEditableError(InvalidStateError):
    def __init__(self, status: ApplicationStatus):
        super().__init__(
            message=f"Cannot update application with status: {status.value}",
            error_code="APPLICATION_NOT_EDITABLE",
        )


class ApplicationNotDraftError(InvalidStateError):
    def __init__(self, status: ApplicationStatus):
        super().__init__(
            message=f"Only draft applications can be submitted (current status: {status.value})",
            error_code="APPLICATION_NOT_DRAFT",
        )


class InvalidTransitionError(InvalidStateError):
    def __init__(self, from_status: ApplicationStatus, to_status: ApplicationStatus):
        super().__init__(
            message=f"Cannot change status from {from_status.value} to {to_status.value}",
            error_code="INVALID_TRANSITION",
        )


# ============================================
# Internal helpers
# ============================================


async def _get_authorized(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    action: Action,
    message: str | None = None,
) -> Application:
    """
    Load an application and check the actor may perform the action on it.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If can() denies the action
    """
    application = await repository.get_by_id(db, application_id)
    if not application:
        logger.warning(f"Application not found: {application_id}")
        raise ApplicationNotFoundError(application_id)
    ensure_can(actor, action, application, message)
    return application


async def _transition(
    db: AsyncSession,
    actor: Actor,
    application: Application,
    to_status: ApplicationStatus,
    remarks: str | None = None,
) -> Application:
    """Move to a new status, stamp timestamps and append history in one commit."""
    from_status = application.status
    application.status = to_status
    stamp_transition(application, to_status, actor.id, datetime.now(UTC))

    application = await repository.save_with_history(
        db,
        application,
        from_status=from_status,
        changed_by=actor.id,
        remarks=remarks or f"Status changed from {from_status.value} to {to_status.value}",
    )
    logger.info(
        f"Application {application.application_number}: {from_status.value} -> "
        f"{to_status.value} by {actor.id}"
    )
    return application


async def _audience(
    db: AsyncSession, audience: Audience, application: Application
) -> list[tuple[UUID, str | None]]:
    if audience == Audience.OWNER:
        return [(application.user_id, application.email)]
    admins = await UserRepository.get_active_program_admins(db, application.program_id)
    return [(admin.id, admin.email) for admin in admins]


async def _notify(
    db: AsyncSession,
    emitter: NotificationEmitter,
    event: TransitionEvent,
    application: Application,
) -> None:
    """Build the messages for an event from NOTIFICATION_RULES and emit them."""
    rule = NOTIFICATION_RULES[event]
    try:
        recipients = await _audience(db, rule.audience, application)
        program_name = application.program.program_name if application.program else ""
        text = rule.render(application, program_name)
        messages = [
            NotificationMessage(
                user_id=user_id,
                title=rule.title,
                message=text,
                type=rule.notification_type(application.status),
                action_url=application_action_url(application),
                recipient_email=email,
            )
            for user_id, email in recipients
        ]
        await emitter.emit(db, messages)
    except Exception as e:
        logger.exception(
            f"Failed to emit {event.value} notifications for application {application.id}: {e}"
        )
        await db.rollback()
        await db.refresh(application)


# ============================================
# Create
# ============================================


async def create_application(
    db: AsyncSession,
    actor: Actor,
    data: ApplicationCreate,
    emitter: NotificationEmitter | None = None,
) -> Application:
    """
    Create a draft application for the caller.

    Raises:
        ForbiddenError: If the actor cannot create applications
        MissingRequiredFieldsError: If a required field is blank
        ProgramNotFoundError: If the program doesn't exist
        ProgramInactiveError: If the program is not active
        DuplicateApplicationError: If the caller already applied to the
            program for the academic year
        ApplicationNumberConflictError: If no free number was found
            within the retry budget
    """
    ensure_can(actor, Action.APPLICATION_CREATE)
    emitter = emitter or get_notification_emitter()

    values = clean_profile_payload(data.model_dump())
    missing = missing_required_fields(values)
    if missing:
        raise MissingRequiredFieldsError(missing)

    program = await programs_service.get_program(db, data.program_id)
    if not program.is_active:
        raise ProgramInactiveError()

    if await repository.get_for_user_program_year(
        db, actor.id, data.program_id, data.academic_year
    ):
        logger.warning(
            f"Duplicate application by {actor.id} for program {data.program_id} "
            f"({data.academic_year})"
        )
        raise DuplicateApplicationError()

    now = datetime.now(UTC)
    application: Application | None = None
    for attempt in range(settings.application_number_max_retries):
        sequence = await repository.count_all(db) + 1 + attempt
        application_number = format_application_number(now, sequence)
        try:
            application = await repository.create_with_history(
                db,
                {
                    **values,
                    "application_number": application_number,
                    "user_id": actor.id,
                    "status": ApplicationStatus.DRAFT,
                },
                changed_by=actor.id,
                remarks="Application created",
            )
            break
        except IntegrityError:
            if await repository.get_for_user_program_year(
                db, actor.id, data.program_id, data.academic_year
            ):
                raise DuplicateApplicationError() from None
            logger.warning(f"Application number {application_number} taken, retrying")

    if application is None:
        logger.error(
            f"Gave up allocating an application number after "
            f"{settings.application_number_max_retries} attempts"
        )
        raise ApplicationNumberConflictError()

    logger.info(f"Application created: {application.application_number} by {actor.id}")
    await _notify(db, emitter, TransitionEvent.CREATED, application)
    return application


# ============================================
# Read
# ============================================


async def list_applications(
    db: AsyncSession,
    actor: Actor,
    *,
    status: ApplicationStatus | None = None,
    program_id: UUID | None = None,
    academic_year: str | None = None,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> dict[str, Any]:
    """
    List applications visible to the actor.

    Students see only their own applications and program admins only their
    program's; the caller's program_id filter is overridden accordingly.
    Unknown sort fields fall back to created_at.

    Returns:
        Paginated envelope plus filter_applied, sort_applied and user_info
    """
    params = PageParams.create(page, limit)
    field, order = normalize_sort(sort_field, sort_order)

    user_id = None
    if actor.role == UserRole.STUDENT:
        user_id = actor.id
    elif actor.role == UserRole.PROGRAM_ADMIN:
        program_id = actor.program_id

    if actor.role == UserRole.PROGRAM_ADMIN and program_id is None:
        logger.warning(f"Program admin {actor.id} has no assigned program")
        items, total = [], 0
    else:
        items, total = await repository.list_applications(
            db,
            user_id=user_id,
            program_id=program_id,
            status=status,
            academic_year=academic_year,
            search=search,
            sort_field=field,
            sort_order=order,
            skip=params.skip,
            limit=params.limit,
        )

    result = build_page(items, total, params)
    result["filter_applied"] = {
        "status": status,
        "program_id": program_id,
        "academic_year": academic_year,
        "search": search or None,
    }
    result["sort_applied"] = {"field": field, "order": order}
    result["user_info"] = {
        "role": actor.role.value,
        "can_create_new": actor.role == UserRole.STUDENT,
        "can_bulk_edit": actor.role != UserRole.STUDENT
        and can(actor, Action.APPLICATION_BULK_UPDATE),
    }
    return result


def get_permissions(actor: Actor, application: Application) -> dict[str, bool]:
    """What the actor may do next with an application."""
    can_edit = can(actor, Action.APPLICATION_UPDATE, application)
    if actor.role == UserRole.STUDENT:
        can_edit = can_edit and application.status in STUDENT_EDITABLE_STATUSES

    return {
        "can_edit": can_edit,
        "can_submit": application.user_id == actor.id
        and application.status == ApplicationStatus.DRAFT,
        "can_review": can(actor, Action.APPLICATION_CHANGE_STATUS, application),
    }


async def get_application(
    db: AsyncSession, actor: Actor, application_id: UUID
) -> tuple[Application, dict[str, bool]]:
    """
    Get an application with the caller's permissions on it.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor may not view it
    """
    application = await _get_authorized(
        db,
        actor,
        application_id,
        Action.APPLICATION_READ,
        "You do not have permission to view this application",
    )
    return application, get_permissions(actor, application)


async def get_application_history(
    db: AsyncSession, actor: Actor, application_id: UUID
) -> list[ApplicationStatusHistory]:
    """Status history newest first."""
    await _get_authorized(
        db,
        actor,
        application_id,
        Action.APPLICATION_READ,
        "You do not have permission to view this application history",
    )
    return await repository.list_history(db, application_id)


# ============================================
# Update / Submit / Status
# ============================================


async def update_application(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    data: ApplicationUpdate,
    emitter: NotificationEmitter | None = None,
) -> Application:
    """
    Update application fields.

    Students may edit their own draft or rejected applications; lifecycle
    and identity fields are dropped from their payload. Staff may set any
    field except application_number and user_id, and a status in the
    payload goes through the same transition as change_status().

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor may not update it
        ApplicationNotEditableError: If a student edits outside draft/rejected
        DuplicateApplicationError: If a program/year change collides
    """
    application = await _get_authorized(
        db,
        actor,
        application_id,
        Action.APPLICATION_UPDATE,
        "You do not have permission to update this application",
    )
    emitter = emitter or get_notification_emitter()

    if actor.role == UserRole.STUDENT and application.status not in STUDENT_EDITABLE_STATUSES:
        logger.warning(
            f"Student {actor.id} tried to edit {application.application_number} "
            f"in status {application.status.value}"
        )
        raise ApplicationNotEditableError(application.status)

    changes = data.model_dump(exclude_unset=True)
    remarks = changes.pop("remarks", None)
    changes = clean_profile_payload(filter_update_fields(actor, changes))
    new_status = changes.pop("status", None)

    new_program_id = changes.get("program_id")
    if (
        new_program_id is not None
        and actor.role == UserRole.PROGRAM_ADMIN
        and new_program_id != actor.program_id
    ):
        raise ForbiddenError("You can only assign applications to your own program")

    for field, value in changes.items():
        setattr(application, field, value)

    status_changed = new_status is not None and new_status != application.status
    try:
        if status_changed:
            application = await _transition(db, actor, application, new_status, remarks)
        else:
            application = await repository.save(db, application)
    except IntegrityError:
        await db.rollback()
        raise DuplicateApplicationError() from None

    logger.info(f"Application {application.application_number} updated by {actor.id}")
    if status_changed:
        await _notify(db, emitter, TransitionEvent.STATUS_CHANGED, application)
    return application


async def submit_application(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    emitter: NotificationEmitter | None = None,
) -> Application:
    """
    Submit a draft application for review.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor is not the applicant
        ApplicationNotDraftError: If the status is not exactly draft
        MissingRequiredFieldsError: If a required field was blanked
    """
    application = await _get_authorized(
        db,
        actor,
        application_id,
        Action.APPLICATION_SUBMIT,
        "You can only submit your own applications",
    )
    if application.user_id != actor.id:
        raise ForbiddenError("You can only submit your own applications")

    emitter = emitter or get_notification_emitter()

    if application.status != ApplicationStatus.DRAFT:
        raise ApplicationNotDraftError(application.status)

    missing = missing_required_fields(application)
    if missing:
        raise MissingRequiredFieldsError(missing)

    application = await _transition(
        db, actor, application, ApplicationStatus.SUBMITTED, "Application submitted by student"
    )
    await _notify(db, emitter, TransitionEvent.SUBMITTED, application)
    return application


async def change_status(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    data: StatusChangeRequest,
    emitter: NotificationEmitter | None = None,
) -> Application:
    """
    Move an application to another status (admin or the program's admin).

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        ForbiddenError: If the actor may not review it
        InvalidTransitionError: If the role may not make this move
    """
    application = await _get_authorized(
        db,
        actor,
        application_id,
        Action.APPLICATION_CHANGE_STATUS,
        "You do not have permission to change this application's status",
    )

    if data.status == application.status:
        logger.info(
            f"Status of {application.application_number} already {data.status.value}, "
            f"nothing to do"
        )
        return application

    if not is_transition_allowed(actor, application.status, data.status):
        raise InvalidTransitionError(application.status, data.status)

    emitter = emitter or get_notification_emitter()
    if data.approval_comments is not None:
        application.approval_comments = data.approval_comments

    application = await _transition(db, actor, application, data.status, data.remarks)
    await _notify(db, emitter, TransitionEvent.STATUS_CHANGED, application)
    return application


# ============================================
# Statistics / Bulk
# ============================================


async def get_application_statistics(
    db: AsyncSession,
    actor: Actor,
    academic_year: str | None,
    program_id: UUID | None = None,
) -> dict[str, Any]:
    """
    Application counts for an academic year.

    Program admins are scoped to their own program.

    Raises:
        InvalidArgumentError: If academic_year is missing
        ForbiddenError: If a program admin asks for another program
    """
    ensure_can(actor, Action.APPLICATION_STATISTICS)
    if not academic_year:
        raise InvalidArgumentError("Academic year is required", error_code="ACADEMIC_YEAR_REQUIRED")

    if actor.role == UserRole.PROGRAM_ADMIN:
        if program_id is not None and program_id != actor.program_id:
            raise ForbiddenError("You can only view statistics for your own program")
        if actor.program_id is None:
            raise ForbiddenError("No program is assigned to your account")
        program_id = actor.program_id

    status_stats = await repository.count_by_status(db, academic_year, program_id)
    program_rows = await repository.count_by_program_and_status(db, academic_year, program_id)
    monthly_rows = await repository.count_by_month(db, academic_year, program_id)

    programs: dict[UUID, dict[str, Any]] = {}
    for pid, program_name, department, status, count in program_rows:
        item = programs.setdefault(
            pid,
            {
                "program_id": pid,
                "program_name": program_name,
                "department": department,
                "total_applications": 0,
            },
        )
        item[f"{status}_applications"] = item.get(f"{status}_applications", 0) + count
        item["total_applications"] += count

    return {
        "total_applications": sum(status_stats.values()),
        "status_stats": status_stats,
        "program_stats": list(programs.values()),
        "monthly_stats": [{"month": month, "count": count} for month, count in monthly_rows],
        "generated_at": datetime.now(UTC),
        "filters": {"academic_year": academic_year, "program_id": program_id},
    }


def _validate_bulk_updates(updates: dict[str, Any]) -> dict[str, Any]:
    filtered = {k: v for k, v in updates.items() if k in BULK_UPDATE_FIELDS and v is not None}
    if not filtered:
        raise InvalidArgumentError(
            "No valid update fields provided", error_code="NO_VALID_UPDATE_FIELDS"
        )

    if "status" in filtered:
        try:
            filtered["status"] = ApplicationStatus(filtered["status"])
        except ValueError:
            raise InvalidArgumentError(
                f"Invalid status: {filtered['status']}", error_code="INVALID_STATUS"
            ) from None

    if "academic_year" in filtered:
        year = filtered["academic_year"]
        if not isinstance(year, str) or not year.strip():
            raise InvalidArgumentError(
                "Academic year must be a non-empty string", error_code="INVALID_ACADEMIC_YEAR"
            )
        filtered["academic_year"] = year.strip()
    return filtered


async def bulk_update_applications(
    db: AsyncSession,
    actor: Actor,
    application_ids: list[UUID],
    updates: dict[str, Any],
    remarks: str | None = None,
    emitter: NotificationEmitter | None = None,
) -> dict[str, Any]:
    """
    Apply status and/or academic_year to several applications, item by item.

    Each item is authorized on its own; failures are reported and do not
    undo the items already updated. Items already in the target status get
    no history row.

    Returns:
        Dict with message, updated ids and failed items (id, error, message)
    """
    ensure_can(actor, Action.APPLICATION_BULK_UPDATE)
    filtered = _validate_bulk_updates(updates)
    emitter = emitter or get_notification_emitter()

    target_status: ApplicationStatus | None = filtered.get("status")

    updated: list[UUID] = []
    failed: list[dict[str, Any]] = []
    for application_id in dict.fromkeys(application_ids):
        try:
            application = await repository.get_by_id(db, application_id)
            if application is None:
                raise ApplicationNotFoundError(application_id)
            ensure_can(actor, Action.APPLICATION_CHANGE_STATUS, application)

            if "academic_year" in filtered:
                application.academic_year = filtered["academic_year"]

            status_changed = target_status is not None and target_status != application.status
            if status_changed:
                application = await _transition(
                    db,
                    actor,
                    application,
                    target_status,
                    remarks or f"Bulk status update to {target_status.value}",
                )
            else:
                application = await repository.save(db, application)
        except ServiceError as e:
            failed.append({"id": application_id, "error": e.error_code, "message": e.message})
            continue
        except IntegrityError:
            await db.rollback()
            failed.append(
                {
                    "id": application_id,
                    "error": "DUPLICATE_APPLICATION",
                    "message": "Another application exists for this program and academic year",
                }
            )
            continue

        updated.append(application_id)
        if status_changed:
            await _notify(db, emitter, TransitionEvent.STATUS_CHANGED, application)

    logger.info(f"Bulk update by {actor.id}: {len(updated)} updated, {len(failed)} failed")
    return {
        "message": f"Successfully updated {len(updated)} applications",
        "updated": updated,
        "failed": failed,
    }
