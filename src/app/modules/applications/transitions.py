"""
Application Status Transitions

The status state machine and the table mapping each lifecycle event to the
audience that is notified about it.

Students move their own application draft -> submitted and nothing else.
Admins, and program admins within their program, may move an application
to any status other than its current one. Requesting the current status
is a no-op and never reaches this table.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from app.core.auth import Actor
from app.modules.applications.models import Application, ApplicationStatus
from app.modules.notifications.models import NotificationType
from app.modules.users.models import UserRole

# Statuses in which the owning student may still edit the form
STUDENT_EDITABLE_STATUSES = frozenset({ApplicationStatus.DRAFT, ApplicationStatus.REJECTED})

STUDENT_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.DRAFT: frozenset({ApplicationStatus.SUBMITTED}),
}

REVIEW_STATUSES = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


def is_transition_allowed(
    actor: Actor, from_status: ApplicationStatus, to_status: ApplicationStatus
) -> bool:
    """Whether the actor's role may move an application between two distinct statuses."""
    if from_status == to_status:
        return False
    if actor.role in (UserRole.ADMIN, UserRole.PROGRAM_ADMIN):
        return True
    return to_status in STUDENT_TRANSITIONS.get(from_status, frozenset())


def stamp_transition(
    application: Application,
    to_status: ApplicationStatus,
    actor_id: UUID,
    now: datetime,
) -> None:
    """
    Set the one-shot timestamps for a move into to_status.

    submitted_at is set on the first move into submitted; reviewed_by and
    reviewed_at on the first move into approved or rejected. Values that
    are already set are never overwritten.
    """
    if to_status == ApplicationStatus.SUBMITTED and application.submitted_at is None:
        application.submitted_at = now
    if to_status in REVIEW_STATUSES and application.reviewed_at is None:
        application.reviewed_by = actor_id
        application.reviewed_at = now


# ============================================
# Notification rules
# ============================================


class TransitionEvent(str, enum.Enum):
    CREATED = "created"
    SUBMITTED = "submitted"
    STATUS_CHANGED = "status_changed"


class Audience(str, enum.Enum):
    OWNER = "owner"
    PROGRAM_ADMINS = "program_admins"


def status_notification_type(status: ApplicationStatus) -> NotificationType:
    if status == ApplicationStatus.APPROVED:
        return NotificationType.SUCCESS
    if status == ApplicationStatus.REJECTED:
        return NotificationType.DANGER
    return NotificationType.INFO


@dataclass(frozen=True)
class NotificationRule:
    """Who hears about an event and what they are told."""

    audience: Audience
    title: str
    message: str
    notification_type: Callable[[ApplicationStatus], NotificationType] = (
        lambda _status: NotificationType.INFO
    )

    def render(self, application: Application, program_name: str = "") -> str:
        return self.message.format(
            number=application.application_number,
            program_name=program_name,
            status=application.status.value.upper(),
        )


NOTIFICATION_RULES: dict[TransitionEvent, NotificationRule] = {
    TransitionEvent.CREATED: NotificationRule(
        audience=Audience.OWNER,
        title="Application Created",
        message=(
            "Your application #{number} has been created successfully. "
            "Please complete and submit it."
        ),
    ),
    TransitionEvent.SUBMITTED: NotificationRule(
        audience=Audience.PROGRAM_ADMINS,
        title="New Application Submitted",
        message=(
            "A new application #{number} for {program_name} has been submitted "
            "and is pending review."
        ),
    ),
    TransitionEvent.STATUS_CHANGED: NotificationRule(
        audience=Audience.OWNER,
        title="Application Status Updated",
        message="Your application #{number} status has been changed to {status}.",
        notification_type=status_notification_type,
    ),
}


def application_action_url(application: Application) -> str:
    return f"/applications/{application.id}"
