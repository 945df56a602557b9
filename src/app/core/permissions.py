"""
Capability Checks

Single authorization entry point for every service: ``can(actor, action, resource)``.

Each role maps actions to the scope under which they are granted:
- ANY: no resource scoping (e.g. creating an application)
- OWNER: the resource's owner must be the actor
- PROGRAM: the resource's program must be the actor's assigned program

Admins hold every capability unconditionally.
"""

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

from app.core.errors import ForbiddenError
from app.modules.users.models import UserRole

if TYPE_CHECKING:
    from app.core.auth import Actor

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    """Actions that can be authorized."""

    APPLICATION_CREATE = "application:create"
    APPLICATION_READ = "application:read"
    APPLICATION_UPDATE = "application:update"
    APPLICATION_SUBMIT = "application:submit"
    APPLICATION_CHANGE_STATUS = "application:change_status"
    APPLICATION_BULK_UPDATE = "application:bulk_update"
    APPLICATION_STATISTICS = "application:statistics"

    DOCUMENT_READ = "document:read"
    DOCUMENT_ADD = "document:add"
    DOCUMENT_UPDATE = "document:update"
    DOCUMENT_VERIFY = "document:verify"
    DOCUMENT_DELETE = "document:delete"

    FILE_UPLOAD = "file:upload"
    FILE_READ = "file:read"
    FILE_VERIFY = "file:verify"
    FILE_DELETE = "file:delete"

    PROGRAM_MANAGE = "program:manage"
    REQUIREMENT_MANAGE = "requirement:manage"
    CERTIFICATE_TYPE_MANAGE = "certificate_type:manage"

    NOTIFICATION_READ = "notification:read"
    NOTIFICATION_MANAGE = "notification:manage"


class Scope(str, enum.Enum):
    """How a granted action is scoped to the resource."""

    ANY = "any"
    OWNER = "owner"
    PROGRAM = "program"


@dataclass(frozen=True)
class ResourceScope:
    """Ownership and program scope extracted from a resource."""

    owner_id: UUID | None = None
    program_id: UUID | None = None


CAPABILITIES: dict[UserRole, dict[Action, Scope]] = {
    UserRole.STUDENT: {
        Action.APPLICATION_CREATE: Scope.ANY,
        Action.APPLICATION_READ: Scope.OWNER,
        Action.APPLICATION_UPDATE: Scope.OWNER,
        Action.APPLICATION_SUBMIT: Scope.OWNER,
        Action.DOCUMENT_READ: Scope.OWNER,
        Action.DOCUMENT_ADD: Scope.OWNER,
        Action.DOCUMENT_UPDATE: Scope.OWNER,
        Action.DOCUMENT_DELETE: Scope.OWNER,
        Action.FILE_UPLOAD: Scope.ANY,
        Action.FILE_READ: Scope.OWNER,
        Action.FILE_DELETE: Scope.OWNER,
        Action.NOTIFICATION_READ: Scope.OWNER,
    },
    UserRole.PROGRAM_ADMIN: {
        Action.APPLICATION_READ: Scope.PROGRAM,
        Action.APPLICATION_UPDATE: Scope.PROGRAM,
        Action.APPLICATION_CHANGE_STATUS: Scope.PROGRAM,
        Action.APPLICATION_BULK_UPDATE: Scope.ANY,
        Action.APPLICATION_STATISTICS: Scope.ANY,
        Action.DOCUMENT_READ: Scope.PROGRAM,
        Action.DOCUMENT_ADD: Scope.PROGRAM,
        Action.DOCUMENT_UPDATE: Scope.PROGRAM,
        Action.DOCUMENT_VERIFY: Scope.PROGRAM,
        Action.DOCUMENT_DELETE: Scope.PROGRAM,
        Action.FILE_UPLOAD: Scope.ANY,
        Action.FILE_READ: Scope.ANY,
        Action.FILE_VERIFY: Scope.ANY,
        Action.FILE_DELETE: Scope.OWNER,
        Action.NOTIFICATION_READ: Scope.OWNER,
    },
}


def scope_of(resource: Any) -> ResourceScope:
    """
    Extract owner and program scope from a resource.

    Understands application-like objects (user_id, program_id), file
    references (uploaded_by) and explicit ResourceScope values.
    """
    if resource is None:
        return ResourceScope()
    if isinstance(resource, ResourceScope):
        return resource

    owner_id = getattr(resource, "user_id", None) or getattr(resource, "uploaded_by", None)
    program_id = getattr(resource, "program_id", None)
    return ResourceScope(owner_id=owner_id, program_id=program_id)


def can(actor: "Actor", action: Action, resource: Any = None) -> bool:
    """
    Decide whether an actor may perform an action on a resource.

    Args:
        actor: The authenticated caller
        action: The action being attempted
        resource: The entity acted upon (or None for unscoped actions)

    Returns:
        True if the action is permitted
    """
    if actor.role == UserRole.ADMIN:
        return True

    scope = CAPABILITIES.get(actor.role, {}).get(action)
    if scope is None:
        return False
    if scope == Scope.ANY:
        return True

    target = scope_of(resource)
    if scope == Scope.OWNER:
        return target.owner_id is not None and target.owner_id == actor.id
    if scope == Scope.PROGRAM:
        return (
            actor.program_id is not None
            and target.program_id is not None
            and target.program_id == actor.program_id
        )
    return False


def ensure_can(
    actor: "Actor",
    action: Action,
    resource: Any = None,
    message: str | None = None,
) -> None:
    """
    Raise ForbiddenError unless the actor may perform the action.

    Raises:
        ForbiddenError: If can() denies the action
    """
    if not can(actor, action, resource):
        logger.warning(f"Permission denied: {actor} attempted {action.value}")
        raise ForbiddenError(message or "You do not have permission to perform this action")


__all__ = ["Action", "Scope", "ResourceScope", "CAPABILITIES", "can", "ensure_can", "scope_of"]
