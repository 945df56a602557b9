"""
Service Errors

Error taxonomy shared by every service module. Routers translate these into
HTTP responses with a machine-checkable ``error`` code and a readable message.
"""

import logging
from typing import NoReturn

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when an entity id does not resolve."""

    def __init__(self, message: str = "Resource not found", error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class ForbiddenError(ServiceError):
    """Raised when the actor lacks permission for the entity or action."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        error_code: str = "FORBIDDEN",
    ):
        super().__init__(message=message, error_code=error_code, status_code=403)


class InvalidStateError(ServiceError):
    """Raised when an action is not valid for the entity's current status."""

    def __init__(self, message: str, error_code: str = "INVALID_STATE"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class InvalidArgumentError(ServiceError):
    """Raised when input is malformed or a required value is missing."""

    def __init__(self, message: str, error_code: str = "INVALID_ARGUMENT"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class ConflictError(ServiceError):
    """Raised on uniqueness violations."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


def raise_http_error(e: ServiceError) -> NoReturn:
    """Convert a service error to an HTTPException."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def raise_internal_error(e: Exception, context: str) -> NoReturn:
    """Log an unexpected exception and raise a generic 500."""
    logger.exception(f"Error {context}: {e}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    ) from e
