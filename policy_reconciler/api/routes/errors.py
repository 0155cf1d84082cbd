"""Translation of application errors into HTTP errors."""

from fastapi import HTTPException, status

from policy_reconciler.core.exceptions import (
    AppError,
    DatabaseError,
    DuplicateConfirmationError,
    RecordNotFoundError,
    RevisionConflictError,
    ValidationError,
)
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateConfirmationError, status.HTTP_409_CONFLICT),
    (RevisionConflictError, status.HTTP_409_CONFLICT),
    (DatabaseError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(error: AppError, message: str) -> HTTPException:
    """Map an application error to an HTTPException with the standard error body.

    Args:
        error: Error raised by a service
        message: Human-readable summary of the failed operation

    Returns:
        HTTPException: 4xx for client-side conditions, 503 when the store is down, 500 otherwise
    """
    status_code = next(
        (code for error_type, code in STATUS_BY_ERROR if isinstance(error, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    if status_code >= 500:
        LOGGER.error(message, exc_info=error, extra={"error": str(error)})
    else:
        LOGGER.warning(message, extra={"error": str(error), "status_code": status_code})

    return HTTPException(
        status_code=status_code,
        detail={
            "error": type(error).__name__,
            "message": message,
            "detail": str(error),
        },
    )
