"""Custom exception classes for the reconciliation service."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class ValidationError(AppError):
    """Raised when a caller violates an input precondition."""
    pass


class InvalidCandidateError(ValidationError):
    """Raised when the raw candidate, existing record or confirmation set is malformed.

    This signals a collaborator bug, not a data-quality problem: data-quality
    problems are reported through the ValidationResult instead.
    """
    pass


class InvalidConfirmationError(ValidationError):
    """Raised when a confirmation request names an unknown field or an empty value."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class RecordNotFoundError(AppError):
    """Raised when a policy record does not exist."""
    pass


class RevisionConflictError(AppError):
    """Raised when a compare-and-swap update finds a newer revision than the one read."""

    def __init__(self, message: str, expected_revision: int = None, original_error: Exception = None):
        super().__init__(message, original_error=original_error)
        self.expected_revision = expected_revision


class DuplicateConfirmationError(AppError):
    """Raised when a field is already confirmed for a record.

    Recoverable: callers should report "already confirmed" rather than fail.
    """

    def __init__(self, record_id, field_name: str, original_error: Exception = None):
        super().__init__(
            f"Field '{field_name}' is already confirmed for record {record_id}",
            original_error=original_error,
        )
        self.record_id = record_id
        self.field_name = field_name


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass
