"""Progress errors."""

from src.core.errors import ConflictError, ForbiddenError, ValidationError


class NotEnrolledError(ForbiddenError):
    """Caller has no active or completed enrollment."""

    def __init__(self, message: str = "An active enrollment is required"):
        super().__init__(message, "not_enrolled")


class CompletionModifiedError(ConflictError):
    """Completion record changed between read and write."""

    def __init__(self, message: str = "Progress was updated concurrently, retry"):
        super().__init__(message, "completion_modified")


class InvalidTimeSpentError(ValidationError):
    def __init__(self, message: str = "Time spent cannot be negative"):
        super().__init__(message, "invalid_time_spent")
