"""Enrollment errors."""

from src.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment does not exist."""

    def __init__(self, message: str = "Enrollment not found"):
        super().__init__(message, "enrollment_not_found")


class DuplicateEnrollmentError(ConflictError):
    """User already has an enrollment for the course."""

    def __init__(self, message: str = "User is already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class EnrollmentModifiedError(ConflictError):
    """Enrollment changed between read and write."""

    def __init__(self, message: str = "Enrollment was modified concurrently"):
        super().__init__(message, "enrollment_modified")


class CourseUnavailableError(InvalidStateError):
    """Course is not published."""

    def __init__(self, message: str = "Course is not available for enrollment"):
        super().__init__(message, "course_unavailable")


class CourseFullError(InvalidStateError):
    """Course reached max_students."""

    def __init__(self, message: str = "Course has reached maximum capacity"):
        super().__init__(message, "course_full")


class EnrollmentCancelledError(InvalidStateError):
    """Cancelled enrollments cannot change status."""

    def __init__(self, message: str = "Enrollment is cancelled"):
        super().__init__(message, "enrollment_cancelled")


class InvalidEnrollmentValueError(ValidationError):
    """Status or payment value outside the allowed set."""

    def __init__(self, message: str = "Invalid enrollment value"):
        super().__init__(message, "invalid_enrollment_value")


class AllAlreadyEnrolledError(InvalidStateError):
    """Bulk assignment where every user already has a row."""

    def __init__(
        self,
        message: str = "All selected trainees are already enrolled in this course",
    ):
        super().__init__(message, "all_enrolled")
