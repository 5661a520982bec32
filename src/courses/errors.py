"""Course lookup errors."""

from src.core.errors import NotFoundError


class CourseNotFoundError(NotFoundError):
    """Course does not exist."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")
