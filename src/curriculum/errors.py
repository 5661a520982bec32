"""Curriculum errors."""

from src.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ServerError,
    ValidationError,
)


class SectionNotFoundError(NotFoundError):
    def __init__(self, message: str = "Section not found"):
        super().__init__(message, "section_not_found")


class ContentNotFoundError(NotFoundError):
    def __init__(self, message: str = "Content item not found"):
        super().__init__(message, "content_not_found")


class InvalidOrderError(ValidationError):
    """Requested order is negative."""

    def __init__(self, message: str = "Order must be zero or greater"):
        super().__init__(message, "invalid_order")


class InvalidContentTypeError(ValidationError):
    """Unknown content type."""

    def __init__(self, message: str = "Invalid content type"):
        super().__init__(message, "invalid_content_type")


class SectionCourseMismatchError(ValidationError):
    """Section belongs to another course."""

    def __init__(self, message: str = "Section does not belong to this course"):
        super().__init__(message, "section_course_mismatch")


class SectionHasChildrenError(InvalidStateError):
    """Section still holds content items."""

    def __init__(self, message: str = "Cannot delete a section that has content"):
        super().__init__(message, "has_children")


class OrderingConflictError(ConflictError):
    """Siblings changed between read and write."""

    def __init__(self, message: str = "Ordering changed concurrently, retry"):
        super().__init__(message, "ordering_conflict")


class OrderingInvariantError(ServerError):
    """Planned positions would collide. Indicates a bug or corrupt data."""

    def __init__(self, message: str = "Sibling order would not be unique"):
        super().__init__(message, "ordering_invariant")
