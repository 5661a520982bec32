"""Lesson completion entity and Cassandra schema."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from src.utils.timeutils import ensure_utc_aware, utc_now


if TYPE_CHECKING:
    from cassandra.cluster import Row


class ItemStatus(str, Enum):
    """Per-item status in a progress report."""

    NOT_STARTED = "not_started"
    COMPLETED = "completed"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# One partition per (user, course) so a whole course report is one read.
# Rows are created with IF NOT EXISTS and updated conditionally on revision.
LESSON_COMPLETIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_completions (
    user_id UUID,
    course_id UUID,
    content_id UUID,
    completion_id UUID,
    is_completed BOOLEAN,
    completed_at TIMESTAMP,
    time_spent INT,
    progress INT,
    last_accessed_at TIMESTAMP,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    revision INT,
    PRIMARY KEY ((user_id, course_id), content_id)
)
"""

PROGRESS_TABLES_CQL = [
    LESSON_COMPLETIONS_TABLE_CQL,
]


# ==============================================================================
# Entity
# ==============================================================================


@dataclass
class LessonCompletion:
    """A user's progress on one content item.

    Created on the first progress event and mutated afterwards. ``time_spent``
    is cumulative seconds.
    """

    user_id: UUID
    course_id: UUID
    content_id: UUID
    is_completed: bool = False
    completed_at: datetime | None = None
    time_spent: int = 0
    progress: int = 0
    last_accessed_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    revision: int = 0

    @classmethod
    def from_row(cls, row: "Row") -> "LessonCompletion":
        """Create instance from Cassandra row."""
        return cls(
            id=row.completion_id,
            user_id=row.user_id,
            course_id=row.course_id,
            content_id=row.content_id,
            is_completed=bool(row.is_completed),
            completed_at=ensure_utc_aware(row.completed_at),
            time_spent=row.time_spent or 0,
            progress=row.progress or 0,
            last_accessed_at=ensure_utc_aware(row.last_accessed_at),
            created_at=ensure_utc_aware(row.created_at) or utc_now(),
            updated_at=ensure_utc_aware(row.updated_at) or utc_now(),
            revision=row.revision or 0,
        )
