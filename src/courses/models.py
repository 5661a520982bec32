"""Course entity and Cassandra schema."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from src.utils.timeutils import ensure_utc_aware, utc_now


if TYPE_CHECKING:
    from cassandra.cluster import Row


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    trainer_id UUID,
    price DECIMAL,
    is_published BOOLEAN,
    max_students INT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

COURSES_TABLES_CQL = [
    COURSES_TABLE_CQL,
]


# ==============================================================================
# Entity
# ==============================================================================


@dataclass
class Course:
    """A course as seen by enrollment, access and curriculum logic."""

    title: str
    price: Decimal = Decimal(0)
    trainer_id: UUID | None = None
    is_published: bool = False
    max_students: int | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_free(self) -> bool:
        return self.price == 0

    def is_owned_by(self, user_id: UUID) -> bool:
        """Check whether ``user_id`` is the course's trainer."""
        return self.trainer_id is not None and self.trainer_id == user_id

    @classmethod
    def from_row(cls, row: "Row") -> "Course":
        """Create instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            trainer_id=row.trainer_id,
            price=row.price if row.price is not None else Decimal(0),
            is_published=bool(row.is_published),
            max_students=row.max_students,
            created_at=ensure_utc_aware(row.created_at) or utc_now(),
            updated_at=ensure_utc_aware(row.updated_at) or utc_now(),
        )
