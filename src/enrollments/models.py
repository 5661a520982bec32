"""Enrollment entity and Cassandra schema.

An enrollment carries two independent axes:
- status: pending -> active -> completed, or cancelled (terminal)
- payment_status: pending, paid, failed, refunded

They are coupled only by the promotion pending -> active when payment lands.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from src.utils.timeutils import ensure_utc_aware, utc_now


if TYPE_CHECKING:
    from cassandra.cluster import Row


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle status."""

    PENDING = "pending"  # Waiting for payment or activation
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"  # Terminal


class PaymentStatus(str, Enum):
    """Payment status, independent of the lifecycle status."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# Statuses that hold a seat for capacity checks
SEAT_HOLDING_STATUSES = frozenset({EnrollmentStatus.ACTIVE, EnrollmentStatus.PENDING})


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Main table, one partition per course. Writes use lightweight transactions:
# INSERT ... IF NOT EXISTS guarantees one row per (course_id, user_id), and
# updates are conditional on revision.
ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    course_id UUID,
    user_id UUID,
    enrollment_id UUID,
    status TEXT,
    payment_status TEXT,
    payment_amount DECIMAL,
    payment_date TIMESTAMP,
    progress INT,
    notes TEXT,
    enrolled_at TIMESTAMP,
    completed_at TIMESTAMP,
    updated_at TIMESTAMP,
    revision INT,
    PRIMARY KEY ((course_id), user_id)
)
"""

# Lookup: enrollment by id
ENROLLMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_id (
    enrollment_id UUID PRIMARY KEY,
    course_id UUID,
    user_id UUID
)
"""

# Lookup: courses a user is enrolled in
ENROLLMENTS_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_user (
    user_id UUID,
    course_id UUID,
    enrollment_id UUID,
    PRIMARY KEY ((user_id), course_id)
)
"""

ENROLLMENTS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_ID_TABLE_CQL,
    ENROLLMENTS_BY_USER_TABLE_CQL,
]


# ==============================================================================
# Entity
# ==============================================================================


@dataclass
class Enrollment:
    """A user's enrollment in a course. Never hard-deleted."""

    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_amount: Decimal = Decimal(0)
    payment_date: datetime | None = None
    progress: int = 0
    notes: str | None = None
    id: UUID = field(default_factory=uuid4)
    enrolled_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None
    updated_at: datetime = field(default_factory=utc_now)
    revision: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def holds_seat(self) -> bool:
        return self.status in SEAT_HOLDING_STATUSES

    @classmethod
    def from_row(cls, row: "Row") -> "Enrollment":
        """Create instance from Cassandra row."""
        return cls(
            id=row.enrollment_id,
            user_id=row.user_id,
            course_id=row.course_id,
            status=EnrollmentStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            payment_amount=row.payment_amount or Decimal(0),
            payment_date=ensure_utc_aware(row.payment_date),
            progress=row.progress or 0,
            notes=row.notes,
            enrolled_at=ensure_utc_aware(row.enrolled_at) or utc_now(),
            completed_at=ensure_utc_aware(row.completed_at),
            updated_at=ensure_utc_aware(row.updated_at) or utc_now(),
            revision=row.revision or 0,
        )
