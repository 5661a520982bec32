"""Enrollment API schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import Enrollment, EnrollmentStatus, PaymentStatus
from .service import BulkAssignment, EnrollmentStats


# ==============================================================================
# Request Schemas
# ==============================================================================


class EnrollRequest(BaseModel):
    """Self-enrollment request."""

    course_id: UUID
    payment_amount: Decimal | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=1000)


class AssignEnrollmentRequest(BaseModel):
    """Trainer/admin enrolls a trainee."""

    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    notes: str | None = Field(default=None, max_length=1000)


class BulkAssignRequest(BaseModel):
    """Trainer/admin enrolls several trainees in one course."""

    course_id: UUID
    user_ids: list[UUID] = Field(min_length=1)
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    notes: str | None = Field(default=None, max_length=1000)


class UpdateStatusRequest(BaseModel):
    status: EnrollmentStatus
    notes: str | None = Field(default=None, max_length=1000)


class RecordPaymentRequest(BaseModel):
    payment_status: PaymentStatus
    payment_amount: Decimal | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=1000)


class UpdateProgressRequest(BaseModel):
    """Progress percent; values outside 0..100 are clamped."""

    progress: int


# ==============================================================================
# Response Schemas
# ==============================================================================


class EnrollmentResponse(BaseModel):
    """Single enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    payment_status: PaymentStatus
    payment_amount: Decimal
    payment_date: datetime | None = None
    progress: int
    notes: str | None = None
    enrolled_at: datetime
    completed_at: datetime | None = None
    updated_at: datetime

    @classmethod
    def from_enrollment(cls, enrollment: Enrollment) -> "EnrollmentResponse":
        return cls.model_validate(enrollment)


class EnrollmentListResponse(BaseModel):
    items: list[EnrollmentResponse]
    total: int


class BulkAssignResponse(BaseModel):
    """Created enrollments and how many users were already enrolled."""

    items: list[EnrollmentResponse]
    created: int
    skipped: int

    @classmethod
    def from_assignment(cls, assignment: BulkAssignment) -> "BulkAssignResponse":
        return cls(
            items=[EnrollmentResponse.from_enrollment(e) for e in assignment.created],
            created=len(assignment.created),
            skipped=assignment.skipped,
        )


class EnrollmentStatsResponse(BaseModel):
    """Enrollment counts per status."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    pending: int
    active: int
    completed: int
    cancelled: int

    @classmethod
    def from_stats(cls, stats: EnrollmentStats) -> "EnrollmentStatsResponse":
        return cls.model_validate(stats)
