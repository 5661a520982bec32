"""Enrollment lifecycle service layer.

Business logic for:
- Self-enrollment and trainer/admin assignment
- Payment recording with pending -> active promotion
- Status transitions (cancelled is terminal)
- Manual progress percent
- Course enrollment listing and stats

Permission checks happen in the caller; this layer only enforces the
lifecycle rules.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from src.core.logging import get_logger
from src.courses.errors import CourseNotFoundError
from src.courses.models import Course
from src.courses.store import CourseStore
from src.utils.timeutils import utc_now

from .errors import (
    AllAlreadyEnrolledError,
    CourseFullError,
    CourseUnavailableError,
    DuplicateEnrollmentError,
    EnrollmentCancelledError,
    EnrollmentNotFoundError,
    InvalidEnrollmentValueError,
)
from .models import Enrollment, EnrollmentStatus, PaymentStatus
from .store import EnrollmentStore


logger = get_logger(__name__)

PROGRESS_MIN = 0
PROGRESS_MAX = 100

# Statuses a trainer/admin may choose when assigning a trainee
ASSIGNABLE_STATUSES = frozenset({EnrollmentStatus.PENDING, EnrollmentStatus.ACTIVE})


@dataclass
class EnrollmentStats:
    """Enrollment counts per status."""

    total: int
    pending: int
    active: int
    completed: int
    cancelled: int


@dataclass
class BulkAssignment:
    """Outcome of a bulk assignment."""

    created: list[Enrollment] = field(default_factory=list)
    skipped: int = 0


def _as_status(value: EnrollmentStatus | str) -> EnrollmentStatus:
    try:
        return EnrollmentStatus(value)
    except ValueError as e:
        raise InvalidEnrollmentValueError(f"Invalid status: {value}") from e


def _as_payment_status(value: PaymentStatus | str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError as e:
        raise InvalidEnrollmentValueError(f"Invalid payment status: {value}") from e


def _as_assignable_status(value: EnrollmentStatus | str) -> EnrollmentStatus:
    status = _as_status(value)
    if status not in ASSIGNABLE_STATUSES:
        msg = "Assigned enrollments must start pending or active"
        raise InvalidEnrollmentValueError(msg)
    return status


def _seats_taken(enrollments: list[Enrollment]) -> int:
    return sum(1 for e in enrollments if e.holds_seat)


def _new_enrollment(
    user_id: UUID,
    course: Course,
    status: EnrollmentStatus,
    amount: Decimal | None,
    notes: str | None,
) -> Enrollment:
    """Build an unsaved enrollment. Free courses start paid and active."""
    now = utc_now()
    enrollment = Enrollment(
        user_id=user_id,
        course_id=course.id,
        status=status,
        payment_amount=amount if amount is not None else course.price,
        notes=notes,
        enrolled_at=now,
        updated_at=now,
    )
    if course.is_free:
        enrollment.payment_status = PaymentStatus.PAID
        enrollment.payment_date = now
        enrollment.status = EnrollmentStatus.ACTIVE
    return enrollment


class EnrollmentService:
    """Service for the enrollment lifecycle."""

    def __init__(self, enrollments: EnrollmentStore, courses: CourseStore):
        self.enrollments = enrollments
        self.courses = courses

    # ==========================================================================
    # Creation
    # ==========================================================================

    async def create(
        self,
        user_id: UUID,
        course_id: UUID,
        requested_amount: Decimal | None = None,
        notes: str | None = None,
    ) -> Enrollment:
        """Enroll a user in a course.

        Free courses are paid and active immediately; paid courses start
        pending on both axes.

        Raises:
            CourseNotFoundError: course does not exist
            CourseUnavailableError: course is not published
            CourseFullError: max_students reached
            DuplicateEnrollmentError: user already enrolled
        """
        course = await self.get_course(course_id)
        enrollment = await self._open(
            user_id,
            course,
            status=EnrollmentStatus.PENDING,
            amount=requested_amount,
            notes=notes,
        )
        logger.info(
            "enrollment_created",
            enrollment_id=str(enrollment.id),
            user_id=str(user_id),
            course_id=str(course_id),
            status=enrollment.status.value,
            payment_status=enrollment.payment_status.value,
        )
        return enrollment

    async def assign(
        self,
        user_id: UUID,
        course_id: UUID,
        assigned_by: UUID,
        status: EnrollmentStatus | str = EnrollmentStatus.ACTIVE,
        notes: str | None = None,
    ) -> Enrollment:
        """Enroll a trainee on behalf of a trainer or admin."""
        initial_status = _as_assignable_status(status)
        course = await self.get_course(course_id)
        enrollment = await self._open(
            user_id, course, status=initial_status, amount=None, notes=notes
        )
        logger.info(
            "enrollment_assigned",
            enrollment_id=str(enrollment.id),
            user_id=str(user_id),
            course_id=str(course_id),
            assigned_by=str(assigned_by),
            status=enrollment.status.value,
        )
        return enrollment

    async def _open(
        self,
        user_id: UUID,
        course: Course,
        status: EnrollmentStatus,
        amount: Decimal | None,
        notes: str | None,
    ) -> Enrollment:
        if not course.is_published:
            raise CourseUnavailableError()

        # Uniqueness is left to the store's conditional insert. A user who
        # already has a row gets a conflict, never a capacity error.
        if course.max_students is not None:
            existing = await self.enrollments.list_for_course(course.id)
            already = any(e.user_id == user_id for e in existing)
            if not already and _seats_taken(existing) >= course.max_students:
                raise CourseFullError()

        enrollment = _new_enrollment(user_id, course, status, amount, notes)
        await self.enrollments.insert(enrollment)
        return enrollment

    async def assign_many(
        self,
        user_ids: list[UUID],
        course_id: UUID,
        assigned_by: UUID,
        status: EnrollmentStatus | str = EnrollmentStatus.ACTIVE,
        notes: str | None = None,
    ) -> BulkAssignment:
        """Enroll several trainees at once.

        Users who already hold a row for the course are skipped. Capacity is
        checked for the whole batch before anything is written.

        Raises:
            CourseUnavailableError: course is not published
            AllAlreadyEnrolledError: every user already has a row
            CourseFullError: the new users do not fit in the remaining seats
        """
        initial_status = _as_assignable_status(status)
        course = await self.get_course(course_id)
        if not course.is_published:
            raise CourseUnavailableError()

        existing = await self.enrollments.list_for_course(course.id)
        enrolled = {e.user_id for e in existing}
        requested = list(dict.fromkeys(user_ids))
        newcomers = [u for u in requested if u not in enrolled]
        if not newcomers:
            raise AllAlreadyEnrolledError()

        if course.max_students is not None:
            remaining = max(course.max_students - _seats_taken(existing), 0)
            if len(newcomers) > remaining:
                raise CourseFullError(
                    f"Course capacity exceeded. Only {remaining} more trainees "
                    "can be enrolled"
                )

        created: list[Enrollment] = []
        skipped = len(requested) - len(newcomers)
        for user_id in newcomers:
            enrollment = _new_enrollment(
                user_id, course, initial_status, amount=None, notes=notes
            )
            try:
                await self.enrollments.insert(enrollment)
            except DuplicateEnrollmentError:
                # Enrolled concurrently since the listing above
                skipped += 1
                continue
            created.append(enrollment)

        logger.info(
            "enrollments_bulk_assigned",
            course_id=str(course_id),
            assigned_by=str(assigned_by),
            created=len(created),
            skipped=skipped,
        )
        return BulkAssignment(created=created, skipped=skipped)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    async def record_payment(
        self,
        enrollment_id: UUID,
        payment_status: PaymentStatus | str,
        payment_amount: Decimal | None = None,
        notes: str | None = None,
    ) -> Enrollment:
        """Record a payment outcome.

        Moving into paid promotes a pending enrollment to active and stamps
        payment_date the first time. Failed or refunded never demote.
        """
        new_payment_status = _as_payment_status(payment_status)
        enrollment = await self.get(enrollment_id)
        expected_revision = enrollment.revision
        previous = enrollment.payment_status

        enrollment.payment_status = new_payment_status
        if payment_amount is not None:
            enrollment.payment_amount = payment_amount
        if notes is not None:
            enrollment.notes = notes

        if new_payment_status == PaymentStatus.PAID and previous != PaymentStatus.PAID:
            if enrollment.payment_date is None:
                enrollment.payment_date = utc_now()
            if enrollment.status == EnrollmentStatus.PENDING:
                enrollment.status = EnrollmentStatus.ACTIVE

        await self._save(enrollment, expected_revision)
        logger.info(
            "payment_recorded",
            enrollment_id=str(enrollment.id),
            previous_payment_status=previous.value,
            payment_status=new_payment_status.value,
            status=enrollment.status.value,
        )
        return enrollment

    async def set_status(
        self,
        enrollment_id: UUID,
        status: EnrollmentStatus | str,
        notes: str | None = None,
    ) -> Enrollment:
        """Change the lifecycle status.

        Raises:
            InvalidEnrollmentValueError: status outside the enum
            EnrollmentCancelledError: enrollment is cancelled
        """
        new_status = _as_status(status)
        enrollment = await self.get(enrollment_id)
        previous = enrollment.status

        if previous == EnrollmentStatus.CANCELLED:
            if new_status == EnrollmentStatus.CANCELLED:
                return enrollment
            raise EnrollmentCancelledError()

        expected_revision = enrollment.revision
        enrollment.status = new_status
        if notes is not None:
            enrollment.notes = notes
        if new_status == EnrollmentStatus.COMPLETED and previous != new_status:
            enrollment.completed_at = utc_now()

        await self._save(enrollment, expected_revision)
        logger.info(
            "enrollment_status_changed",
            enrollment_id=str(enrollment.id),
            previous_status=previous.value,
            status=new_status.value,
        )
        return enrollment

    async def cancel(self, enrollment_id: UUID) -> Enrollment:
        """Cancel an enrollment. The row is kept."""
        return await self.set_status(enrollment_id, EnrollmentStatus.CANCELLED)

    async def set_progress(self, enrollment_id: UUID, percent: int) -> Enrollment:
        """Set the stored progress percent, clamped to 0..100."""
        enrollment = await self.get(enrollment_id)
        expected_revision = enrollment.revision
        enrollment.progress = max(PROGRESS_MIN, min(PROGRESS_MAX, percent))

        await self._save(enrollment, expected_revision)
        logger.debug(
            "enrollment_progress_set",
            enrollment_id=str(enrollment.id),
            progress=enrollment.progress,
        )
        return enrollment

    async def _save(self, enrollment: Enrollment, expected_revision: int) -> None:
        enrollment.updated_at = utc_now()
        enrollment.revision = expected_revision + 1
        await self.enrollments.update(enrollment, expected_revision)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, enrollment_id: UUID) -> Enrollment:
        enrollment = await self.enrollments.get(enrollment_id)
        if not enrollment:
            raise EnrollmentNotFoundError()
        return enrollment

    async def get_for(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        return await self.enrollments.get_for(user_id, course_id)

    async def get_course(self, course_id: UUID) -> Course:
        course = await self.courses.get(course_id)
        if not course:
            raise CourseNotFoundError()
        return course

    async def list_for_user(self, user_id: UUID) -> list[Enrollment]:
        enrollments = await self.enrollments.list_for_user(user_id)
        return sorted(enrollments, key=lambda e: e.enrolled_at, reverse=True)

    async def list_for_course(
        self,
        course_id: UUID,
        status: EnrollmentStatus | str | None = None,
    ) -> list[Enrollment]:
        wanted = _as_status(status) if status is not None else None
        enrollments = await self.enrollments.list_for_course(course_id)
        if wanted is not None:
            enrollments = [e for e in enrollments if e.status == wanted]
        return sorted(enrollments, key=lambda e: e.enrolled_at, reverse=True)

    @staticmethod
    def stats(enrollments: list[Enrollment]) -> EnrollmentStats:
        """Count enrollments per status."""
        counts = Counter(e.status for e in enrollments)
        return EnrollmentStats(
            total=len(enrollments),
            pending=counts[EnrollmentStatus.PENDING],
            active=counts[EnrollmentStatus.ACTIVE],
            completed=counts[EnrollmentStatus.COMPLETED],
            cancelled=counts[EnrollmentStatus.CANCELLED],
        )
