"""Enrollment API endpoints.

Provides routes for:
- Self-enrollment and trainer/admin assignment (single and bulk)
- Status, payment and progress updates
- Cancellation
- Listing and stats per course
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from src.access.errors import NotAllowedError
from src.access.permissions import (
    can_manage_course,
    can_manage_enrollment,
    can_record_payment,
)
from src.auth.dependencies import CurrentUser, TrainerUser
from src.auth.schemas import Identity
from src.courses.models import Course

from .dependencies import EnrollmentServiceDep
from .models import Enrollment, EnrollmentStatus
from .schemas import (
    AssignEnrollmentRequest,
    BulkAssignRequest,
    BulkAssignResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollmentStatsResponse,
    EnrollRequest,
    RecordPaymentRequest,
    UpdateProgressRequest,
    UpdateStatusRequest,
)
from .service import EnrollmentService


router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


async def _load_managed(
    service: EnrollmentService, enrollment_id: UUID, user: Identity
) -> tuple[Enrollment, Course]:
    """Load an enrollment the caller may act on."""
    enrollment = await service.get(enrollment_id)
    course = await service.get_course(enrollment.course_id)
    if not can_manage_enrollment(user, enrollment, course):
        raise NotAllowedError()
    return enrollment, course


async def _load_course_managed_by(
    service: EnrollmentService, course_id: UUID, user: Identity
) -> Course:
    course = await service.get_course(course_id)
    if not can_manage_course(user, course):
        raise NotAllowedError()
    return course


# ==============================================================================
# Creation
# ==============================================================================


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll_in_course(
    data: EnrollRequest,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Enroll the caller. Free courses become active immediately."""
    enrollment = await service.create(
        user.id,
        data.course_id,
        requested_amount=data.payment_amount,
        notes=data.notes,
    )
    return EnrollmentResponse.from_enrollment(enrollment)


@router.post(
    "/assign",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a trainee to a course",
)
async def assign_enrollment(
    data: AssignEnrollmentRequest,
    service: EnrollmentServiceDep,
    user: TrainerUser,
) -> EnrollmentResponse:
    await _load_course_managed_by(service, data.course_id, user)
    enrollment = await service.assign(
        data.user_id,
        data.course_id,
        assigned_by=user.id,
        status=data.status,
        notes=data.notes,
    )
    return EnrollmentResponse.from_enrollment(enrollment)


@router.post(
    "/bulk",
    response_model=BulkAssignResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign several trainees to a course",
)
async def bulk_assign_enrollments(
    data: BulkAssignRequest,
    service: EnrollmentServiceDep,
    user: TrainerUser,
) -> BulkAssignResponse:
    """Already enrolled trainees are skipped and counted."""
    await _load_course_managed_by(service, data.course_id, user)
    assignment = await service.assign_many(
        data.user_ids,
        data.course_id,
        assigned_by=user.id,
        status=data.status,
        notes=data.notes,
    )
    return BulkAssignResponse.from_assignment(assignment)


# ==============================================================================
# Queries
# ==============================================================================


@router.get("/my", response_model=EnrollmentListResponse, summary="My enrollments")
async def list_my_enrollments(
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentListResponse:
    enrollments = await service.list_for_user(user.id)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_enrollment(e) for e in enrollments],
        total=len(enrollments),
    )


@router.get(
    "/courses/{course_id}",
    response_model=EnrollmentListResponse,
    summary="List course enrollments",
)
async def list_course_enrollments(
    course_id: UUID,
    service: EnrollmentServiceDep,
    user: TrainerUser,
    status_filter: EnrollmentStatus | None = Query(default=None, alias="status"),
) -> EnrollmentListResponse:
    await _load_course_managed_by(service, course_id, user)
    enrollments = await service.list_for_course(course_id, status_filter)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_enrollment(e) for e in enrollments],
        total=len(enrollments),
    )


@router.get(
    "/courses/{course_id}/stats",
    response_model=EnrollmentStatsResponse,
    summary="Enrollment counts per status",
)
async def get_course_enrollment_stats(
    course_id: UUID,
    service: EnrollmentServiceDep,
    user: TrainerUser,
) -> EnrollmentStatsResponse:
    await _load_course_managed_by(service, course_id, user)
    enrollments = await service.list_for_course(course_id)
    return EnrollmentStatsResponse.from_stats(service.stats(enrollments))


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: UUID,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    enrollment, _ = await _load_managed(service, enrollment_id, user)
    return EnrollmentResponse.from_enrollment(enrollment)


# ==============================================================================
# Transitions
# ==============================================================================


@router.put("/{enrollment_id}/status", response_model=EnrollmentResponse)
async def update_enrollment_status(
    enrollment_id: UUID,
    data: UpdateStatusRequest,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    await _load_managed(service, enrollment_id, user)
    enrollment = await service.set_status(enrollment_id, data.status, notes=data.notes)
    return EnrollmentResponse.from_enrollment(enrollment)


@router.put("/{enrollment_id}/payment", response_model=EnrollmentResponse)
async def record_enrollment_payment(
    enrollment_id: UUID,
    data: RecordPaymentRequest,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Record a payment outcome (admin or course trainer)."""
    existing = await service.get(enrollment_id)
    course = await service.get_course(existing.course_id)
    if not can_record_payment(user, course):
        raise NotAllowedError()

    enrollment = await service.record_payment(
        enrollment_id,
        data.payment_status,
        payment_amount=data.payment_amount,
        notes=data.notes,
    )
    return EnrollmentResponse.from_enrollment(enrollment)


@router.put("/{enrollment_id}/progress", response_model=EnrollmentResponse)
async def update_enrollment_progress(
    enrollment_id: UUID,
    data: UpdateProgressRequest,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    await _load_managed(service, enrollment_id, user)
    enrollment = await service.set_progress(enrollment_id, data.progress)
    return EnrollmentResponse.from_enrollment(enrollment)


@router.delete("/{enrollment_id}", response_model=EnrollmentResponse)
async def cancel_enrollment(
    enrollment_id: UUID,
    service: EnrollmentServiceDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Cancel an enrollment. The record is kept with status cancelled."""
    await _load_managed(service, enrollment_id, user)
    enrollment = await service.cancel(enrollment_id)
    return EnrollmentResponse.from_enrollment(enrollment)
