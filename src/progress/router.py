"""Progress API endpoints.

Provides routes for:
- Recording progress on a content item
- Reading a content item's completion record
- The caller's computed course progress
- A trainee's course progress (trainer/admin)
"""

from uuid import UUID

from fastapi import APIRouter

from src.access.dependencies import LooseAccessCourse, PaidContentCourse
from src.access.errors import NotAllowedError
from src.access.permissions import can_author_course, can_manage_course
from src.auth.dependencies import CurrentUser, TrainerUser
from src.curriculum.dependencies import CurriculumServiceDep
from src.enrollments.dependencies import EnrollmentServiceDep
from src.enrollments.errors import EnrollmentNotFoundError

from .dependencies import CompletionServiceDep, ProgressAggregatorDep
from .schemas import CompletionResponse, CourseProgressResponse, RecordProgressRequest


router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.post(
    "/courses/{course_id}/contents/{content_id}",
    response_model=CompletionResponse,
    summary="Record progress on a content item",
)
async def record_progress(
    course_id: UUID,
    content_id: UUID,
    data: RecordProgressRequest,
    service: CompletionServiceDep,
    user: CurrentUser,
) -> CompletionResponse:
    completion = await service.record(
        user,
        course_id,
        content_id,
        is_completed=data.is_completed,
        progress=data.progress,
        time_spent=data.time_spent,
    )
    return CompletionResponse.from_completion(completion)


@router.get(
    "/courses/{course_id}/contents/{content_id}",
    response_model=CompletionResponse,
    summary="Get progress on a content item",
)
async def get_content_progress(
    course: PaidContentCourse,
    content_id: UUID,
    service: CompletionServiceDep,
    user: CurrentUser,
) -> CompletionResponse:
    completion = await service.get(user.id, course.id, content_id)
    return CompletionResponse.from_completion(completion)


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Get my course progress",
)
async def get_my_course_progress(
    course: LooseAccessCourse,
    aggregator: ProgressAggregatorDep,
    user: CurrentUser,
) -> CourseProgressResponse:
    """Computed on demand; learners are measured against published content."""
    report = await aggregator.compute(
        user.id, course.id, published_only=not can_author_course(user, course)
    )
    return CourseProgressResponse.from_report(report)


@router.get(
    "/courses/{course_id}/trainees/{trainee_id}",
    response_model=CourseProgressResponse,
    summary="Get a trainee's course progress",
)
async def get_trainee_course_progress(
    course_id: UUID,
    trainee_id: UUID,
    aggregator: ProgressAggregatorDep,
    curriculum: CurriculumServiceDep,
    enrollments: EnrollmentServiceDep,
    user: TrainerUser,
) -> CourseProgressResponse:
    """Measured the way the trainee sees it: published content only."""
    course = await curriculum.get_course(course_id)
    if not can_manage_course(user, course):
        raise NotAllowedError()
    if await enrollments.get_for(trainee_id, course_id) is None:
        raise EnrollmentNotFoundError()
    report = await aggregator.compute(trainee_id, course_id, published_only=True)
    return CourseProgressResponse.from_report(report)
