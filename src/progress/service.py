"""Progress service layer.

Business logic for:
- Recording per-content progress events (lazy completion records)
- Computing a learner's course progress report on demand

The computed report is never written back to ``Enrollment.progress``; the
two numbers are maintained independently.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from src.auth.schemas import Identity
from src.core.logging import get_logger
from src.courses.models import Course
from src.curriculum.errors import ContentNotFoundError
from src.curriculum.models import ContentType
from src.curriculum.service import CurriculumService
from src.enrollments.models import EnrollmentStatus
from src.enrollments.store import EnrollmentStore
from src.utils.numbers import percent_half_up
from src.utils.timeutils import utc_now

from .errors import (
    CompletionModifiedError,
    InvalidTimeSpentError,
    NotEnrolledError,
)
from .models import ItemStatus, LessonCompletion
from .store import CompletionStore


logger = get_logger(__name__)

DEFAULT_RECENT_ACTIVITY_LIMIT = 10

# Enrollment statuses allowed to record progress
RECORDING_STATUSES = frozenset({EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED})


# ==============================================================================
# Report structures
# ==============================================================================


@dataclass
class ItemProgress:
    content_id: UUID
    title: str
    content_type: ContentType
    order: int
    is_required: bool
    status: ItemStatus
    completed_at: datetime | None = None
    time_spent: int = 0


@dataclass
class SectionProgress:
    section_id: UUID
    title: str
    order: int
    total_items: int
    completed_items: int
    progress: int
    time_spent: int
    items: list[ItemProgress] = field(default_factory=list)


@dataclass
class RecentActivity:
    content_id: UUID
    title: str | None
    completed_at: datetime | None
    description: str


@dataclass
class CourseProgress:
    """Progress of one learner through one course."""

    user_id: UUID
    course_id: UUID
    overall_progress: int
    total_items: int
    completed_items: int
    total_time_spent: int
    sections: list[SectionProgress] = field(default_factory=list)
    recent_activity: list[RecentActivity] = field(default_factory=list)


# ==============================================================================
# Aggregation
# ==============================================================================


class ProgressAggregator:
    """Computes course progress from the curriculum and completion records."""

    def __init__(
        self,
        curriculum: CurriculumService,
        completions: CompletionStore,
        recent_activity_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
    ):
        self.curriculum = curriculum
        self.completions = completions
        self.recent_activity_limit = recent_activity_limit

    async def compute(
        self, user_id: UUID, course_id: UUID, published_only: bool = False
    ) -> CourseProgress:
        """Build the progress report.

        Percentages round half up; an empty section or course is 0%.
        Total time spent covers every completion record of the user in the
        course, including items no longer in the curriculum.
        """
        tree = await self.curriculum.get_course_tree(course_id, published_only)
        records = await self.completions.list_for_course(user_id, course_id)
        by_content = {record.content_id: record for record in records}

        sections: list[SectionProgress] = []
        titles: dict[UUID, str] = {}
        total_items = 0
        total_done = 0

        for node in tree:
            items = []
            done = 0
            section_time = 0
            for content in node.contents:
                titles[content.id] = content.title
                record = by_content.get(content.id)
                completed = record is not None and record.is_completed
                if completed:
                    done += 1
                section_time += record.time_spent if record else 0
                items.append(
                    ItemProgress(
                        content_id=content.id,
                        title=content.title,
                        content_type=content.content_type,
                        order=content.order,
                        is_required=content.is_required,
                        status=ItemStatus.COMPLETED
                        if completed
                        else ItemStatus.NOT_STARTED,
                        completed_at=record.completed_at if completed else None,
                        time_spent=record.time_spent if record else 0,
                    )
                )

            total = len(node.contents)
            total_items += total
            total_done += done
            sections.append(
                SectionProgress(
                    section_id=node.section.id,
                    title=node.section.title,
                    order=node.section.order,
                    total_items=total,
                    completed_items=done,
                    progress=percent_half_up(done, total),
                    time_spent=section_time,
                    items=items,
                )
            )

        return CourseProgress(
            user_id=user_id,
            course_id=course_id,
            overall_progress=percent_half_up(total_done, total_items),
            total_items=total_items,
            completed_items=total_done,
            total_time_spent=sum(record.time_spent for record in records),
            sections=sections,
            recent_activity=self._recent_activity(records, titles),
        )

    def _recent_activity(
        self, records: list[LessonCompletion], titles: dict[UUID, str]
    ) -> list[RecentActivity]:
        completed = [r for r in records if r.is_completed and r.completed_at]
        completed.sort(key=lambda r: r.completed_at, reverse=True)

        activity = []
        for record in completed[: self.recent_activity_limit]:
            title = titles.get(record.content_id)
            activity.append(
                RecentActivity(
                    content_id=record.content_id,
                    title=title,
                    completed_at=record.completed_at,
                    description=f"Completed: {title}" if title else "Completed content",
                )
            )
        return activity


# ==============================================================================
# Recording
# ==============================================================================


class CompletionService:
    """Records progress events against content items."""

    def __init__(
        self,
        completions: CompletionStore,
        curriculum: CurriculumService,
        enrollments: EnrollmentStore,
    ):
        self.completions = completions
        self.curriculum = curriculum
        self.enrollments = enrollments

    async def _ensure_can_record(self, identity: Identity, course: Course) -> None:
        if identity.is_super_admin or (
            identity.is_trainer and course.is_owned_by(identity.id)
        ):
            return
        enrollment = await self.enrollments.get_for(identity.id, course.id)
        if enrollment is None or enrollment.status not in RECORDING_STATUSES:
            raise NotEnrolledError()

    async def get(
        self, user_id: UUID, course_id: UUID, content_id: UUID
    ) -> LessonCompletion:
        """Stored record, or an unsaved zero record when there is none."""
        completion = await self.completions.get(user_id, course_id, content_id)
        return completion or LessonCompletion(
            user_id=user_id, course_id=course_id, content_id=content_id
        )

    async def record(
        self,
        identity: Identity,
        course_id: UUID,
        content_id: UUID,
        is_completed: bool | None = None,
        progress: int | None = None,
        time_spent: int | None = None,
    ) -> LessonCompletion:
        """Apply a progress event for the caller.

        ``time_spent`` is added to the running total, ``progress`` is clamped
        to 0..100, and completing stamps ``completed_at`` once.

        Raises:
            CourseNotFoundError: course does not exist
            NotEnrolledError: no active or completed enrollment
            ContentNotFoundError: content missing, elsewhere or unpublished
            InvalidTimeSpentError: negative time spent
        """
        if time_spent is not None and time_spent < 0:
            raise InvalidTimeSpentError()

        course = await self.curriculum.get_course(course_id)
        await self._ensure_can_record(identity, course)

        content = await self.curriculum.get_content(content_id)
        if content.course_id != course_id or not content.is_published:
            raise ContentNotFoundError()

        completion = await self.completions.get(identity.id, course_id, content_id)
        if completion is None:
            completion = LessonCompletion(
                user_id=identity.id, course_id=course_id, content_id=content_id
            )
            if not await self.completions.insert(completion):
                completion = await self.completions.get(
                    identity.id, course_id, content_id
                )
                if completion is None:
                    raise CompletionModifiedError()

        expected_revision = completion.revision
        now = utc_now()

        if is_completed is True and not completion.is_completed:
            completion.completed_at = now
        elif is_completed is False:
            completion.completed_at = None
        if is_completed is not None:
            completion.is_completed = is_completed
        if progress is not None:
            completion.progress = max(0, min(100, progress))
        if time_spent:
            completion.time_spent += time_spent
        completion.last_accessed_at = now
        completion.updated_at = now
        completion.revision = expected_revision + 1

        await self.completions.update(completion, expected_revision)
        logger.info(
            "lesson_progress_recorded",
            content_id=str(content_id),
            course_id=str(course_id),
            is_completed=completion.is_completed,
            time_spent=completion.time_spent,
        )
        return completion
