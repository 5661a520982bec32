"""Progress API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.curriculum.models import ContentType

from .models import ItemStatus, LessonCompletion
from .service import CourseProgress


# ==============================================================================
# Request Schemas
# ==============================================================================


class RecordProgressRequest(BaseModel):
    """A progress event. ``time_spent`` is added to the running total."""

    is_completed: bool | None = None
    progress: int | None = Field(default=None, description="Clamped to 0..100")
    time_spent: int | None = Field(default=None, ge=0, description="Seconds")


# ==============================================================================
# Response Schemas
# ==============================================================================


class CompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    course_id: UUID
    user_id: UUID
    is_completed: bool
    completed_at: datetime | None = None
    time_spent: int
    progress: int
    last_accessed_at: datetime | None = None

    @classmethod
    def from_completion(cls, completion: LessonCompletion) -> "CompletionResponse":
        return cls.model_validate(completion)


class ItemProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    title: str
    content_type: ContentType
    order: int
    is_required: bool
    status: ItemStatus
    completed_at: datetime | None = None
    time_spent: int


class SectionProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    section_id: UUID
    title: str
    order: int
    total_items: int
    completed_items: int
    progress: int
    time_spent: int
    items: list[ItemProgressResponse]


class RecentActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    title: str | None = None
    completed_at: datetime | None = None
    description: str


class CourseProgressResponse(BaseModel):
    """Computed progress of a learner through a course."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    course_id: UUID
    overall_progress: int
    total_items: int
    completed_items: int
    total_time_spent: int
    sections: list[SectionProgressResponse]
    recent_activity: list[RecentActivityResponse]

    @classmethod
    def from_report(cls, report: CourseProgress) -> "CourseProgressResponse":
        return cls.model_validate(report)
