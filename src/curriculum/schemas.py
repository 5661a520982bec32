"""Curriculum API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import ContentItem, ContentType, Section
from .service import SectionTree


# ==============================================================================
# Request Schemas
# ==============================================================================


class SectionCreate(BaseModel):
    """Create a section. Without ``order`` it is appended."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    order: int | None = Field(default=None, ge=0)
    is_published: bool = False


class SectionUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    is_published: bool | None = None


class ContentCreate(BaseModel):
    """Create a content item. Without ``order`` it is appended."""

    title: str = Field(..., min_length=1, max_length=255)
    content_type: ContentType = ContentType.ARTICLE
    description: str | None = Field(default=None, max_length=5000)
    order: int | None = Field(default=None, ge=0)
    is_required: bool = True
    is_published: bool = False
    duration_seconds: int | None = Field(default=None, ge=0)
    points: int = Field(default=0, ge=0)


class ContentUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content_type: ContentType | None = None
    description: str | None = Field(default=None, max_length=5000)
    is_required: bool | None = None
    is_published: bool | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    points: int | None = Field(default=None, ge=0)


class ReorderRequest(BaseModel):
    """Target position among siblings."""

    order: int = Field(..., ge=0)


# ==============================================================================
# Response Schemas
# ==============================================================================


class ContentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    section_id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    content_type: ContentType
    order: int
    is_required: bool
    is_published: bool
    duration_seconds: int | None = None
    points: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_content(cls, content: ContentItem) -> "ContentResponse":
        return cls.model_validate(content)


class SectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    order: int
    is_published: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_section(cls, section: Section) -> "SectionResponse":
        return cls.model_validate(section)


class SectionWithContentsResponse(SectionResponse):
    contents: list[ContentResponse] = Field(default_factory=list)

    @classmethod
    def from_tree(cls, node: SectionTree) -> "SectionWithContentsResponse":
        return cls(
            **SectionResponse.from_section(node.section).model_dump(),
            contents=[ContentResponse.from_content(c) for c in node.contents],
        )


class CurriculumResponse(BaseModel):
    """Ordered sections of a course with their content items."""

    course_id: UUID
    sections: list[SectionWithContentsResponse]
