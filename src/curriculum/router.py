"""Curriculum API endpoints.

Three routers:
- /v1/courses/{course_id}/sections: course tree and creation
- /v1/sections/{section_id}: section edits, reorder, delete
- /v1/contents/{content_id}: content read, edits, reorder, delete
"""

from uuid import UUID

from fastapi import APIRouter, status

from src.access.dependencies import AccessServiceDep, LooseAccessCourse
from src.access.errors import NotAllowedError
from src.access.permissions import can_author_course
from src.access.policy import AccessTier
from src.auth.dependencies import CurrentUser, TrainerUser
from src.auth.schemas import Identity
from src.courses.models import Course

from .dependencies import CurriculumServiceDep
from .errors import ContentNotFoundError
from .schemas import (
    ContentCreate,
    ContentResponse,
    ContentUpdate,
    CurriculumResponse,
    ReorderRequest,
    SectionCreate,
    SectionResponse,
    SectionUpdate,
    SectionWithContentsResponse,
)
from .service import CurriculumService


router_course_sections = APIRouter(prefix="/v1/courses", tags=["curriculum"])
router_sections = APIRouter(prefix="/v1/sections", tags=["curriculum"])
router_contents = APIRouter(prefix="/v1/contents", tags=["curriculum"])


async def _authorize_author(
    service: CurriculumService, course_id: UUID, user: Identity
) -> Course:
    course = await service.get_course(course_id)
    if not can_author_course(user, course):
        raise NotAllowedError("Only the course trainer can edit its curriculum")
    return course


# ==============================================================================
# Course sections
# ==============================================================================


@router_course_sections.get(
    "/{course_id}/sections",
    response_model=CurriculumResponse,
    summary="Get course curriculum",
)
async def get_curriculum(
    course: LooseAccessCourse,
    service: CurriculumServiceDep,
    user: CurrentUser,
) -> CurriculumResponse:
    """Ordered sections and items. Learners only see published ones."""
    tree = await service.get_course_tree(
        course.id, published_only=not can_author_course(user, course)
    )
    return CurriculumResponse(
        course_id=course.id,
        sections=[SectionWithContentsResponse.from_tree(node) for node in tree],
    )


@router_course_sections.post(
    "/{course_id}/sections",
    response_model=SectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create section",
)
async def create_section(
    course_id: UUID,
    data: SectionCreate,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> SectionResponse:
    await _authorize_author(service, course_id, user)
    section = await service.create_section(
        course_id,
        data.title,
        order=data.order,
        description=data.description,
        is_published=data.is_published,
    )
    return SectionResponse.from_section(section)


@router_course_sections.post(
    "/{course_id}/sections/{section_id}/contents",
    response_model=ContentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create content item",
)
async def create_content(
    course_id: UUID,
    section_id: UUID,
    data: ContentCreate,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> ContentResponse:
    await _authorize_author(service, course_id, user)
    content = await service.create_content(
        course_id,
        section_id,
        data.title,
        content_type=data.content_type,
        order=data.order,
        description=data.description,
        is_required=data.is_required,
        is_published=data.is_published,
        duration_seconds=data.duration_seconds,
        points=data.points,
    )
    return ContentResponse.from_content(content)


# ==============================================================================
# Sections
# ==============================================================================


@router_sections.put("/{section_id}", response_model=SectionResponse)
async def update_section(
    section_id: UUID,
    data: SectionUpdate,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> SectionResponse:
    section = await service.get_section(section_id)
    await _authorize_author(service, section.course_id, user)
    updated = await service.update_section(
        section_id, **data.model_dump(exclude_unset=True)
    )
    return SectionResponse.from_section(updated)


@router_sections.put("/{section_id}/order", response_model=SectionResponse)
async def reorder_section(
    section_id: UUID,
    data: ReorderRequest,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> SectionResponse:
    section = await service.get_section(section_id)
    await _authorize_author(service, section.course_id, user)
    moved = await service.reorder_section(section_id, data.order)
    return SectionResponse.from_section(moved)


@router_sections.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_section(
    section_id: UUID,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> None:
    section = await service.get_section(section_id)
    await _authorize_author(service, section.course_id, user)
    await service.delete_section(section_id)


# ==============================================================================
# Content items
# ==============================================================================


@router_contents.get("/{content_id}", response_model=ContentResponse)
async def get_content(
    content_id: UUID,
    service: CurriculumServiceDep,
    access: AccessServiceDep,
    user: CurrentUser,
) -> ContentResponse:
    """Read a content item. Requires paid, active enrollment for learners."""
    content = await service.get_content(content_id)
    course = await access.require(user, content.course_id, AccessTier.PAID_CONTENT)
    if not content.is_published and not can_author_course(user, course):
        raise ContentNotFoundError()
    return ContentResponse.from_content(content)


@router_contents.put("/{content_id}", response_model=ContentResponse)
async def update_content(
    content_id: UUID,
    data: ContentUpdate,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> ContentResponse:
    content = await service.get_content(content_id)
    await _authorize_author(service, content.course_id, user)
    updated = await service.update_content(
        content_id, **data.model_dump(exclude_unset=True)
    )
    return ContentResponse.from_content(updated)


@router_contents.put("/{content_id}/order", response_model=ContentResponse)
async def reorder_content(
    content_id: UUID,
    data: ReorderRequest,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> ContentResponse:
    content = await service.get_content(content_id)
    await _authorize_author(service, content.course_id, user)
    moved = await service.reorder_content(content_id, data.order)
    return ContentResponse.from_content(moved)


@router_contents.delete("/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: UUID,
    service: CurriculumServiceDep,
    user: TrainerUser,
) -> None:
    content = await service.get_content(content_id)
    await _authorize_author(service, content.course_id, user)
    await service.delete_content(content_id)
