"""Curriculum service layer.

Business logic for:
- Section and content item creation at a position (siblings shift)
- Range-shift reordering
- Deletion (sections must be empty, remaining siblings keep their order)
- Metadata edits and the ordered course tree
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from src.core.logging import get_logger
from src.courses.errors import CourseNotFoundError
from src.courses.models import Course
from src.courses.store import CourseStore
from src.utils.timeutils import utc_now

from .errors import (
    ContentNotFoundError,
    InvalidContentTypeError,
    SectionCourseMismatchError,
    SectionHasChildrenError,
    SectionNotFoundError,
)
from .models import ContentItem, ContentType, Section
from .ordering import apply_changes, plan_insert, plan_reorder
from .store import ChildWrite, CurriculumStore


logger = get_logger(__name__)

SECTION_EDITABLE_FIELDS = frozenset({"title", "description", "is_published"})
CONTENT_EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "content_type",
        "is_required",
        "is_published",
        "duration_seconds",
        "points",
    }
)
# The only fields an explicit null clears
CLEARABLE_FIELDS = frozenset({"description", "duration_seconds"})


@dataclass
class SectionTree:
    """A section with its ordered content items."""

    section: Section
    contents: list[ContentItem] = field(default_factory=list)


def _apply_fields(
    entity: Any, allowed: frozenset[str], changes: dict[str, Any]
) -> None:
    for name, value in changes.items():
        if name not in allowed:
            continue
        if value is None and name not in CLEARABLE_FIELDS:
            continue
        setattr(entity, name, value)
    entity.updated_at = utc_now()


def _as_content_type(value: ContentType | str) -> ContentType:
    try:
        return ContentType(value)
    except ValueError as e:
        raise InvalidContentTypeError(f"Invalid content type: {value}") from e


class CurriculumService:
    """Sections and content items of a course, kept in order."""

    def __init__(self, store: CurriculumStore, courses: CourseStore):
        self.store = store
        self.courses = courses

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def get_course(self, course_id: UUID) -> Course:
        course = await self.courses.get(course_id)
        if not course:
            raise CourseNotFoundError()
        return course

    async def get_section(self, section_id: UUID) -> Section:
        section = await self.store.get_section(section_id)
        if not section:
            raise SectionNotFoundError()
        return section

    async def get_content(self, content_id: UUID) -> ContentItem:
        content = await self.store.get_content(content_id)
        if not content:
            raise ContentNotFoundError()
        return content

    async def get_course_tree(
        self, course_id: UUID, published_only: bool = False
    ) -> list[SectionTree]:
        """Ordered sections with ordered content items.

        With ``published_only`` unpublished sections and items are left out.
        """
        tree = []
        for section in await self.store.list_sections(course_id):
            if published_only and not section.is_published:
                continue
            contents = await self.store.list_contents(section.id)
            if published_only:
                contents = [c for c in contents if c.is_published]
            tree.append(SectionTree(section=section, contents=contents))
        return tree

    # ==========================================================================
    # Sections
    # ==========================================================================

    async def create_section(
        self,
        course_id: UUID,
        title: str,
        order: int | None = None,
        description: str | None = None,
        is_published: bool = False,
    ) -> Section:
        """Create a section at ``order`` (appended when None)."""
        await self.get_course(course_id)

        current = await self.store.section_order(course_id)
        position, shifted = plan_insert(current.positions, order)

        section = Section(
            course_id=course_id,
            title=title,
            order=position,
            description=description,
            is_published=is_published,
        )
        apply_changes(current.positions, {**shifted, section.id: position})

        await self.store.commit_sections(
            course_id, ChildWrite(expected=current, positions=shifted, insert=section)
        )
        logger.info(
            "section_created",
            section_id=str(section.id),
            course_id=str(course_id),
            order=position,
            shifted=len(shifted),
        )
        return section

    async def update_section(self, section_id: UUID, **changes: Any) -> Section:
        """Edit non-order fields of a section."""
        section = await self.get_section(section_id)
        _apply_fields(section, SECTION_EDITABLE_FIELDS, changes)

        current = await self.store.section_order(section.course_id)
        await self.store.commit_sections(
            section.course_id, ChildWrite(expected=current, update=section)
        )
        logger.info("section_updated", section_id=str(section_id))
        return section

    async def reorder_section(self, section_id: UUID, new_order: int) -> Section:
        """Move a section to ``new_order`` among its siblings."""
        section = await self.get_section(section_id)
        current = await self.store.section_order(section.course_id)

        changes = plan_reorder(current.positions, section.id, new_order)
        if not changes:
            return section
        apply_changes(current.positions, changes)

        await self.store.commit_sections(
            section.course_id, ChildWrite(expected=current, positions=changes)
        )
        logger.info(
            "section_reordered",
            section_id=str(section_id),
            from_order=current.positions[section.id],
            to_order=new_order,
            shifted=len(changes) - 1,
        )
        section.order = new_order
        return section

    async def delete_section(self, section_id: UUID) -> None:
        """Delete an empty section. Siblings are not renumbered.

        Raises:
            SectionHasChildrenError: the section still has content items
        """
        section = await self.get_section(section_id)

        contents = await self.store.content_order(section_id)
        if contents.positions:
            raise SectionHasChildrenError()

        current = await self.store.section_order(section.course_id)
        await self.store.commit_sections(
            section.course_id, ChildWrite(expected=current, delete=section)
        )
        logger.info(
            "section_deleted",
            section_id=str(section_id),
            course_id=str(section.course_id),
        )

    # ==========================================================================
    # Content items
    # ==========================================================================

    async def create_content(
        self,
        course_id: UUID,
        section_id: UUID,
        title: str,
        content_type: ContentType | str = ContentType.ARTICLE,
        order: int | None = None,
        description: str | None = None,
        is_required: bool = True,
        is_published: bool = False,
        duration_seconds: int | None = None,
        points: int = 0,
    ) -> ContentItem:
        """Create a content item at ``order`` (appended when None)."""
        section = await self.get_section(section_id)
        if section.course_id != course_id:
            raise SectionCourseMismatchError()

        current = await self.store.content_order(section_id)
        position, shifted = plan_insert(current.positions, order)

        content = ContentItem(
            section_id=section_id,
            course_id=course_id,
            title=title,
            content_type=_as_content_type(content_type),
            order=position,
            description=description,
            is_required=is_required,
            is_published=is_published,
            duration_seconds=duration_seconds,
            points=points,
        )
        apply_changes(current.positions, {**shifted, content.id: position})

        await self.store.commit_contents(
            section_id, ChildWrite(expected=current, positions=shifted, insert=content)
        )
        logger.info(
            "content_created",
            content_id=str(content.id),
            section_id=str(section_id),
            content_type=content.content_type.value,
            order=position,
            shifted=len(shifted),
        )
        return content

    async def update_content(self, content_id: UUID, **changes: Any) -> ContentItem:
        """Edit non-order fields of a content item."""
        content = await self.get_content(content_id)
        if "content_type" in changes and changes["content_type"] is not None:
            changes["content_type"] = _as_content_type(changes["content_type"])
        _apply_fields(content, CONTENT_EDITABLE_FIELDS, changes)

        current = await self.store.content_order(content.section_id)
        await self.store.commit_contents(
            content.section_id, ChildWrite(expected=current, update=content)
        )
        logger.info("content_updated", content_id=str(content_id))
        return content

    async def reorder_content(self, content_id: UUID, new_order: int) -> ContentItem:
        """Move a content item to ``new_order`` within its section."""
        content = await self.get_content(content_id)
        current = await self.store.content_order(content.section_id)

        changes = plan_reorder(current.positions, content.id, new_order)
        if not changes:
            return content
        apply_changes(current.positions, changes)

        await self.store.commit_contents(
            content.section_id, ChildWrite(expected=current, positions=changes)
        )
        logger.info(
            "content_reordered",
            content_id=str(content_id),
            from_order=current.positions[content.id],
            to_order=new_order,
            shifted=len(changes) - 1,
        )
        content.order = new_order
        return content

    async def delete_content(self, content_id: UUID) -> None:
        """Delete a content item. Siblings are not renumbered."""
        content = await self.get_content(content_id)
        current = await self.store.content_order(content.section_id)
        await self.store.commit_contents(
            content.section_id, ChildWrite(expected=current, delete=content)
        )
        logger.info(
            "content_deleted",
            content_id=str(content_id),
            section_id=str(content.section_id),
        )
