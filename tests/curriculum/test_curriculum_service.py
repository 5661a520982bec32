"""Tests for curriculum service: ordered sections and content items."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.courses.errors import CourseNotFoundError
from src.curriculum.errors import (
    ContentNotFoundError,
    InvalidContentTypeError,
    InvalidOrderError,
    OrderingConflictError,
    SectionCourseMismatchError,
    SectionHasChildrenError,
    SectionNotFoundError,
)
from src.curriculum.models import ContentType
from src.curriculum.service import CurriculumService


async def _orders(service: CurriculumService, course_id) -> list[tuple[str, int]]:
    sections = await service.store.list_sections(course_id)
    return [(s.title, s.order) for s in sections]


class TestSections:
    @pytest.mark.asyncio
    async def test_append_sections(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        first = await curriculum_service.create_section(paid_course.id, "Intro")
        second = await curriculum_service.create_section(paid_course.id, "Dosage")

        assert (first.order, second.order) == (0, 1)

    @pytest.mark.asyncio
    async def test_insert_shifts_followers(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        for title in ("A", "B", "C"):
            await curriculum_service.create_section(paid_course.id, title)

        await curriculum_service.create_section(paid_course.id, "New", order=1)

        assert await _orders(curriculum_service, paid_course.id) == [
            ("A", 0),
            ("New", 1),
            ("B", 2),
            ("C", 3),
        ]

    @pytest.mark.asyncio
    async def test_reorder_moves_range(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        sections = [
            await curriculum_service.create_section(paid_course.id, title)
            for title in ("A", "B", "C", "D")
        ]

        moved = await curriculum_service.reorder_section(sections[0].id, 2)

        assert moved.order == 2
        assert await _orders(curriculum_service, paid_course.id) == [
            ("B", 0),
            ("C", 1),
            ("A", 2),
            ("D", 3),
        ]

    @pytest.mark.asyncio
    async def test_reorder_to_same_position_writes_nothing(
        self, curriculum_service: CurriculumService, curriculum_store, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "A")
        commits = curriculum_store.commits

        await curriculum_service.reorder_section(section.id, 0)

        assert curriculum_store.commits == commits

    @pytest.mark.asyncio
    async def test_update_keeps_order(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        await curriculum_service.create_section(paid_course.id, "A")
        section = await curriculum_service.create_section(paid_course.id, "B")

        updated = await curriculum_service.update_section(
            section.id, title="Renamed", is_published=True, order=0
        )

        assert updated.title == "Renamed"
        assert updated.is_published is True
        assert await _orders(curriculum_service, paid_course.id) == [
            ("A", 0),
            ("Renamed", 1),
        ]

    @pytest.mark.asyncio
    async def test_delete_leaves_gap(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        sections = [
            await curriculum_service.create_section(paid_course.id, title)
            for title in ("A", "B", "C")
        ]

        await curriculum_service.delete_section(sections[1].id)

        assert await _orders(curriculum_service, paid_course.id) == [
            ("A", 0),
            ("C", 2),
        ]
        with pytest.raises(SectionNotFoundError):
            await curriculum_service.get_section(sections[1].id)

    @pytest.mark.asyncio
    async def test_delete_with_children_rejected(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "A")
        await curriculum_service.create_content(paid_course.id, section.id, "Lesson")

        with pytest.raises(SectionHasChildrenError):
            await curriculum_service.delete_section(section.id)

    @pytest.mark.asyncio
    async def test_unknown_course(self, curriculum_service: CurriculumService):
        with pytest.raises(CourseNotFoundError):
            await curriculum_service.create_section(uuid4(), "A")

    @pytest.mark.asyncio
    async def test_negative_order(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        with pytest.raises(InvalidOrderError):
            await curriculum_service.create_section(paid_course.id, "A", order=-1)

    @pytest.mark.asyncio
    async def test_stale_read_loses(
        self, curriculum_service: CurriculumService, curriculum_store, paid_course
    ) -> None:
        """A writer that read an old ordering version is rejected whole."""
        stale = await curriculum_store.section_order(paid_course.id)
        await curriculum_service.create_section(paid_course.id, "Winner")
        curriculum_store.section_order = AsyncMock(return_value=stale)

        with pytest.raises(OrderingConflictError):
            await curriculum_service.create_section(paid_course.id, "Loser", order=0)

        assert await _orders(curriculum_service, paid_course.id) == [("Winner", 0)]


class TestContents:
    @pytest.mark.asyncio
    async def test_create_and_reorder_within_section(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "S")
        items = [
            await curriculum_service.create_content(
                paid_course.id, section.id, title, content_type="video"
            )
            for title in ("one", "two", "three")
        ]

        await curriculum_service.reorder_content(items[2].id, 0)

        contents = await curriculum_service.store.list_contents(section.id)
        assert [(c.title, c.order) for c in contents] == [
            ("three", 0),
            ("one", 1),
            ("two", 2),
        ]
        assert contents[0].content_type == ContentType.VIDEO

    @pytest.mark.asyncio
    async def test_sections_order_independently(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        first = await curriculum_service.create_section(paid_course.id, "S1")
        second = await curriculum_service.create_section(paid_course.id, "S2")

        a = await curriculum_service.create_content(paid_course.id, first.id, "a")
        b = await curriculum_service.create_content(paid_course.id, second.id, "b")

        assert (a.order, b.order) == (0, 0)

    @pytest.mark.asyncio
    async def test_section_from_other_course(
        self, curriculum_service: CurriculumService, paid_course, free_course
    ) -> None:
        section = await curriculum_service.create_section(free_course.id, "S")
        with pytest.raises(SectionCourseMismatchError):
            await curriculum_service.create_content(paid_course.id, section.id, "x")

    @pytest.mark.asyncio
    async def test_unknown_section(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        with pytest.raises(SectionNotFoundError):
            await curriculum_service.create_content(paid_course.id, uuid4(), "x")

    @pytest.mark.asyncio
    async def test_update_and_delete(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "S")
        content = await curriculum_service.create_content(
            paid_course.id, section.id, "draft"
        )

        updated = await curriculum_service.update_content(
            content.id, title="final", content_type="quiz", points=10
        )
        await curriculum_service.delete_content(content.id)

        assert updated.content_type == ContentType.QUIZ
        assert updated.points == 10
        with pytest.raises(ContentNotFoundError):
            await curriculum_service.get_content(content.id)
        # Empty again, so the section can go
        await curriculum_service.delete_section(section.id)

    @pytest.mark.asyncio
    async def test_unknown_content_type_rejected(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "S")
        with pytest.raises(InvalidContentTypeError):
            await curriculum_service.create_content(
                paid_course.id, section.id, "x", content_type="podcast"
            )

        content = await curriculum_service.create_content(
            paid_course.id, section.id, "y"
        )
        with pytest.raises(InvalidContentTypeError):
            await curriculum_service.update_content(content.id, content_type="gif")

    @pytest.mark.asyncio
    async def test_null_clears_optional_fields_only(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        section = await curriculum_service.create_section(paid_course.id, "S")
        content = await curriculum_service.create_content(
            paid_course.id,
            section.id,
            "Lesson",
            description="Old notes",
            duration_seconds=300,
        )

        updated = await curriculum_service.update_content(
            content.id, title=None, description=None, duration_seconds=None
        )

        assert updated.title == "Lesson"
        assert updated.description is None
        assert updated.duration_seconds is None

class TestCourseTree:
    @pytest.mark.asyncio
    async def test_published_only_filters_both_levels(
        self, curriculum_service: CurriculumService, paid_course
    ) -> None:
        live = await curriculum_service.create_section(
            paid_course.id, "Live", is_published=True
        )
        await curriculum_service.create_section(paid_course.id, "Hidden")
        await curriculum_service.create_content(
            paid_course.id, live.id, "shown", is_published=True
        )
        await curriculum_service.create_content(paid_course.id, live.id, "draft")

        full = await curriculum_service.get_course_tree(paid_course.id)
        public = await curriculum_service.get_course_tree(
            paid_course.id, published_only=True
        )

        assert [node.section.title for node in full] == ["Live", "Hidden"]
        assert len(full[0].contents) == 2
        assert [node.section.title for node in public] == ["Live"]
        assert [c.title for c in public[0].contents] == ["shown"]
