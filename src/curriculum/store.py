# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Curriculum repository.

Every write under a parent (course for sections, section for content items)
goes out as one single-partition conditional batch: the position changes, the
row insert/update/delete, and ``ordering_version = next IF ordering_version =
read``. Either all of it applies or none of it does, and a concurrent writer
that read the same version loses with ``OrderingConflictError``.

The id lookups (``sections_by_id``, ``contents_by_id``) sit in other
partitions. New refs are written before the batch and dropped refs after it,
so a failure in between leaves at worst a ref to a missing row, which reads
as not found, and never a committed row without its ref.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID

from cassandra.query import BatchStatement

from src.core.database.store import CassandraStore
from src.core.logging import get_logger
from src.utils.timeutils import utc_now

from .errors import OrderingConflictError
from .models import ContentItem, Section
from .ordering import SiblingOrder


logger = get_logger(__name__)


@dataclass
class ChildWrite:
    """Writes to commit under one parent, guarded by its ordering version."""

    expected: SiblingOrder
    positions: dict[UUID, int] = field(default_factory=dict)
    insert: Any = None
    update: Any = None
    delete: Any = None


class CurriculumStore(Protocol):
    """Persistence for sections and content items."""

    async def get_section(self, section_id: UUID) -> Section | None: ...

    async def list_sections(self, course_id: UUID) -> list[Section]:
        """Sections of a course sorted by order."""
        ...

    async def section_order(self, course_id: UUID) -> SiblingOrder: ...

    async def commit_sections(self, course_id: UUID, write: ChildWrite) -> None:
        """Apply ``write`` atomically.

        Raises:
            OrderingConflictError: the course's sections changed since
                ``write.expected`` was read
        """
        ...

    async def get_content(self, content_id: UUID) -> ContentItem | None: ...

    async def list_contents(self, section_id: UUID) -> list[ContentItem]:
        """Content items of a section sorted by order."""
        ...

    async def content_order(self, section_id: UUID) -> SiblingOrder: ...

    async def commit_contents(self, section_id: UUID, write: ChildWrite) -> None:
        """Apply ``write`` atomically (see ``commit_sections``)."""
        ...


def _present(rows: Iterable[Any], key: str) -> list[Any]:
    # A partition holding only the static column yields one row with a null
    # clustering key
    return [row for row in rows if getattr(row, key) is not None]


class CassandraCurriculumStore(CassandraStore):
    """Sections and content items in per-parent partitions."""

    def _prepare_statements(self) -> None:
        ks = self.keyspace

        # ----------------------------------------------------------------------
        # Sections
        # ----------------------------------------------------------------------
        self._get_section = self.session.prepare(f"""
            SELECT * FROM {ks}.course_sections
            WHERE course_id = ? AND section_id = ?
        """)
        self._get_section_ref = self.session.prepare(f"""
            SELECT course_id FROM {ks}.sections_by_id WHERE section_id = ?
        """)
        self._list_sections = self.session.prepare(f"""
            SELECT * FROM {ks}.course_sections WHERE course_id = ?
        """)
        self._section_positions = self.session.prepare(f"""
            SELECT section_id, position, ordering_version
            FROM {ks}.course_sections WHERE course_id = ?
        """)
        self._claim_sections = self.session.prepare(f"""
            UPDATE {ks}.course_sections SET ordering_version = ?
            WHERE course_id = ? IF ordering_version = null
        """)
        self._bump_sections = self.session.prepare(f"""
            UPDATE {ks}.course_sections SET ordering_version = ?
            WHERE course_id = ? IF ordering_version = ?
        """)
        self._set_section_position = self.session.prepare(f"""
            UPDATE {ks}.course_sections SET position = ?, updated_at = ?
            WHERE course_id = ? AND section_id = ?
        """)
        self._insert_section = self.session.prepare(f"""
            INSERT INTO {ks}.course_sections
            (course_id, section_id, title, description, position,
             is_published, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_section = self.session.prepare(f"""
            UPDATE {ks}.course_sections
            SET title = ?, description = ?, is_published = ?, updated_at = ?
            WHERE course_id = ? AND section_id = ?
        """)
        self._delete_section = self.session.prepare(f"""
            DELETE FROM {ks}.course_sections
            WHERE course_id = ? AND section_id = ?
        """)
        self._insert_section_ref = self.session.prepare(f"""
            INSERT INTO {ks}.sections_by_id (section_id, course_id) VALUES (?, ?)
        """)
        self._delete_section_ref = self.session.prepare(f"""
            DELETE FROM {ks}.sections_by_id WHERE section_id = ?
        """)

        # ----------------------------------------------------------------------
        # Content items
        # ----------------------------------------------------------------------
        self._get_content = self.session.prepare(f"""
            SELECT * FROM {ks}.section_contents
            WHERE section_id = ? AND content_id = ?
        """)
        self._get_content_ref = self.session.prepare(f"""
            SELECT section_id FROM {ks}.contents_by_id WHERE content_id = ?
        """)
        self._list_contents = self.session.prepare(f"""
            SELECT * FROM {ks}.section_contents WHERE section_id = ?
        """)
        self._content_positions = self.session.prepare(f"""
            SELECT content_id, position, ordering_version
            FROM {ks}.section_contents WHERE section_id = ?
        """)
        self._claim_contents = self.session.prepare(f"""
            UPDATE {ks}.section_contents SET ordering_version = ?
            WHERE section_id = ? IF ordering_version = null
        """)
        self._bump_contents = self.session.prepare(f"""
            UPDATE {ks}.section_contents SET ordering_version = ?
            WHERE section_id = ? IF ordering_version = ?
        """)
        self._set_content_position = self.session.prepare(f"""
            UPDATE {ks}.section_contents SET position = ?, updated_at = ?
            WHERE section_id = ? AND content_id = ?
        """)
        self._insert_content = self.session.prepare(f"""
            INSERT INTO {ks}.section_contents
            (section_id, content_id, course_id, title, description, content_type,
             position, is_required, is_published, duration_seconds, points,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_content = self.session.prepare(f"""
            UPDATE {ks}.section_contents
            SET title = ?, description = ?, content_type = ?, is_required = ?,
                is_published = ?, duration_seconds = ?, points = ?, updated_at = ?
            WHERE section_id = ? AND content_id = ?
        """)
        self._delete_content = self.session.prepare(f"""
            DELETE FROM {ks}.section_contents
            WHERE section_id = ? AND content_id = ?
        """)
        self._insert_content_ref = self.session.prepare(f"""
            INSERT INTO {ks}.contents_by_id (content_id, section_id, course_id)
            VALUES (?, ?, ?)
        """)
        self._delete_content_ref = self.session.prepare(f"""
            DELETE FROM {ks}.contents_by_id WHERE content_id = ?
        """)

    # ==========================================================================
    # Shared
    # ==========================================================================

    async def _read_order(
        self, statement: Any, parent_id: UUID, key: str
    ) -> SiblingOrder:
        rows = list(await self._execute(statement, [parent_id]))
        version = rows[0].ordering_version if rows else None
        return SiblingOrder(
            positions={getattr(row, key): row.position for row in _present(rows, key)},
            version=version,
        )

    async def _commit(
        self,
        parent_id: UUID,
        write: ChildWrite,
        claim: Any,
        bump: Any,
        statements: list[tuple[Any, list[Any]]],
    ) -> None:
        batch = BatchStatement()
        if write.expected.version is None:
            batch.add(claim, [write.expected.next_version, parent_id])
        else:
            batch.add(
                bump,
                [write.expected.next_version, parent_id, write.expected.version],
            )
        for statement, params in statements:
            batch.add(statement, params)

        result = await self._execute(batch)
        if not result.was_applied:
            logger.warning(
                "ordering_write_rejected",
                parent_id=str(parent_id),
                expected_version=write.expected.version,
            )
            raise OrderingConflictError()

    # ==========================================================================
    # Sections
    # ==========================================================================

    async def get_section(self, section_id: UUID) -> Section | None:
        result = await self._execute(self._get_section_ref, [section_id])
        ref = result.one()
        if not ref:
            return None
        result = await self._execute(self._get_section, [ref.course_id, section_id])
        row = result.one()
        if not row or row.section_id is None:
            return None
        return Section.from_row(row)

    async def list_sections(self, course_id: UUID) -> list[Section]:
        result = await self._execute(self._list_sections, [course_id])
        rows = _present(result, "section_id")
        return sorted((Section.from_row(r) for r in rows), key=lambda s: s.order)

    async def section_order(self, course_id: UUID) -> SiblingOrder:
        return await self._read_order(self._section_positions, course_id, "section_id")

    async def commit_sections(self, course_id: UUID, write: ChildWrite) -> None:
        now = utc_now()
        statements: list[tuple[Any, list[Any]]] = [
            (self._set_section_position, [order, now, course_id, section_id])
            for section_id, order in write.positions.items()
        ]

        section: Section | None = write.insert
        if section is not None:
            statements.append((
                self._insert_section,
                [
                    course_id,
                    section.id,
                    section.title,
                    section.description,
                    section.order,
                    section.is_published,
                    section.created_at,
                    section.updated_at,
                ],
            ))
        if write.update is not None:
            updated: Section = write.update
            statements.append((
                self._update_section,
                [
                    updated.title,
                    updated.description,
                    updated.is_published,
                    updated.updated_at,
                    course_id,
                    updated.id,
                ],
            ))
        if write.delete is not None:
            statements.append((self._delete_section, [course_id, write.delete.id]))

        # Lookups live in other partitions. A ref written ahead of a rejected
        # batch points at no row and reads as missing.
        if section is not None:
            await self._execute(self._insert_section_ref, [section.id, course_id])
        await self._commit(
            course_id, write, self._claim_sections, self._bump_sections, statements
        )
        if write.delete is not None:
            await self._execute(self._delete_section_ref, [write.delete.id])

    # ==========================================================================
    # Content items
    # ==========================================================================

    async def get_content(self, content_id: UUID) -> ContentItem | None:
        result = await self._execute(self._get_content_ref, [content_id])
        ref = result.one()
        if not ref:
            return None
        result = await self._execute(self._get_content, [ref.section_id, content_id])
        row = result.one()
        if not row or row.content_id is None:
            return None
        return ContentItem.from_row(row)

    async def list_contents(self, section_id: UUID) -> list[ContentItem]:
        result = await self._execute(self._list_contents, [section_id])
        rows = _present(result, "content_id")
        return sorted((ContentItem.from_row(r) for r in rows), key=lambda c: c.order)

    async def content_order(self, section_id: UUID) -> SiblingOrder:
        return await self._read_order(self._content_positions, section_id, "content_id")

    async def commit_contents(self, section_id: UUID, write: ChildWrite) -> None:
        now = utc_now()
        statements: list[tuple[Any, list[Any]]] = [
            (self._set_content_position, [order, now, section_id, content_id])
            for content_id, order in write.positions.items()
        ]

        content: ContentItem | None = write.insert
        if content is not None:
            statements.append((
                self._insert_content,
                [
                    section_id,
                    content.id,
                    content.course_id,
                    content.title,
                    content.description,
                    content.content_type.value,
                    content.order,
                    content.is_required,
                    content.is_published,
                    content.duration_seconds,
                    content.points,
                    content.created_at,
                    content.updated_at,
                ],
            ))
        if write.update is not None:
            updated: ContentItem = write.update
            statements.append((
                self._update_content,
                [
                    updated.title,
                    updated.description,
                    updated.content_type.value,
                    updated.is_required,
                    updated.is_published,
                    updated.duration_seconds,
                    updated.points,
                    updated.updated_at,
                    section_id,
                    updated.id,
                ],
            ))
        if write.delete is not None:
            statements.append((self._delete_content, [section_id, write.delete.id]))

        if content is not None:
            await self._execute(
                self._insert_content_ref, [content.id, section_id, content.course_id]
            )
        await self._commit(
            section_id, write, self._claim_contents, self._bump_contents, statements
        )
        if write.delete is not None:
            await self._execute(self._delete_content_ref, [write.delete.id])
