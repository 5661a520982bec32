"""Curriculum entities and Cassandra schema.

Sections are ordered within a course, content items within a section. Each
parent is one partition whose static ``ordering_version`` column guards every
write under it: a write batch applies only if the version it read is still
current, and bumps it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from src.utils.timeutils import ensure_utc_aware, utc_now


if TYPE_CHECKING:
    from cassandra.cluster import Row


class ContentType(str, Enum):
    """Kind of content item."""

    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    ARTICLE = "article"
    QUIZ = "quiz"
    CERTIFICATE = "certificate"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# "order" is reserved in CQL, the column is called position
COURSE_SECTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_sections (
    course_id UUID,
    section_id UUID,
    ordering_version INT STATIC,
    title TEXT,
    description TEXT,
    position INT,
    is_published BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((course_id), section_id)
)
"""

SECTIONS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.sections_by_id (
    section_id UUID PRIMARY KEY,
    course_id UUID
)
"""

SECTION_CONTENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.section_contents (
    section_id UUID,
    content_id UUID,
    ordering_version INT STATIC,
    course_id UUID,
    title TEXT,
    description TEXT,
    content_type TEXT,
    position INT,
    is_required BOOLEAN,
    is_published BOOLEAN,
    duration_seconds INT,
    points INT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((section_id), content_id)
)
"""

CONTENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.contents_by_id (
    content_id UUID PRIMARY KEY,
    section_id UUID,
    course_id UUID
)
"""

CURRICULUM_TABLES_CQL = [
    COURSE_SECTIONS_TABLE_CQL,
    SECTIONS_BY_ID_TABLE_CQL,
    SECTION_CONTENTS_TABLE_CQL,
    CONTENTS_BY_ID_TABLE_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Section:
    """A section of a course."""

    course_id: UUID
    title: str
    order: int = 0
    description: str | None = None
    is_published: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: "Row") -> "Section":
        """Create instance from Cassandra row."""
        return cls(
            id=row.section_id,
            course_id=row.course_id,
            title=row.title or "",
            description=row.description,
            order=row.position or 0,
            is_published=bool(row.is_published),
            created_at=ensure_utc_aware(row.created_at) or utc_now(),
            updated_at=ensure_utc_aware(row.updated_at) or utc_now(),
        )


@dataclass
class ContentItem:
    """A content item inside a section."""

    section_id: UUID
    course_id: UUID
    title: str
    content_type: ContentType = ContentType.ARTICLE
    order: int = 0
    description: str | None = None
    is_required: bool = True
    is_published: bool = False
    duration_seconds: int | None = None
    points: int = 0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: "Row") -> "ContentItem":
        """Create instance from Cassandra row."""
        return cls(
            id=row.content_id,
            section_id=row.section_id,
            course_id=row.course_id,
            title=row.title or "",
            description=row.description,
            content_type=ContentType(row.content_type),
            order=row.position or 0,
            is_required=bool(row.is_required),
            is_published=bool(row.is_published),
            duration_seconds=row.duration_seconds,
            points=row.points or 0,
            created_at=ensure_utc_aware(row.created_at) or utc_now(),
            updated_at=ensure_utc_aware(row.updated_at) or utc_now(),
        )
