# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Course repository."""

from typing import Protocol
from uuid import UUID

from src.core.database.store import CassandraStore

from .models import Course


class CourseStore(Protocol):
    """Read access to courses."""

    async def get(self, course_id: UUID) -> Course | None: ...


class CassandraCourseStore(CassandraStore):
    """Course lookups backed by the ``courses`` table."""

    def _prepare_statements(self) -> None:
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)

    async def get(self, course_id: UUID) -> Course | None:
        result = await self._execute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None
