# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Lesson completion repository."""

from typing import Protocol
from uuid import UUID

from src.core.database.store import CassandraStore

from .errors import CompletionModifiedError
from .models import LessonCompletion


class CompletionStore(Protocol):
    """Persistence for lesson completions."""

    async def get(
        self, user_id: UUID, course_id: UUID, content_id: UUID
    ) -> LessonCompletion | None: ...

    async def list_for_course(
        self, user_id: UUID, course_id: UUID
    ) -> list[LessonCompletion]: ...

    async def insert(self, completion: LessonCompletion) -> bool:
        """Create the record if none exists for (user, content).

        Returns:
            False when another writer created it first
        """
        ...

    async def update(
        self, completion: LessonCompletion, expected_revision: int
    ) -> None:
        """Persist if the stored revision still matches.

        Raises:
            CompletionModifiedError: stored revision differs
        """
        ...


class CassandraCompletionStore(CassandraStore):
    """Completions partitioned by (user_id, course_id)."""

    def _prepare_statements(self) -> None:
        self._insert_completion = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_completions
            (user_id, course_id, content_id, completion_id, is_completed,
             completed_at, time_spent, progress, last_accessed_at, created_at,
             updated_at, revision)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._update_completion = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_completions
            SET is_completed = ?, completed_at = ?, time_spent = ?, progress = ?,
                last_accessed_at = ?, updated_at = ?, revision = ?
            WHERE user_id = ? AND course_id = ? AND content_id = ?
            IF revision = ?
        """)

        self._get_completion = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_completions
            WHERE user_id = ? AND course_id = ? AND content_id = ?
        """)

        self._get_course_completions = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_completions
            WHERE user_id = ? AND course_id = ?
        """)

    async def get(
        self, user_id: UUID, course_id: UUID, content_id: UUID
    ) -> LessonCompletion | None:
        result = await self._execute(
            self._get_completion, [user_id, course_id, content_id]
        )
        row = result.one()
        return LessonCompletion.from_row(row) if row else None

    async def list_for_course(
        self, user_id: UUID, course_id: UUID
    ) -> list[LessonCompletion]:
        rows = await self._execute(self._get_course_completions, [user_id, course_id])
        return [LessonCompletion.from_row(row) for row in rows]

    async def insert(self, completion: LessonCompletion) -> bool:
        result = await self._execute(
            self._insert_completion,
            [
                completion.user_id,
                completion.course_id,
                completion.content_id,
                completion.id,
                completion.is_completed,
                completion.completed_at,
                completion.time_spent,
                completion.progress,
                completion.last_accessed_at,
                completion.created_at,
                completion.updated_at,
                completion.revision,
            ],
        )
        return bool(result.was_applied)

    async def update(
        self, completion: LessonCompletion, expected_revision: int
    ) -> None:
        result = await self._execute(
            self._update_completion,
            [
                completion.is_completed,
                completion.completed_at,
                completion.time_spent,
                completion.progress,
                completion.last_accessed_at,
                completion.updated_at,
                completion.revision,
                completion.user_id,
                completion.course_id,
                completion.content_id,
                expected_revision,
            ],
        )
        if not result.was_applied:
            raise CompletionModifiedError()
