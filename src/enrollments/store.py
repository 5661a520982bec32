# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Enrollment repository.

Uniqueness of (user, course) is enforced here with a conditional insert, and
every update is conditional on the row's revision. Neither relies on the
caller having checked first. The id and per-user lookups are written together
in one logged batch after the row, and rewritten whenever an insert for the
same pair is rejected, so a failed lookup write is repaired by the retry.
"""

from typing import Protocol
from uuid import UUID

from cassandra.query import BatchStatement

from src.core.database.store import CassandraStore
from src.core.logging import get_logger

from .errors import DuplicateEnrollmentError, EnrollmentModifiedError
from .models import Enrollment


logger = get_logger(__name__)


class EnrollmentStore(Protocol):
    """Persistence for enrollments."""

    async def get(self, enrollment_id: UUID) -> Enrollment | None: ...

    async def get_for(self, user_id: UUID, course_id: UUID) -> Enrollment | None: ...

    async def insert(self, enrollment: Enrollment) -> None:
        """Persist a new enrollment.

        Raises:
            DuplicateEnrollmentError: a row for (user, course) already exists
        """
        ...

    async def update(self, enrollment: Enrollment, expected_revision: int) -> None:
        """Persist mutable fields if the stored revision still matches.

        Raises:
            EnrollmentModifiedError: stored revision differs
        """
        ...

    async def list_for_course(self, course_id: UUID) -> list[Enrollment]: ...

    async def list_for_user(self, user_id: UUID) -> list[Enrollment]: ...


class CassandraEnrollmentStore(CassandraStore):
    """Enrollments in Cassandra with id and per-user lookup tables."""

    def _prepare_statements(self) -> None:
        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (course_id, user_id, enrollment_id, status, payment_status,
             payment_amount, payment_date, progress, notes, enrolled_at,
             completed_at, updated_at, revision)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._insert_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_id
            (enrollment_id, course_id, user_id)
            VALUES (?, ?, ?)
        """)

        self._insert_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_user
            (user_id, course_id, enrollment_id)
            VALUES (?, ?, ?)
        """)

        self._update_enrollment = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET status = ?, payment_status = ?, payment_amount = ?,
                payment_date = ?, progress = ?, notes = ?, completed_at = ?,
                updated_at = ?, revision = ?
            WHERE course_id = ? AND user_id = ?
            IF revision = ?
        """)

        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE course_id = ? AND user_id = ?
        """)

        self._get_by_id = self.session.prepare(f"""
            SELECT course_id, user_id FROM {self.keyspace}.enrollments_by_id
            WHERE enrollment_id = ?
        """)

        self._get_course_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE course_id = ?
        """)

        self._get_user_courses = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.enrollments_by_user
            WHERE user_id = ?
        """)

    async def get(self, enrollment_id: UUID) -> Enrollment | None:
        result = await self._execute(self._get_by_id, [enrollment_id])
        ref = result.one()
        if not ref:
            return None
        return await self.get_for(ref.user_id, ref.course_id)

    async def get_for(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        result = await self._execute(self._get_enrollment, [course_id, user_id])
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def insert(self, enrollment: Enrollment) -> None:
        result = await self._execute(
            self._insert_enrollment,
            [
                enrollment.course_id,
                enrollment.user_id,
                enrollment.id,
                enrollment.status.value,
                enrollment.payment_status.value,
                enrollment.payment_amount,
                enrollment.payment_date,
                enrollment.progress,
                enrollment.notes,
                enrollment.enrolled_at,
                enrollment.completed_at,
                enrollment.updated_at,
                enrollment.revision,
            ],
        )
        if result.was_applied:
            await self._write_lookups(
                enrollment.id, enrollment.user_id, enrollment.course_id
            )
            return

        # The stored row wins. Its lookups are rewritten in case the write
        # that created it failed after the conditional insert.
        existing = result.one()
        existing_id = getattr(existing, "enrollment_id", None)
        if existing_id is not None:
            await self._write_lookups(
                existing_id, enrollment.user_id, enrollment.course_id
            )
        if existing_id == enrollment.id:
            logger.info("enrollment_lookups_repaired", enrollment_id=str(existing_id))
            return
        raise DuplicateEnrollmentError()

    async def _write_lookups(
        self, enrollment_id: UUID, user_id: UUID, course_id: UUID
    ) -> None:
        batch = BatchStatement()
        batch.add(self._insert_by_id, [enrollment_id, course_id, user_id])
        batch.add(self._insert_by_user, [user_id, course_id, enrollment_id])
        await self._execute(batch)

    async def update(self, enrollment: Enrollment, expected_revision: int) -> None:
        result = await self._execute(
            self._update_enrollment,
            [
                enrollment.status.value,
                enrollment.payment_status.value,
                enrollment.payment_amount,
                enrollment.payment_date,
                enrollment.progress,
                enrollment.notes,
                enrollment.completed_at,
                enrollment.updated_at,
                enrollment.revision,
                enrollment.course_id,
                enrollment.user_id,
                expected_revision,
            ],
        )
        if not result.was_applied:
            logger.warning(
                "enrollment_update_rejected",
                enrollment_id=str(enrollment.id),
                expected_revision=expected_revision,
            )
            raise EnrollmentModifiedError()

    async def list_for_course(self, course_id: UUID) -> list[Enrollment]:
        rows = await self._execute(self._get_course_enrollments, [course_id])
        return [Enrollment.from_row(row) for row in rows]

    async def list_for_user(self, user_id: UUID) -> list[Enrollment]:
        enrollments = []
        for ref in await self._execute(self._get_user_courses, [user_id]):
            enrollment = await self.get_for(user_id, ref.course_id)
            if enrollment:
                enrollments.append(enrollment)
        return enrollments
