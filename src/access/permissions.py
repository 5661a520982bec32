"""Caller-side authorization for mutations.

These answer "who may change this", separately from ``policy.decide`` which
answers "who may read this course's content".
"""

from src.auth.schemas import Identity
from src.courses.models import Course
from src.enrollments.models import Enrollment


def can_manage_course(identity: Identity, course: Course) -> bool:
    """Super admin or the course's trainer."""
    if identity.is_super_admin:
        return True
    return identity.is_trainer and course.is_owned_by(identity.id)


def can_author_course(identity: Identity, course: Course) -> bool:
    """Who may edit sections and content of a course.

    A course with no trainer yet is open to any trainer.
    """
    if can_manage_course(identity, course):
        return True
    return identity.is_trainer and course.trainer_id is None


def can_manage_enrollment(
    identity: Identity, enrollment: Enrollment, course: Course
) -> bool:
    """Status, progress and cancellation: admin, course trainer or the learner."""
    return enrollment.user_id == identity.id or can_manage_course(identity, course)


def can_record_payment(identity: Identity, course: Course) -> bool:
    """Payments are recorded by an admin or the course trainer only."""
    return can_manage_course(identity, course)
