"""Access service: loads fresh state and applies the policy."""

from uuid import UUID

from src.auth.schemas import Identity
from src.core.logging import get_logger
from src.courses.errors import CourseNotFoundError
from src.courses.models import Course
from src.courses.store import CourseStore
from src.enrollments.store import EnrollmentStore

from .errors import AccessDeniedError
from .policy import AccessDecision, AccessTier, decide


logger = get_logger(__name__)


class AccessService:
    """Evaluates course access for a caller."""

    def __init__(self, courses: CourseStore, enrollments: EnrollmentStore):
        self.courses = courses
        self.enrollments = enrollments

    async def check(
        self, identity: Identity, course_id: UUID, tier: AccessTier
    ) -> tuple[Course, AccessDecision]:
        """Evaluate access without raising on denial.

        Raises:
            CourseNotFoundError: course does not exist
        """
        course = await self.courses.get(course_id)
        if not course:
            raise CourseNotFoundError()

        enrollment = await self.enrollments.get_for(identity.id, course_id)
        decision = decide(identity, course, enrollment, tier)

        if decision.allowed:
            logger.debug(
                "access_granted",
                course_id=str(course_id),
                tier=tier.value,
                reason=decision.reason.value if decision.reason else None,
            )
        else:
            logger.info(
                "access_denied",
                course_id=str(course_id),
                tier=tier.value,
                reason=decision.deny_reason.value if decision.deny_reason else None,
            )
        return course, decision

    async def require(
        self, identity: Identity, course_id: UUID, tier: AccessTier
    ) -> Course:
        """Evaluate access and raise ``AccessDeniedError`` on denial."""
        course, decision = await self.check(identity, course_id, tier)
        if not decision.allowed:
            raise AccessDeniedError(decision)
        return course
