"""FastAPI dependencies for course access guards."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from src.auth.dependencies import CurrentUser
from src.courses.models import Course

from .policy import AccessTier
from .service import AccessService


async def get_access_service(request: Request) -> AccessService:
    """Get access service from app state."""
    service = getattr(request.app.state, "access_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Access service not available",
        )
    return service


AccessServiceDep = Annotated[AccessService, Depends(get_access_service)]


def require_course_access(tier: AccessTier):
    """Create dependency guarding a ``{course_id}`` route at ``tier``.

    Example:
        @router.get("/courses/{course_id}/sections")
        async def list_sections(
            course: Annotated[
                Course, Depends(require_course_access(AccessTier.COURSE_ACCESS_LOOSE))
            ]
        ):
            ...
    """

    async def access_checker(
        course_id: UUID,
        user: CurrentUser,
        service: AccessServiceDep,
    ) -> Course:
        return await service.require(user, course_id, tier)

    return access_checker


PaidContentCourse = Annotated[
    Course, Depends(require_course_access(AccessTier.PAID_CONTENT))
]
EnrolledCourse = Annotated[
    Course, Depends(require_course_access(AccessTier.ENROLLMENT_ONLY))
]
LooseAccessCourse = Annotated[
    Course, Depends(require_course_access(AccessTier.COURSE_ACCESS_LOOSE))
]
