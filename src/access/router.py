"""Access check endpoint."""

from uuid import UUID

from fastapi import APIRouter, Query

from src.auth.dependencies import CurrentUser

from .dependencies import AccessServiceDep
from .policy import AccessTier
from .schemas import AccessCheckResponse


router = APIRouter(prefix="/v1/access", tags=["access"])


@router.get("/courses/{course_id}", response_model=AccessCheckResponse)
async def check_course_access(
    course_id: UUID,
    user: CurrentUser,
    service: AccessServiceDep,
    tier: AccessTier = Query(default=AccessTier.PAID_CONTENT),
) -> AccessCheckResponse:
    """Report whether the caller may access the course under ``tier``.

    Denials are returned as data, not as 403.
    """
    _, decision = await service.check(user, course_id, tier)
    return AccessCheckResponse.from_decision(course_id, tier, decision)
