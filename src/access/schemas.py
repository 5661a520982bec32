"""Access API schemas."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .policy import AccessDecision, AccessReason, AccessTier, DenyReason


class AccessCheckResponse(BaseModel):
    """Result of an access check."""

    course_id: UUID
    tier: AccessTier
    has_access: bool
    access_reason: AccessReason | None = None
    deny_reason: DenyReason | None = None
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_decision(
        cls, course_id: UUID, tier: AccessTier, decision: AccessDecision
    ) -> "AccessCheckResponse":
        return cls(
            course_id=course_id,
            tier=tier,
            has_access=decision.allowed,
            access_reason=decision.reason,
            deny_reason=decision.deny_reason,
            message=decision.message,
            details=decision.details,
        )
