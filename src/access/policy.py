"""Access policy: may this identity see this course's content?

``decide`` is a pure function of identity, course, the caller's enrollment
(or None) and the tier being guarded. It performs no I/O and caches nothing;
callers fetch a fresh enrollment for every decision.

Tiers:
- paid_content: enrollment must be active and paid
- enrollment_only: any enrollment row, whatever its state
- course_access_loose: every trainee is let in; other non-owners need a row
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.auth.permissions import UserRole
from src.auth.schemas import Identity
from src.courses.models import Course
from src.enrollments.models import Enrollment, EnrollmentStatus, PaymentStatus


class AccessTier(str, Enum):
    """Guard strength applied to an endpoint."""

    PAID_CONTENT = "paid_content"
    ENROLLMENT_ONLY = "enrollment_only"
    COURSE_ACCESS_LOOSE = "course_access_loose"


class AccessReason(str, Enum):
    """Why access was granted."""

    ADMIN_ROLE = "admin_role"  # Super admin sees everything
    COURSE_OWNER = "course_owner"  # Trainer viewing their own course
    ENROLLMENT = "enrollment"  # Enrollment satisfies the tier
    OPEN_ACCESS = "open_access"  # Loose tier lets trainees in


class DenyReason(str, Enum):
    """Why access was refused."""

    NO_ENROLLMENT = "no_enrollment"
    PAYMENT_REQUIRED = "payment_required"
    ENROLLMENT_INACTIVE = "enrollment_inactive"


DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.NO_ENROLLMENT: "You must be enrolled in this course",
    DenyReason.PAYMENT_REQUIRED: "Payment is required to access this content",
    DenyReason.ENROLLMENT_INACTIVE: "Your enrollment is not active",
}


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a policy evaluation.

    ``details`` uses the camelCase keys clients already rely on
    (requiresEnrollment, requiresPayment, paymentStatus, coursePrice,
    enrollmentId, enrollmentStatus, requiresActivation).
    """

    allowed: bool
    reason: AccessReason | None = None
    deny_reason: DenyReason | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls, reason: AccessReason) -> "AccessDecision":
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, deny_reason: DenyReason, **details: Any) -> "AccessDecision":
        return cls(allowed=False, deny_reason=deny_reason, details=details)

    @property
    def message(self) -> str:
        if self.allowed or self.deny_reason is None:
            return "Access granted"
        return DENY_MESSAGES[self.deny_reason]


def _no_enrollment(course: Course) -> AccessDecision:
    return AccessDecision.deny(
        DenyReason.NO_ENROLLMENT,
        requiresEnrollment=True,
        coursePrice=float(course.price),
    )


def decide(
    identity: Identity,
    course: Course,
    enrollment: Enrollment | None,
    tier: AccessTier,
) -> AccessDecision:
    """Evaluate access for ``identity`` to ``course`` under ``tier``."""
    if identity.role == UserRole.SUPER_ADMIN:
        return AccessDecision.allow(AccessReason.ADMIN_ROLE)

    if identity.role == UserRole.TRAINER and course.is_owned_by(identity.id):
        return AccessDecision.allow(AccessReason.COURSE_OWNER)

    if tier == AccessTier.COURSE_ACCESS_LOOSE and identity.role == UserRole.TRAINEE:
        return AccessDecision.allow(AccessReason.OPEN_ACCESS)

    if enrollment is None:
        return _no_enrollment(course)

    if tier != AccessTier.PAID_CONTENT:
        return AccessDecision.allow(AccessReason.ENROLLMENT)

    # Free courses only need the row to be active
    if not course.is_free and enrollment.payment_status != PaymentStatus.PAID:
        return AccessDecision.deny(
            DenyReason.PAYMENT_REQUIRED,
            requiresPayment=True,
            paymentStatus=enrollment.payment_status.value,
            coursePrice=float(course.price),
            enrollmentId=str(enrollment.id),
        )

    if enrollment.status != EnrollmentStatus.ACTIVE:
        return AccessDecision.deny(
            DenyReason.ENROLLMENT_INACTIVE,
            enrollmentStatus=enrollment.status.value,
            requiresActivation=enrollment.status == EnrollmentStatus.PENDING,
        )

    return AccessDecision.allow(AccessReason.ENROLLMENT)
