"""Access errors."""

from src.core.errors import ForbiddenError

from .policy import AccessDecision


class AccessDeniedError(ForbiddenError):
    """Policy refused access; carries the decision for the response body."""

    def __init__(self, decision: AccessDecision):
        self.decision = decision
        reason = decision.deny_reason.value if decision.deny_reason else "forbidden"
        super().__init__(
            decision.message, reason, {"reason": reason, **decision.details}
        )


class NotAllowedError(ForbiddenError):
    """Caller lacks the role or ownership needed for a mutation."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, "not_allowed")
