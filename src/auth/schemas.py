"""Authenticated identity schema."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.auth.permissions import UserRole


class Identity(BaseModel):
    """Caller identity resolved from the access token. Immutable."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: UserRole

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_trainer(self) -> bool:
        return self.role == UserRole.TRAINER

    @property
    def is_trainee(self) -> bool:
        return self.role == UserRole.TRAINEE
