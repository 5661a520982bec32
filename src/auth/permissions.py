"""Role-based access control.

Hierarchical roles:
- SUPER_ADMIN (level 2): Full system access
- TRAINER (level 1): Authors and manages own courses
- TRAINEE (level 0): Learner
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    TRAINEE = "trainee"
    TRAINER = "trainer"
    SUPER_ADMIN = "super_admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.TRAINEE: 0,
    UserRole.TRAINER: 1,
    UserRole.SUPER_ADMIN: 2,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role.

    Unknown roles get the lowest level.
    """
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.SUPER_ADMIN, UserRole.TRAINER)
        True
        >>> has_permission("trainee", "trainer")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_super_admin(role: UserRole | str) -> bool:
    """Check if role is SUPER_ADMIN."""
    return role == UserRole.SUPER_ADMIN or role == UserRole.SUPER_ADMIN.value


def is_trainer(role: UserRole | str) -> bool:
    """Check if role is exactly TRAINER."""
    return role == UserRole.TRAINER or role == UserRole.TRAINER.value


def is_trainee(role: UserRole | str) -> bool:
    """Check if role is exactly TRAINEE."""
    return role == UserRole.TRAINEE or role == UserRole.TRAINEE.value
