"""Tests for roles, token handling and the identity dependency."""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException
from jose import JWTError

from src.auth.dependencies import get_current_user, get_token_from_header
from src.auth.permissions import (
    ROLE_HIERARCHY,
    UserRole,
    get_role_level,
    has_permission,
    is_super_admin,
    is_trainee,
    is_trainer,
)
from src.auth.schemas import Identity
from src.auth.security import create_access_token, decode_access_token


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_values(self) -> None:
        assert UserRole.TRAINEE.value == "trainee"
        assert UserRole.TRAINER.value == "trainer"
        assert UserRole.SUPER_ADMIN.value == "super_admin"

    def test_role_hierarchy(self) -> None:
        assert ROLE_HIERARCHY[UserRole.TRAINEE] == 0
        assert ROLE_HIERARCHY[UserRole.TRAINER] == 1
        assert ROLE_HIERARCHY[UserRole.SUPER_ADMIN] == 2

    def test_all_roles_have_levels(self) -> None:
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestPermissions:
    @pytest.mark.parametrize(
        "role,expected_level",
        [("trainee", 0), ("trainer", 1), ("super_admin", 2), ("unknown", 0)],
    )
    def test_string_roles(self, role: str, expected_level: int) -> None:
        """Unknown roles fall back to the lowest level."""
        assert get_role_level(role) == expected_level

    @pytest.mark.parametrize(
        "user_role,required,expected",
        [
            (UserRole.SUPER_ADMIN, UserRole.TRAINER, True),
            (UserRole.TRAINER, UserRole.TRAINER, True),
            (UserRole.TRAINEE, UserRole.TRAINER, False),
            ("trainer", "super_admin", False),
        ],
    )
    def test_has_permission(self, user_role, required, expected) -> None:
        assert has_permission(user_role, required) is expected

    def test_exact_role_checks(self) -> None:
        assert is_super_admin("super_admin")
        assert is_trainer(UserRole.TRAINER)
        assert is_trainee("trainee")
        assert not is_trainer(UserRole.SUPER_ADMIN)


class TestAccessToken:
    """Tests for access token creation and decoding."""

    def test_round_trip_claims(self) -> None:
        user_id = uuid4()
        token = create_access_token({"sub": str(user_id), "role": "trainer"})
        payload = decode_access_token(token)
        assert payload["sub"] == str(user_id)
        assert payload["role"] == "trainer"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(
            {"sub": str(uuid4()), "role": "trainee"},
            expires_delta=timedelta(seconds=-1),
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_token_without_role_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4())})
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_tampered_token_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4()), "role": "trainee"})
        with pytest.raises(JWTError):
            decode_access_token(token[:-4] + "abcd")


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_resolves_identity(self) -> None:
        user_id = uuid4()
        token = create_access_token({"sub": str(user_id), "role": "trainer"})

        identity = await get_current_user(token)

        assert identity == Identity(id=user_id, role=UserRole.TRAINER)
        assert identity.is_trainer

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_role_is_401(self) -> None:
        token = create_access_token({"sub": str(uuid4()), "role": "pharmacist"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_subject_is_401(self) -> None:
        token = create_access_token({"sub": "not-a-uuid", "role": "trainee"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token)
        assert exc_info.value.status_code == 401

    def test_identity_is_immutable(self) -> None:
        identity = Identity(id=UUID(int=1), role=UserRole.TRAINEE)
        with pytest.raises(Exception):  # noqa: B017
            identity.role = UserRole.SUPER_ADMIN

    def test_bearer_header_parsing(self) -> None:
        class _Request:
            def __init__(self, value):
                self.headers = {"Authorization": value} if value else {}

        assert get_token_from_header(_Request("Bearer abc")) == "abc"
        assert get_token_from_header(_Request("Basic abc")) is None
        assert get_token_from_header(_Request(None)) is None
