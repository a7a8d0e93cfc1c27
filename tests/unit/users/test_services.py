"""Unit tests for UserService."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from backoffice.core.auth.backend import verify_password
from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.modules.users.models import User
from backoffice.modules.users.schemas import UserUpdate
from backoffice.modules.users.services import UserService
from tests.factories import UserCreateFactory


pytestmark = pytest.mark.unit


def _user(**overrides) -> User:
    fields = {
        "id": uuid4(),
        "username": "existing",
        "email": "existing@example.com",
        "password_hash": "hash",
        "is_active": True,
    }
    fields.update(overrides)
    return User(**fields)


@pytest.fixture
def mock_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_conflicting.return_value = []
    repo.create.side_effect = lambda user: user
    repo.update.side_effect = lambda user: user
    return repo


class TestCreateUser:
    """Tests for UserService.create_user method."""

    async def test_create_user_success(self, mock_repo):
        """Verify user is created with a hashed password."""
        data = UserCreateFactory.build(username="newuser", email="new@example.com")

        result = await UserService(repo=mock_repo).create_user(data)

        assert result.username == "newuser"
        assert result.password_hash != data.password
        assert verify_password(data.password, result.password_hash)
        mock_repo.find_conflicting.assert_awaited_once_with(
            "new@example.com", "newuser", exclude_id=None
        )
        mock_repo.create.assert_awaited_once()
        mock_repo.set_roles.assert_not_awaited()

    async def test_duplicate_email_raises_validation_error(self, mock_repo):
        """Verify ValidationError raised when email already exists."""
        mock_repo.find_conflicting.return_value = [_user(email="taken@example.com")]
        data = UserCreateFactory.build(email="TAKEN@example.com")

        with pytest.raises(ValidationError) as exc_info:
            await UserService(repo=mock_repo).create_user(data)

        assert exc_info.value.error_code == "user_exists"
        assert exc_info.value.details["errors"] == [
            {"field": "email", "message": "Email already in use"}
        ]
        mock_repo.create.assert_not_awaited()

    async def test_duplicate_username_raises_validation_error(self, mock_repo):
        mock_repo.find_conflicting.return_value = [_user(username="taken")]
        data = UserCreateFactory.build(username="taken")

        with pytest.raises(ValidationError) as exc_info:
            await UserService(repo=mock_repo).create_user(data)

        fields = [error["field"] for error in exc_info.value.details["errors"]]
        assert fields == ["username"]
        mock_repo.create.assert_not_awaited()

    async def test_unique_violation_on_insert(self, mock_repo):
        """A concurrent signup can take the email between the check and the insert."""
        mock_repo.create.side_effect = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE"))
        data = UserCreateFactory.build()

        with pytest.raises(ValidationError) as exc_info:
            await UserService(repo=mock_repo).create_user(data)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "user_exists"
        assert isinstance(exc_info.value.__cause__, IntegrityError)


class TestGetUser:
    """Tests for UserService.get_user method."""

    async def test_get_user_found(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user

        assert await UserService(repo=mock_repo).get_user(user.id) is user

    async def test_get_user_not_found(self, mock_repo):
        """Verify NotFoundError raised when user doesn't exist."""
        mock_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await UserService(repo=mock_repo).get_user(uuid4())


class TestUpdateUser:
    """Tests for UserService.update_user method."""

    async def test_update_names_and_status(self, mock_repo):
        user = _user(first_name="Old")
        mock_repo.get_by_id.return_value = user

        result = await UserService(repo=mock_repo).update_user(
            user.id,
            UserUpdate(first_name="New", is_active=False),
        )

        assert result.first_name == "New"
        assert result.is_active is False
        mock_repo.update.assert_awaited_once_with(user)
        mock_repo.set_roles.assert_not_awaited()

    async def test_unchanged_email_is_not_rechecked(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user

        await UserService(repo=mock_repo).update_user(
            user.id,
            UserUpdate(email="existing@example.com", last_name="Smith"),
        )

        mock_repo.find_conflicting.assert_awaited_once_with(None, None, exclude_id=user.id)

    async def test_email_taken_by_other_user(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user
        mock_repo.find_conflicting.return_value = [_user(email="other@example.com")]

        with pytest.raises(ValidationError):
            await UserService(repo=mock_repo).update_user(
                user.id,
                UserUpdate(email="other@example.com"),
            )

        assert user.email == "existing@example.com"
        mock_repo.update.assert_not_awaited()

    async def test_unique_violation_on_update(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user
        mock_repo.update.side_effect = IntegrityError("UPDATE users", {}, Exception("UNIQUE"))

        with pytest.raises(ValidationError) as exc_info:
            await UserService(repo=mock_repo).update_user(
                user.id,
                UserUpdate(username="racer"),
            )

        assert exc_info.value.error_code == "user_exists"

    async def test_update_not_found(self, mock_repo):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await UserService(repo=mock_repo).update_user(uuid4(), UserUpdate(first_name="X"))


class TestPasswordAndDelete:
    async def test_update_password_rehashes(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user

        await UserService(repo=mock_repo).update_password(user.id, "brand-new-password")

        assert verify_password("brand-new-password", user.password_hash)
        mock_repo.update.assert_awaited_once_with(user)

    async def test_delete_user(self, mock_repo):
        user = _user()
        mock_repo.get_by_id.return_value = user

        await UserService(repo=mock_repo).delete_user(user.id)

        mock_repo.delete.assert_awaited_once_with(user)

    async def test_delete_missing_user(self, mock_repo):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await UserService(repo=mock_repo).delete_user(uuid4())

        mock_repo.delete.assert_not_awaited()
