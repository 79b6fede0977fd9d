"""Tests for user service."""

from uuid import uuid4

import pytest

from meal_planner.errors import NotFoundError
from meal_planner.services.users import UserService
from tests.conftest import InMemoryUserRepository, sample_profile


def test_ensure_user_creates_user() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    user = service.ensure_user(telegram_user_id=123)

    assert user.telegram_user_id == 123
    assert user.profile is None
    assert user.id in repository.users


def test_ensure_user_touches_existing_user() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    user = repository.create_user(telegram_user_id=456)
    same = service.ensure_user(telegram_user_id=456)

    assert same == user
    assert repository.touched == [user.id]


def test_update_profile_stores_profile() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)
    user = service.ensure_user(telegram_user_id=789)

    updated = service.update_profile(user.id, sample_profile(goal="gain"))

    assert updated.profile is not None
    assert updated.profile.goal == "gain"
    assert service.get_by_telegram_id(789).profile == updated.profile


def test_missing_users_raise_not_found() -> None:
    service = UserService(InMemoryUserRepository())

    with pytest.raises(NotFoundError):
        service.get_user(uuid4())
    with pytest.raises(NotFoundError):
        service.get_by_telegram_id(1)
    with pytest.raises(NotFoundError):
        service.update_profile(uuid4(), sample_profile())
