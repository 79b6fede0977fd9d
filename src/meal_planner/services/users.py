"""User-related business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.models import UserRecord
from meal_planner.domain.profile import Profile
from meal_planner.errors import NotFoundError


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def get_by_telegram_id(self, telegram_user_id: int) -> UserRecord | None:
        """Return the user for a Telegram user id, if present."""

    def create_user(self, telegram_user_id: int) -> UserRecord:
        """Create and return a new user record."""

    def update_profile(self, user_id: UUID, profile: Profile) -> UserRecord | None:
        """Store the profile fields on the user row and return the user."""

    def touch_last_active(self, user_id: UUID) -> None:
        """Update the last active timestamp for the user."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    def ensure_user(self, telegram_user_id: int) -> UserRecord:
        """Ensure a user exists for the Telegram id and return it."""
        existing = self.repository.get_by_telegram_id(telegram_user_id)
        if existing:
            self.repository.touch_last_active(existing.id)
            return existing
        return self.repository.create_user(telegram_user_id)

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return a user or raise ``NotFoundError``."""
        user = self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_by_telegram_id(self, telegram_user_id: int) -> UserRecord:
        """Return the user for a Telegram id or raise ``NotFoundError``."""
        user = self.repository.get_by_telegram_id(telegram_user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: UUID, profile: Profile) -> UserRecord:
        """Replace the stored profile of a user."""
        user = self.repository.update_profile(user_id, profile)
        if user is None:
            raise NotFoundError("User not found")
        return user
