"""Domain models for the meal planner."""

from dataclasses import dataclass
from uuid import UUID

from meal_planner.domain.profile import Profile


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: UUID
    telegram_user_id: int
    profile: Profile | None = None
