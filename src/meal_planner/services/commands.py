"""Handlers for Telegram commands and Mini App data."""

import logging
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field
from pydantic import ValidationError as PayloadValidationError

from meal_planner.adapters.telegram_client import TelegramClient
from meal_planner.domain.profile import NutritionTarget, Profile
from meal_planner.services.profile import evaluate
from meal_planner.services.users import UserService

OPEN_APP_LABEL = "Open meal planner"

HELP_TEXT = (
    "This bot helps you plan meals on a budget:\n"
    "1. Build a personal meal plan from your profile\n"
    "2. Keep track of the groceries you need\n"
    "3. Find stores nearby\n"
    "4. Keep food spending under control\n"
    f'Tap "{OPEN_APP_LABEL}" in the menu to get started.'
)

_logger = logging.getLogger(__name__)


class WebAppEnvelope(BaseModel):
    """Payload sent by the Mini App through ``web_app_data``."""

    type: Literal["profile", "mealPlan", "groceries"]
    data: dict[str, object] = Field(default_factory=dict)


def open_app_keyboard(web_app_url: str) -> dict:
    """Inline keyboard with a single Mini App button."""
    return {
        "inline_keyboard": [
            [{"text": OPEN_APP_LABEL, "web_app": {"url": web_app_url}}]
        ]
    }


@dataclass
class StartCommandHandler:
    """Handle the /start Telegram command."""

    user_service: UserService
    telegram_client: TelegramClient
    web_app_url: str

    async def handle(
        self, telegram_user_id: int, chat_id: int, first_name: str | None = None
    ) -> None:
        """Register the user if needed and send the Mini App button."""
        self.user_service.ensure_user(telegram_user_id)
        greeting = f"Hi, {first_name}!" if first_name else "Hi!"
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=f"{greeting} I will help you plan your meals within a budget.",
            reply_markup=open_app_keyboard(self.web_app_url),
        )


@dataclass
class HelpCommandHandler:
    """Handle the /help Telegram command."""

    telegram_client: TelegramClient

    async def handle(self, chat_id: int) -> None:
        """Send the quick guide."""
        await self.telegram_client.send_message(chat_id=chat_id, text=HELP_TEXT)


@dataclass
class OpenAppPromptHandler:
    """Point any other message at the Mini App."""

    telegram_client: TelegramClient
    web_app_url: str

    async def handle(self, chat_id: int) -> None:
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text="Use the menu or tap the button below to open the planner.",
            reply_markup=open_app_keyboard(self.web_app_url),
        )


@dataclass
class WebAppDataHandler:
    """Acknowledge data the Mini App sends back to the chat.

    A ``profile`` envelope is stored on the user and answered with the
    computed daily targets. Plans and grocery lists get a short summary.
    """

    user_service: UserService
    telegram_client: TelegramClient
    web_app_url: str

    async def handle(self, telegram_user_id: int, chat_id: int, raw: str) -> None:
        """Parse the envelope and reply with a summary."""
        try:
            envelope = WebAppEnvelope.model_validate_json(raw)
        except PayloadValidationError as exc:
            _logger.warning("Rejected Mini App payload: %s", exc)
            await self.telegram_client.send_message(
                chat_id=chat_id, text="Something went wrong while reading the data."
            )
            return

        if envelope.type == "profile":
            text = self._store_profile(telegram_user_id, envelope.data)
        elif envelope.type == "mealPlan":
            text = _format_meal_plan(envelope.data)
        else:
            text = _format_groceries(envelope.data)
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=text,
            reply_markup=open_app_keyboard(self.web_app_url),
        )

    def _store_profile(self, telegram_user_id: int, data: dict[str, object]) -> str:
        try:
            profile = Profile.model_validate(data)
        except PayloadValidationError as exc:
            _logger.warning(
                "Invalid profile from Mini App user %s: %s", telegram_user_id, exc
            )
            return "The profile is incomplete. Please check the form and try again."
        user = self.user_service.ensure_user(telegram_user_id)
        self.user_service.update_profile(user.id, profile)
        return _format_target(evaluate(profile))


def _format_target(target: NutritionTarget) -> str:
    return "\n".join(
        [
            "Profile saved! Your daily targets:",
            f"Calories: {target.calories} kcal",
            f"Protein: {target.protein_g} g",
            f"Fat: {target.fat_g} g",
            f"Carbs: {target.carbs_g} g",
            f"Budget: {target.budget:.2f}",
        ]
    )


def _format_meal_plan(data: dict[str, object]) -> str:
    meals = data.get("meals")
    count = len(meals) if isinstance(meals, list) else 0
    lines = [f"Meal plan received: {count} meals."]
    total_cost = data.get("totalCost", data.get("total_cost"))
    if isinstance(total_cost, int | float) and not isinstance(total_cost, bool):
        lines.append(f"Total cost: {total_cost:.2f}")
    return "\n".join(lines)


def _format_groceries(data: dict[str, object]) -> str:
    items = data.get("items")
    entries = items if isinstance(items, list) else []
    purchased = sum(
        1 for entry in entries if isinstance(entry, dict) and entry.get("purchased")
    )
    return f"Grocery list received: {len(entries)} items, {purchased} purchased."
