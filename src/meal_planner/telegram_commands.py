"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum

from meal_planner.services.commands import OPEN_APP_LABEL


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Open the meal planner")
    HELP = TelegramCommand("help", "What the planner can do")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def chat_menu_button(web_app_url: str) -> dict[str, object]:
    """Menu button that launches the Mini App."""
    return {
        "type": "web_app",
        "text": OPEN_APP_LABEL,
        "web_app": {"url": web_app_url},
    }
