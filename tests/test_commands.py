"""Tests for Mini App data handling."""

import asyncio
import json

from meal_planner.services.commands import WebAppDataHandler
from meal_planner.services.users import UserService
from tests.conftest import FakeTelegramClient, InMemoryUserRepository


def _handle(raw: str) -> tuple[FakeTelegramClient, InMemoryUserRepository]:
    repository = InMemoryUserRepository()
    telegram_client = FakeTelegramClient()
    handler = WebAppDataHandler(
        UserService(repository), telegram_client, "https://planner.example"
    )
    asyncio.run(handler.handle(telegram_user_id=5, chat_id=50, raw=raw))
    return telegram_client, repository


def test_meal_plan_summary() -> None:
    raw = json.dumps(
        {"type": "mealPlan", "data": {"meals": [{}, {}, {}], "totalCost": 12.5}}
    )

    telegram_client, _ = _handle(raw)

    assert telegram_client.messages == [
        (50, "Meal plan received: 3 meals.\nTotal cost: 12.50")
    ]


def test_grocery_summary_counts_purchased_items() -> None:
    raw = json.dumps(
        {
            "type": "groceries",
            "data": {"items": [{"purchased": True}, {"purchased": False}, {}]},
        }
    )

    telegram_client, _ = _handle(raw)

    assert telegram_client.messages[0][1] == (
        "Grocery list received: 3 items, 1 purchased."
    )


def test_incomplete_profile_is_not_stored() -> None:
    raw = json.dumps({"type": "profile", "data": {"age": 30}})

    telegram_client, repository = _handle(raw)

    assert telegram_client.messages[0][1].startswith("The profile is incomplete")
    assert repository.users == {}


def test_malformed_payload_gets_error_reply() -> None:
    telegram_client, _ = _handle("{not json")

    assert telegram_client.messages == [
        (50, "Something went wrong while reading the data.")
    ]


def test_unknown_envelope_type_gets_error_reply() -> None:
    telegram_client, _ = _handle(json.dumps({"type": "weather", "data": {}}))

    assert telegram_client.messages[0][1] == (
        "Something went wrong while reading the data."
    )
