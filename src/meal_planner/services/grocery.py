"""Grocery list aggregation."""

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.grocery import GroceryItem, GroceryItemDetail, GroceryTotals
from meal_planner.domain.meals import IngredientRef
from meal_planner.errors import NotFoundError, PartialBatchFailure, ValidationError
from meal_planner.services.catalog import CatalogRepository

_logger = logging.getLogger(__name__)


class GroceryRepository(Protocol):
    """Persistence interface for grocery list rows."""

    def find_item(
        self, user_id: UUID, food_item_id: UUID, meal_plan_id: UUID | None
    ) -> GroceryItem | None:
        """Return the row for (user, food item, plan), if present."""

    def create_item(
        self,
        user_id: UUID,
        food_item_id: UUID,
        quantity: float,
        meal_plan_id: UUID | None,
    ) -> GroceryItem:
        """Insert an unpurchased row and return it."""

    def get_item(self, item_id: UUID) -> GroceryItem | None:
        """Return a row by id, if present."""

    def update_item(self, item_id: UUID, payload: dict[str, object]) -> GroceryItem:
        """Update quantity and/or purchased flag and return the row."""

    def list_items(self, user_id: UUID) -> list[GroceryItem]:
        """Return all rows for a user."""


@dataclass(frozen=True)
class IngredientEntry:
    """Validated grocery addition."""

    food_item_id: UUID
    quantity: float


@dataclass(frozen=True)
class ItemUpdate:
    """Validated grocery row update."""

    item_id: UUID
    purchased: bool | None = None
    quantity: float | None = None


@dataclass
class GroceryAggregator:
    """Merges ingredients into per-user grocery rows."""

    repository: GroceryRepository
    catalog_repository: CatalogRepository

    async def add_ingredients(
        self,
        user_id: UUID | None,
        meal_plan_id: UUID | None,
        ingredients: Iterable[object],
    ) -> list[GroceryItem]:
        """Upsert a batch of ingredients, skipping invalid entries.

        Entries for the same food item are merged before writing. Rows are
        keyed by (user, food item, plan); an existing row gets its quantity
        incremented and keeps its purchased flag.
        """
        if user_id is None:
            raise ValidationError("user id is required to add grocery items")
        raw_entries = list(ingredients)
        if not raw_entries:
            return []

        merged: dict[UUID, float] = {}
        for raw in raw_entries:
            try:
                entry = parse_ingredient_entry(raw)
            except PartialBatchFailure as failure:
                _logger.warning("Skipping grocery entry: %s (%r)", failure, raw)
                continue
            merged[entry.food_item_id] = (
                merged.get(entry.food_item_id, 0.0) + entry.quantity
            )
        if not merged:
            raise ValidationError("no valid grocery entries in batch")

        results = await asyncio.gather(
            *(
                asyncio.to_thread(
                    self._upsert, user_id, meal_plan_id, food_item_id, quantity
                )
                for food_item_id, quantity in merged.items()
            ),
            return_exceptions=True,
        )
        return _collect(results, action="add")

    def add_item(
        self,
        user_id: UUID | None,
        food_item_id: object,
        quantity: object,
        meal_plan_id: UUID | None = None,
    ) -> GroceryItem:
        """Add a single item, merging with an existing row."""
        if user_id is None:
            raise ValidationError("user id is required to add grocery items")
        try:
            entry = parse_ingredient_entry(
                {"food_item_id": food_item_id, "quantity": quantity}
            )
        except PartialBatchFailure as failure:
            raise ValidationError(failure.message) from failure
        if self.catalog_repository.get_food_item(entry.food_item_id) is None:
            raise NotFoundError("Food item not found")
        return self._upsert(user_id, meal_plan_id, entry.food_item_id, entry.quantity)

    def update_item(
        self,
        item_id: UUID,
        purchased: bool | None = None,
        quantity: float | None = None,
    ) -> GroceryItem:
        """Set the purchased flag and/or quantity of a row."""
        try:
            update = parse_item_update(
                {"id": item_id, "purchased": purchased, "quantity": quantity}
            )
        except PartialBatchFailure as failure:
            raise ValidationError(failure.message) from failure
        if self.repository.get_item(update.item_id) is None:
            raise NotFoundError("Grocery item not found")
        return self._apply_update(update)

    async def update_items(self, updates: Iterable[object]) -> list[GroceryItem]:
        """Apply a batch of updates, skipping invalid or missing entries."""
        raw_updates = list(updates)
        if not raw_updates:
            return []
        valid: list[ItemUpdate] = []
        for raw in raw_updates:
            try:
                valid.append(parse_item_update(raw))
            except PartialBatchFailure as failure:
                _logger.warning("Skipping grocery update: %s (%r)", failure, raw)
        if not valid:
            raise ValidationError("no valid grocery updates in batch")
        results = await asyncio.gather(
            *(asyncio.to_thread(self._apply_update, update) for update in valid),
            return_exceptions=True,
        )
        return _collect(results, action="update")

    def list_details(self, user_id: UUID) -> list[GroceryItemDetail]:
        """Return a user's rows joined with their catalog entries."""
        details: list[GroceryItemDetail] = []
        food_items = {}
        for item in self.repository.list_items(user_id):
            if item.food_item_id not in food_items:
                food_items[item.food_item_id] = self.catalog_repository.get_food_item(
                    item.food_item_id
                )
            food_item = food_items[item.food_item_id]
            if food_item is None:
                _logger.warning(
                    "Grocery item %s references missing food item %s",
                    item.id,
                    item.food_item_id,
                )
                continue
            details.append(GroceryItemDetail(item=item, food_item=food_item))
        return details

    def _upsert(
        self,
        user_id: UUID,
        meal_plan_id: UUID | None,
        food_item_id: UUID,
        quantity: float,
    ) -> GroceryItem:
        existing = self.repository.find_item(user_id, food_item_id, meal_plan_id)
        if existing is not None:
            return self.repository.update_item(
                existing.id, {"quantity": existing.quantity + quantity}
            )
        return self.repository.create_item(
            user_id, food_item_id, quantity, meal_plan_id
        )

    def _apply_update(self, update: ItemUpdate) -> GroceryItem:
        payload: dict[str, object] = {}
        if update.purchased is not None:
            payload["purchased"] = update.purchased
        if update.quantity is not None:
            payload["quantity"] = update.quantity
        return self.repository.update_item(update.item_id, payload)


def totals(details: list[GroceryItemDetail]) -> GroceryTotals:
    """Count items and sum their cost, purchased or not."""
    return GroceryTotals(
        total_count=len(details),
        purchased_count=sum(1 for detail in details if detail.item.purchased),
        total_cost=sum(detail.cost for detail in details),
    )


def group_by_category(
    details: list[GroceryItemDetail],
) -> dict[str, list[GroceryItemDetail]]:
    """Partition items by their catalog category, keeping order."""
    groups: dict[str, list[GroceryItemDetail]] = {}
    for detail in details:
        groups.setdefault(detail.food_item.category, []).append(detail)
    return groups


def filter_details(
    details: list[GroceryItemDetail],
    search: str | None = None,
    category: str | None = None,
) -> list[GroceryItemDetail]:
    """Filter by case-insensitive name substring and exact category."""
    needle = search.lower() if search else None
    return [
        detail
        for detail in details
        if (needle is None or needle in detail.food_item.name.lower())
        and (category is None or detail.food_item.category == category)
    ]


def parse_ingredient_entry(raw: object) -> IngredientEntry:
    """Validate one grocery addition.

    Accepts an ``IngredientRef`` or a mapping with ``food_item_id`` (or
    ``foodItemId``) and ``quantity``.
    """
    if isinstance(raw, IngredientRef):
        food_item_id: object = raw.food_item_id
        quantity: object = raw.quantity
    elif isinstance(raw, dict):
        food_item_id = raw.get("food_item_id", raw.get("foodItemId"))
        quantity = raw.get("quantity")
    else:
        raise PartialBatchFailure("unsupported entry type", raw)
    parsed_id = _parse_uuid(food_item_id)
    if parsed_id is None:
        raise PartialBatchFailure("missing or invalid food item id", raw)
    parsed_quantity = _parse_quantity(quantity)
    if parsed_quantity is None:
        raise PartialBatchFailure("quantity must be a positive number", raw)
    return IngredientEntry(food_item_id=parsed_id, quantity=parsed_quantity)


def parse_item_update(raw: object) -> ItemUpdate:
    """Validate one grocery row update."""
    if not isinstance(raw, dict):
        raise PartialBatchFailure("unsupported update type", raw)
    item_id = _parse_uuid(raw.get("id"))
    if item_id is None:
        raise PartialBatchFailure("missing or invalid grocery item id", raw)
    purchased = raw.get("purchased")
    if purchased is not None and not isinstance(purchased, bool):
        raise PartialBatchFailure("purchased must be a boolean", raw)
    quantity = raw.get("quantity")
    parsed_quantity = None
    if quantity is not None:
        parsed_quantity = _parse_quantity(quantity)
        if parsed_quantity is None:
            raise PartialBatchFailure("quantity must be a positive number", raw)
    if purchased is None and parsed_quantity is None:
        raise PartialBatchFailure("nothing to update", raw)
    return ItemUpdate(item_id=item_id, purchased=purchased, quantity=parsed_quantity)


def _collect(results: list[object], *, action: str) -> list[GroceryItem]:
    items: list[GroceryItem] = []
    for result in results:
        if isinstance(result, Exception):
            _logger.warning("Grocery %s failed: %s", action, result)
            continue
        if isinstance(result, BaseException):
            raise result
        items.append(result)
    return items


def _parse_uuid(value: object) -> UUID | None:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            return None
    return None


def _parse_quantity(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)
