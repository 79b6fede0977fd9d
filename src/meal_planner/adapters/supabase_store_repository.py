"""Supabase-backed store repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.stores import Store
from meal_planner.services.stores import StoreRepository


@dataclass
class SupabaseStoreRepository(StoreRepository):
    """Supabase implementation for store lookups."""

    client: Client

    def list_stores(self) -> list[Store]:
        """Return all stores."""
        response = self.client.table("stores").select("*").execute()
        return [_parse_store(row) for row in response.data or []]


def _parse_store(row: dict[str, object]) -> Store:
    rating = row.get("rating")
    review_count = row.get("review_count")
    return Store(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        address=str(row.get("address") or ""),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        rating=float(rating) if rating is not None else None,
        review_count=int(review_count) if review_count is not None else None,
        image_url=row.get("image_url"),
    )
