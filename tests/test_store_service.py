"""Tests for store proximity search."""

import math

import pytest

from meal_planner.errors import ValidationError
from meal_planner.services.stores import StoreService, distance_km
from tests.conftest import InMemoryStoreRepository


def test_nearby_filters_by_radius(store_repository: InMemoryStoreRepository) -> None:
    service = StoreService(store_repository)

    stores = service.nearby(55.75, 37.62)

    assert [store.name for store in stores] == ["Corner Market"]


def test_nearby_sorts_nearest_first(
    store_repository: InMemoryStoreRepository,
) -> None:
    service = StoreService(store_repository)

    stores = service.nearby(56.4, 38.4, radius_km=500)

    assert [store.name for store in stores] == ["Far Away Foods", "Corner Market"]


def test_zero_radius_keeps_exact_matches(
    store_repository: InMemoryStoreRepository,
) -> None:
    service = StoreService(store_repository)

    stores = service.nearby(55.751, 37.618, radius_km=0)

    assert [store.name for store in stores] == ["Corner Market"]


@pytest.mark.parametrize(
    ("lat", "lng", "radius"),
    [(math.nan, 37.6, 5.0), (55.7, math.inf, 5.0), (55.7, 37.6, -1.0)],
)
def test_nearby_rejects_invalid_input(
    store_repository: InMemoryStoreRepository,
    lat: float,
    lng: float,
    radius: float,
) -> None:
    service = StoreService(store_repository)

    with pytest.raises(ValidationError):
        service.nearby(lat, lng, radius_km=radius)


def test_distance_uses_flat_degrees(
    store_repository: InMemoryStoreRepository,
) -> None:
    store = store_repository.stores[0]

    assert distance_km(store, store.latitude + 0.03, store.longitude + 0.04) == (
        pytest.approx(0.05 * 111)
    )
