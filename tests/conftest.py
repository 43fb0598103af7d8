"""
Pytest configuration and fixtures.

Provides shared reference data, samplers and database stores for all tests.
"""

import asyncio
from datetime import datetime

import pytest

from orderseed.data.models import (
    AccessFlags,
    CategoryRecord,
    ComponentRecord,
    EmployeeRecord,
    ItemRecord,
    ReferenceData,
    SellableRecord,
)
from orderseed.db.seed import seed_reference_data
from orderseed.db.store import OrderStore
from orderseed.sampling.calendar import BusinessCalendar
from orderseed.sampling.weighted import WeightedSampler

# Wednesday, inside opening hours
WEDNESDAY = datetime(2025, 6, 11, 15, 0)
# Closed all day
SUNDAY = datetime(2025, 6, 15, 15, 0)


def _sellable(id, name, price, categories, components):
    return SellableRecord(
        id=id,
        name=name,
        price=price,
        categories=tuple(categories),
        components=tuple(
            ComponentRecord(feature_name=f, amount=a) for f, a in components
        ),
    )


def _item(id, name, features, additional_price=0.0):
    return ItemRecord(
        id=id, name=name, additional_price=additional_price, features=tuple(features)
    )


@pytest.fixture
def open_now():
    """A Wednesday afternoon."""
    return WEDNESDAY


@pytest.fixture
def closed_now():
    """A Sunday afternoon."""
    return SUNDAY


@pytest.fixture
def sampler():
    """Seeded sampler for reproducible draws."""
    return WeightedSampler(seed=42)


@pytest.fixture
def calendar(sampler):
    """Calendar with the default weekly hours."""
    return BusinessCalendar(sampler=sampler)


@pytest.fixture
def reference():
    """In-memory reference snapshot mirroring the demo menu."""
    categories = tuple(
        CategoryRecord(id=i, name=name, importance=2)
        for i, name in enumerate(
            ["Meal", "A la Carte", "Drink", "Appetizer", "Kids Meal"], start=1
        )
    )
    sellables = (
        _sellable(1, "Bowl", 8.3, ["Meal"], [("Side", 2), ("Entree", 1)]),
        _sellable(2, "Plate", 9.8, ["Meal"], [("Side", 2), ("Entree", 2)]),
        _sellable(3, "Bigger Plate", 11.3, ["Meal"], [("Side", 2), ("Entree", 3)]),
        _sellable(4, "Family Meal", 43.0, ["Meal"], [("Side", 6), ("Entree", 9)]),
        _sellable(5, "Drink", 0.0, ["Drink"], [("Drink", 1)]),
        _sellable(6, "Appetizer", 0.0, ["Appetizer"], [("Appetizer", 1)]),
        _sellable(
            7,
            "Kids Meal",
            6.6,
            ["Kids Meal"],
            [("Side", 2), ("Entree", 1), ("Appetizer", 1), ("Drink", 1)],
        ),
        _sellable(8, "Small A La Carte Entree", 5.2, ["A la Carte", "Entree"], [("Entree", 1)]),
        _sellable(9, "Medium A La Carte Entree", 8.5, ["A la Carte", "Entree"], [("Entree", 2)]),
        _sellable(10, "Large A La Carte Entree", 11.2, ["A la Carte", "Entree"], [("Entree", 3)]),
        _sellable(11, "Small A La Carte Side", 4.4, ["A la Carte", "Side"], [("Side", 2)]),
        _sellable(12, "Medium A La Carte Side", 5.4, ["A la Carte", "Side"], [("Side", 4)]),
    )
    items = (
        _item(1, "Orange Chicken", ["Entree", "Chicken"]),
        _item(2, "Beijing Beef", ["Entree", "Beef", "Spicy"]),
        _item(3, "Black Pepper Sirloin Steak", ["Entree", "Beef"], additional_price=1.5),
        _item(4, "Fried Rice", ["Side", "Egg"]),
        _item(5, "Chow Mein", ["Side"]),
        _item(6, "White Steamed Rice", ["Side"]),
        _item(7, "Cream Cheese Rangoon", ["Appetizer", "Dairy"]),
        _item(8, "Chicken Egg Roll", ["Appetizer"]),
        _item(9, "Vegetable Spring Roll", ["Appetizer"]),
        _item(10, "Bottled Water", ["Drink"]),
        _item(11, "Small Drink", ["Drink"]),
        _item(12, "Medium Drink", ["Drink"]),
        _item(13, "Large Drink", ["Drink"]),
    )
    employees = (
        EmployeeRecord(id=1, name="Mike Elko", access=int(AccessFlags.BASIC_ORDERING)),
        EmployeeRecord(id=2, name="Marcel Reed", access=int(AccessFlags.ALL)),
    )
    return ReferenceData(
        categories=categories, sellables=sellables, items=items, employees=employees
    )


@pytest.fixture
def database_url(tmp_path):
    """File-backed SQLite URL unique to the test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'orderseed.db'}"


@pytest.fixture
def with_seeded_store(database_url):
    """
    Run an async scenario against a freshly seeded store.

    The store lives for one event loop and is disposed afterwards.
    """

    def run(scenario):
        async def main():
            store = OrderStore(database_url)
            try:
                await store.create_schema(drop_existing=True)
                await seed_reference_data(store)
                return await scenario(store)
            finally:
                await store.dispose()

        return asyncio.run(main())

    return run
