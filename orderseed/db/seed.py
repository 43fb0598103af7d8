"""
Demo reference data and the full database populate routine.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from orderseed.data.models import AccessFlags, OrderSpec
from orderseed.db.schema import (
    Employee,
    Item,
    ItemFeature,
    JobPosition,
    Sellable,
    SellableCategory,
    SellableComponent,
)
from orderseed.db.store import OrderStore
from orderseed.errors import OrderSeedError
from orderseed.generation.config import DEFAULT_GENERATOR_CONFIG, GeneratorConfig
from orderseed.generation.orchestrator import BatchOrchestrator

logger = logging.getLogger(__name__)

JOB_POSITIONS = [
    {"name": "Employee", "access": AccessFlags.BASIC_ORDERING},
    {"name": "Manager", "access": AccessFlags.ALL},
]

EMPLOYEES = [
    {"name": "Marcel Reed", "start_date": date(2024, 9, 14), "position": "Manager"},
    {"name": "Mike Elko", "start_date": date(2023, 11, 27), "position": "Employee"},
    {"name": "John Helldiver", "start_date": date(2024, 2, 8), "position": "Employee"},
    {
        "name": "Daniel Manning",
        "start_date": date(2024, 2, 8),
        "position": "Manager",
        "email": "damanning911@tamu.edu",
    },
    {
        "name": "Alex Kelley",
        "start_date": date(2024, 8, 13),
        "position": "Manager",
        "email": "arkelley77@gmail.com",
    },
]

# (name, importance, is_primary)
ITEM_FEATURES = [
    ("Featured", 0, True),
    ("Seasonal", 1, True),
    ("Kids", 2, True),
    ("Entree", 3, True),
    ("Side", 3, True),
    ("Appetizer", 3, True),
    ("Drink", 3, True),
    ("Vegetarian", 4, False),
    ("Healthy", 4, False),
    ("Spicy", 4, False),
    ("Chicken", 4, False),
    ("Beef", 4, False),
    ("Egg", 4, False),
    ("Dairy", 4, False),
    ("Gluten", 4, False),
    ("Soy", 4, False),
    ("Peanuts", 4, False),
    ("Tree Nuts", 4, False),
]

# (name, additional price, calories, features)
ITEMS = [
    ("Chow Mein", 0, 300, ["Gluten", "Soy", "Side", "Vegetarian"]),
    ("Fried Rice", 0, 310, ["Gluten", "Soy", "Egg", "Side", "Vegetarian"]),
    ("White Steamed Rice", 0, 260, ["Gluten", "Soy", "Side", "Vegetarian"]),
    ("Super Greens", 0, 65, ["Gluten", "Soy", "Vegetarian", "Side"]),
    ("Super Greens Entree", 0, 90, ["Gluten", "Vegetarian", "Entree"]),
    ("Eggplant Tofu", 0, 340, ["Gluten", "Soy", "Vegetarian", "Spicy", "Entree"]),
    ("Beyond Orange Chicken", 1.5, 440, ["Gluten", "Soy", "Vegetarian", "Spicy", "Entree"]),
    ("Black Pepper Chicken", 0, 280, ["Gluten", "Soy", "Healthy", "Entree", "Chicken"]),
    ("Kung Pao Chicken", 0, 320, ["Gluten", "Soy", "Peanuts", "Entree", "Chicken"]),
    ("Grilled Teriyaki Chicken", 0, 275, ["Gluten", "Soy", "Healthy", "Entree", "Chicken"]),
    ("Mushroom Chicken", 0, 220, ["Gluten", "Soy", "Healthy", "Entree", "Chicken"]),
    ("Orange Chicken", 0, 510, ["Gluten", "Soy", "Dairy", "Egg", "Entree", "Chicken"]),
    ("Honey Sesame Chicken Breast", 0, 340, ["Gluten", "Entree", "Chicken"]),
    ("String Bean Chicken Breast", 0, 210, ["Gluten", "Soy", "Healthy", "Entree", "Chicken"]),
    ("SweetFire Chicken Breast", 0, 360, ["Gluten", "Spicy", "Entree", "Chicken"]),
    ("Beijing Beef", 0, 480, ["Gluten", "Soy", "Spicy", "Entree", "Beef"]),
    ("Black Pepper Sirloin Steak", 1.5, 210, ["Gluten", "Soy", "Entree", "Beef"]),
    ("Broccoli Beef", 0, 290, ["Gluten", "Soy", "Healthy", "Entree", "Beef"]),
    ("Honey Walnut Shrimp", 1.5, 410, ["Gluten", "Soy", "Tree Nuts", "Dairy", "Egg", "Entree"]),
    ("Chicken Egg Roll", 0, 200, ["Gluten", "Soy", "Dairy", "Egg", "Appetizer", "Chicken"]),
    ("Cream Cheese Rangoon", 0, 330, ["Gluten", "Dairy", "Vegetarian", "Appetizer"]),
    ("Vegetable Spring Roll", 0, 250, ["Gluten", "Soy", "Vegetarian", "Appetizer"]),
    ("Apple Pie Roll", 0, 330, ["Gluten", "Dairy", "Egg", "Vegetarian", "Appetizer"]),
    ("Bottled Water", 0, 0, ["Drink"]),
    ("Small Drink", 0, 0, ["Drink"]),
    ("Medium Drink", 0, 0, ["Drink"]),
    ("Large Drink", 0, 0, ["Drink"]),
    ("Kids Drink", 0, 0, ["Drink", "Kids"]),
    ("Kids Water", 0, 0, ["Drink", "Kids"]),
]

# (name, importance)
SELLABLE_CATEGORIES = [
    ("Featured", 0),
    ("Seasonal", 1),
    ("Meal", 2),
    ("A la Carte", 2),
    ("Drink", 2),
    ("Appetizer", 2),
    ("Combo", 2),
    ("Kids Meal", 2),
    ("Entree", 3),
    ("Side", 3),
]

SELLABLES: List[Dict[str, Any]] = [
    {"name": "Bowl", "price": 8.3, "categories": ["Meal"],
     "components": [("Side", 2), ("Entree", 1)]},
    {"name": "Plate", "price": 9.8, "categories": ["Meal"],
     "components": [("Side", 2), ("Entree", 2)]},
    {"name": "Bigger Plate", "price": 11.3, "categories": ["Meal"],
     "components": [("Side", 2), ("Entree", 3)]},
    {"name": "Kids Meal", "price": 6.6, "categories": ["Kids Meal"],
     "components": [("Side", 2), ("Entree", 1), ("Appetizer", 1), ("Drink", 1)]},
    {"name": "Bowl Bundle", "price": 10.4, "categories": ["Meal"], "deleted": True,
     "components": [("Side", 2), ("Entree", 1), ("Drink", 1)]},
    {"name": "Plate Bundle", "price": 11.9, "categories": ["Meal"], "deleted": True,
     "components": [("Side", 2), ("Entree", 2), ("Drink", 1)]},
    {"name": "Bigger Plate Bundle", "price": 13.4, "categories": ["Meal"], "deleted": True,
     "components": [("Side", 2), ("Entree", 3), ("Drink", 1)]},
    {"name": "Family Meal", "price": 43, "categories": ["Meal"],
     "components": [("Side", 6), ("Entree", 9)]},
    {"name": "Appetizer", "price": 0, "categories": ["Appetizer"],
     "components": [("Appetizer", 1)]},
    {"name": "Drink", "price": 0, "categories": ["Drink"],
     "components": [("Drink", 1)]},
    {"name": "Small A La Carte Entree", "price": 5.2, "categories": ["A la Carte", "Entree"],
     "components": [("Entree", 1)]},
    {"name": "Medium A La Carte Entree", "price": 8.5, "categories": ["A la Carte", "Entree"],
     "components": [("Entree", 2)]},
    {"name": "Large A La Carte Entree", "price": 11.2, "categories": ["A la Carte", "Entree"],
     "components": [("Entree", 3)]},
    {"name": "Small A La Carte Side", "price": 4.4, "categories": ["A la Carte", "Side"],
     "components": [("Side", 2)]},
    {"name": "Medium A La Carte Side", "price": 5.4, "categories": ["A la Carte", "Side"],
     "components": [("Side", 4)]},
]


async def seed_reference_data(store: OrderStore) -> Dict[str, int]:
    """
    Insert job positions, employees, features, items, categories and sellables.

    Runs in one transaction.

    Args:
        store: Store whose schema already exists

    Returns:
        Row counts per collection
    """
    now = datetime.now()

    async with store.session_factory() as session:
        async with session.begin():
            positions = {
                p["name"]: JobPosition(name=p["name"], access=int(p["access"]))
                for p in JOB_POSITIONS
            }
            session.add_all(positions.values())

            session.add_all(
                Employee(
                    name=e["name"],
                    start_date=e["start_date"],
                    email=e.get("email"),
                    job_position=positions[e["position"]],
                )
                for e in EMPLOYEES
            )

            features = {
                name: ItemFeature(name=name, importance=importance, is_primary=primary)
                for name, importance, primary in ITEM_FEATURES
            }
            session.add_all(features.values())

            session.add_all(
                Item(
                    name=name,
                    additional_price=Decimal(str(extra)),
                    calories=calories,
                    features=[features[f] for f in item_features],
                )
                for name, extra, calories, item_features in ITEMS
            )

            categories = {
                name: SellableCategory(name=name, importance=importance)
                for name, importance in SELLABLE_CATEGORIES
            }
            session.add_all(categories.values())

            for entry in SELLABLES:
                session.add(
                    Sellable(
                        name=entry["name"],
                        price=Decimal(str(entry["price"])),
                        deleted_at=now if entry.get("deleted") else None,
                        categories=[categories[c] for c in entry["categories"]],
                        components=[
                            SellableComponent(item_feature=features[f], amount=amount)
                            for f, amount in entry["components"]
                        ],
                    )
                )

    counts = {
        "job_positions": len(JOB_POSITIONS),
        "employees": len(EMPLOYEES),
        "item_features": len(ITEM_FEATURES),
        "items": len(ITEMS),
        "sellable_categories": len(SELLABLE_CATEGORIES),
        "sellables": len(SELLABLES),
    }
    logger.info(f"Seeded reference data: {counts}")
    return counts


async def populate_database(
    store: OrderStore,
    orchestrator: Optional[BatchOrchestrator] = None,
    config: Optional[GeneratorConfig] = None,
    historical_count: Optional[int] = None,
    recent_count: Optional[int] = None,
) -> List[OrderSpec]:
    """
    Reset the schema, seed reference data and generate the order history.

    The reset, the seed and the order insert share one transaction, so a
    failure at any step leaves the previous database untouched.

    Args:
        store: Target store
        orchestrator: Orchestrator to use (built from config when omitted)
        config: Generator configuration for a new orchestrator
        historical_count: Override for the historical order count
        recent_count: Override for the recent order count

    Returns:
        The persisted order specs

    Raises:
        OrderSeedError: If generation or persistence fails; nothing is committed
    """
    started = time.perf_counter()

    if orchestrator is None:
        orchestrator = BatchOrchestrator(store, config=config or DEFAULT_GENERATOR_CONFIG)

    try:
        async with store.transaction() as scoped:
            await scoped.create_schema(drop_existing=True)
            await seed_reference_data(scoped)
            specs = await orchestrator.with_store(scoped).populate(
                historical_count, recent_count
            )
    except OrderSeedError as e:
        logger.error(f"Populate failed, previous data kept: {e}")
        raise

    logger.info(f"Database populated in {time.perf_counter() - started:.2f}s")
    return specs


async def sellable_ids_by_name(store: OrderStore) -> Dict[str, int]:
    """Map of live sellable names to ids."""
    async with store.session() as session:
        rows = (
            await session.execute(
                select(Sellable.name, Sellable.id).where(Sellable.deleted_at.is_(None))
            )
        ).all()
    return {r.name: r.id for r in rows}
