"""
Generator configuration: combo templates, weight tables and name pools.

Every table is plain data passed into the orchestrator, so a run can be
parameterized and tested without module-level state. The shipped
defaults reproduce the demo restaurant's order mix.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from orderseed.data.models import OrderStatus
from orderseed.errors import ConfigurationError
from orderseed.sampling.calendar import (
    WEEKDAY_NAMES,
    DailyHours,
    default_weekly_hours,
)
from orderseed.sampling.weighted import WeightedOption, explicit_mass

logger = logging.getLogger(__name__)

# Tolerance for float rounding when checking a table sums to at most 1
MASS_TOLERANCE = 1e-9


class ComboTemplate(BaseModel):
    """One possible shape of an order, e.g. Meal + Drink."""

    model_config = ConfigDict(frozen=True)

    probability: Optional[float] = Field(default=None, gt=0, le=1)
    categories: List[str] = Field(..., min_length=1)


class SellableWeight(BaseModel):
    """Weight of one sellable within a category; None name means any."""

    model_config = ConfigDict(frozen=True)

    probability: Optional[float] = Field(default=None, gt=0, le=1)
    sellable: Optional[str] = None


class ItemWeight(BaseModel):
    """Weight of one item within a feature; None name means any."""

    model_config = ConfigDict(frozen=True)

    probability: Optional[float] = Field(default=None, gt=0, le=1)
    item: Optional[str] = None


def combo_options(combos: Sequence[ComboTemplate]) -> List[WeightedOption]:
    """Combo templates as weighted options over category-name lists."""
    return [
        WeightedOption(probability=c.probability, value=list(c.categories))
        for c in combos
    ]


def _check_mass(name: str, entries: List[BaseModel]) -> None:
    mass = sum(e.probability for e in entries if e.probability is not None)
    if mass > 1 + MASS_TOLERANCE:
        raise ValueError(f"Probabilities for '{name}' sum to {mass:.4f} (> 1)")
    if mass < 1 - MASS_TOLERANCE:
        logger.debug(
            f"Probabilities for '{name}' sum to {mass:.4f}; "
            "remainder falls to the last option"
        )


class GeneratorConfig(BaseModel):
    """
    Complete configuration of a generator run.

    Validates that every table is non-empty, that no table's explicit
    probabilities exceed 1, and that every category used by a combo
    template has a sellable weight table.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    combos: List[ComboTemplate] = Field(..., min_length=1)
    sellable_weights: Dict[str, List[SellableWeight]]
    item_weights: Dict[str, List[ItemWeight]] = Field(default_factory=dict)
    customer_names: List[str] = Field(..., min_length=1)
    weekly_hours: Dict[str, Optional[DailyHours]]

    historical_order_count: int = Field(default=10000, ge=0)
    recent_order_count: int = Field(default=50, ge=0)
    history_years: int = Field(default=2, ge=1)
    recent_status: OrderStatus = OrderStatus.COMPLETED

    @model_validator(mode="after")
    def check_tables(self) -> "GeneratorConfig":
        """Validate weight tables and cross references."""
        _check_mass("combos", self.combos)

        for category, entries in self.sellable_weights.items():
            if not entries:
                raise ValueError(f"Sellable weight table for '{category}' is empty")
            _check_mass(category, entries)

        for feature, entries in self.item_weights.items():
            if not entries:
                raise ValueError(f"Item weight table for '{feature}' is empty")
            _check_mass(feature, entries)

        missing = sorted(
            {c for combo in self.combos for c in combo.categories}
            - set(self.sellable_weights)
        )
        if missing:
            raise ValueError(f"Combo categories without sellable weights: {missing}")

        unknown_days = set(self.weekly_hours) - set(WEEKDAY_NAMES)
        if unknown_days:
            raise ValueError(f"Unknown weekday names: {sorted(unknown_days)}")

        return self

    def combo_options(self) -> List[WeightedOption]:
        """Combo templates as weighted options over category-name lists."""
        return combo_options(self.combos)

    def weekly_hours_by_number(self) -> Dict[int, Optional[DailyHours]]:
        """Weekly hours keyed by Python weekday number (Monday == 0)."""
        return {
            WEEKDAY_NAMES.index(name): hours for name, hours in self.weekly_hours.items()
        }

    def combo_mass(self) -> float:
        """Explicit probability mass of the combo templates."""
        return explicit_mass(self.combo_options())

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "GeneratorConfig":
        """
        Load a configuration override from a JSON file.

        Args:
            path: Path to the JSON file

        Returns:
            Validated GeneratorConfig

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            config = cls.model_validate(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid generator config in {path}: {e}")

        logger.info(f"Loaded generator config from {path}")
        return config


# Repeats give those names more weight under a uniform draw
DEFAULT_CUSTOMER_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael",
    "Elizabeth", "William", "Linda", "David", "Barbara", "Richard", "Susan",
    "Joseph", "Jessica", "Charles", "Sarah", "Thomas", "Karen",
    "Christopher", "Nancy", "Daniel", "Betty", "Matthew", "Helen",
    "Anthony", "Sandra", "Mark", "Ashley", "Donald", "Dorothy", "Steven",
    "Kimberly", "Paul", "Shirley", "Andrew", "Cynthia", "Joshua", "Ruth",
    "Kenneth", "Angela", "Kevin", "Deborah", "Brian", "Betty", "George",
    "Megan", "Edward", "Hannah", "Timothy", "Rachel", "Jason", "Amy",
    "Jeffrey", "Laura", "Ryan", "Carol", "Gary", "Marilyn", "Nicholas",
    "Frances", "Eric", "Evelyn", "Jacob", "Cheryl", "Steven", "Brenda",
    "Sean", "Alice", "Adam", "Judy", "Jack", "Shawn", "Anna", "Brian",
    "Tina", "Scott", "Danielle", "Louis", "Heather", "Frank", "Grace",
    "Larry", "Michelle", "Raymond", "Kim", "Billy", "Jessica", "Ethan",
    "Natalie", "Samuel", "Debbie", "Victor", "Ruby", "Leo", "Shannon",
    "Luke", "Kimberley", "Jacob", "Catherine", "Zachary", "Monica", "Brian",
    "Kayla", "Alexander", "Sophia", "Nathan", "Julia", "Henry", "Lily",
    "Arthur", "Ava", "Tim", "Jasmine", "Samuel", "Grace", "Peter", "Sarah",
    "Daniel", "Clara", "Thomas", "Maggie", "Charles", "Emma", "Johnny",
    "Victoria", "Dennis", "Nancy", "David", "Rebecca", "Carl", "Brittany",
    "Steven", "Denise", "Harold", "Susan", "Stanley", "Beverly", "Dennis",
    "Isabella", "Clyde", "Eva", "Allen", "Sadie", "Joshua", "Beth", "Megan",
    "Alice", "Wendy", "Dean", "Laura", "Jesse", "Helen", "Charlie",
    "Frances", "Darlene", "Brian", "Joan", "Eddie", "Valerie", "Paula",
    "Brian", "Angela", "Judy", "Mark", "Julie", "Craig", "Tracy", "Stan",
    "Tammy", "Dennis", "Shirley", "Doris", "Paul", "Lori", "Gregory",
    "Vera", "Lillian", "George", "Janet", "Stephen", "Carmen", "Jack",
    "Charlotte", "Douglas", "Gail", "Andrew", "Hannah", "Ronald", "Faye",
    "Michele", "Marissa", "Lori", "Carla", "Victor", "Jean", "Gina",
    "Benny", "Cindy", "Maurice", "Kathy", "Vicki", "Ray", "Michele",
    "Linda", "Alyssa", "Freddie", "Amelia", "Howard", "Nancy", "Cynthia",
    "Carson", "Nancy", "Bruce", "Susan", "Sharon", "Sandra", "Stella",
    "Juliana", "Diane", "Helen", "Angela", "Miriam", "Lydia", "Corey",
    "Sandy", "Timothy", "Craig", "Beverly", "Gerald", "Gloria", "Terry",
    "Carolyn", "Nancy", "Gregory", "Peter", "Virginia", "Kristin", "James",
    "Barbara", "Betty", "Lauren", "Albert", "Beverly", "George", "Edith",
    "Patricia", "Chad", "Shannon", "Josephine", "Emma", "Olivia", "Max",
    "Jay", "Terry", "Natalie", "Caleb", "Paige", "Shannon", "Paul",
    "Krista", "Becky", "Melanie", "Michelle", "Felicia", "Oscar", "Daniel",
    "Grace", "Chris", "Matthew", "Emily", "Ruth", "Patrick", "Johnny",
    "Ellen", "Jerry", "Maggie", "Riley", "Sylvia", "Samantha", "Sean",
    "Tyler", "Megan", "Katie", "Nicole", "Lisa", "David", "Sharon", "Cory",
    "Dan", "Lillian", "April", "Arthur", "Aaron", "Vera", "Erica",
    "Kathleen", "Dale", "Holly", "Nina", "Ed", "Helen", "Warren", "Sam",
    "Darlene", "Clifford", "Laura", "Rachel", "Jodie", "Emily", "John",
    "Marie", "Theresa", "Raymond", "Donald", "Walter", "Megan", "Grace",
    "Sandy", "Donna", "Jason", "Elaine", "Raymond", "Sarah", "Harold",
    "Julie", "Maggie", "Alex", "Lana", "Kara", "Sandy", "Beryl", "Max",
    "Walter", "Stacy", "Alice", "Tom", "George", "Sandy", "Edith", "Nancy",
    "Katie", "Rebecca", "Henry", "Nicole", "Maxine", "Jan", "Marie", "Earl",
    "Stephanie", "Dora", "Sue", "Alfred", "Ron", "Jill", "Harold", "Nina",
    "Roberta", "Dennis", "Clara", "Jody", "Ava", "Doris", "Beverly",
    "Linda", "Jesse", "Dylan", "Jenna", "Sally", "Aiden", "Sue", "Tracy",
    "George", "Kristen", "Roxanne", "Freddie", "Bradley", "Vickie",
    "Brenda", "Wayne", "Sandy", "Sherry", "Thomas", "Leah", "Jason",
    "Kathy", "Carlos", "Wendy", "Daisy", "Vickie", "Stephanie", "Nancy",
    "Carol", "Lynne", "Gail", "Jerry", "Keith", "Catherine", "Tina", "Vera",
    "Lorraine", "Louis", "Beatrice", "Nicole", "Nancy", "Shane", "Helen",
    "Diane", "Barry", "Virginia", "Gene", "Elise", "Marie", "Clinton",
    "Cheryl", "Dean", "Jenna", "Albert", "Howard", "Ernie", "Tony", "Jade",
    "Alfred", "Betty", "Brenda", "Grace",
]

DEFAULT_GENERATOR_CONFIG = GeneratorConfig(
    combos=[
        ComboTemplate(probability=0.4, categories=["Meal"]),
        ComboTemplate(probability=0.2, categories=["Meal", "Drink"]),
        ComboTemplate(probability=0.2, categories=["Meal", "Appetizer"]),
        ComboTemplate(probability=0.1, categories=["Meal", "Drink", "Appetizer"]),
        ComboTemplate(probability=0.075, categories=["Meal", "A la Carte"]),
        ComboTemplate(probability=0.025, categories=["Kids Meal"]),
    ],
    sellable_weights={
        "Meal": [
            SellableWeight(probability=0.4, sellable="Bowl"),
            SellableWeight(probability=0.3, sellable="Plate"),
            SellableWeight(probability=0.2, sellable="Bigger Plate"),
            SellableWeight(probability=0.1, sellable="Family Meal"),
        ],
        "Drink": [SellableWeight(probability=1.0, sellable="Drink")],
        "Appetizer": [SellableWeight(probability=1.0, sellable="Appetizer")],
        "A la Carte": [
            SellableWeight(probability=0.2, sellable="Small A La Carte Entree"),
            SellableWeight(probability=0.2, sellable="Medium A La Carte Entree"),
            SellableWeight(probability=0.2, sellable="Large A La Carte Entree"),
            SellableWeight(probability=0.2, sellable="Small A La Carte Side"),
            SellableWeight(probability=0.2, sellable="Medium A La Carte Side"),
        ],
        "Kids Meal": [SellableWeight(probability=1.0, sellable="Kids Meal")],
    },
    item_weights={
        "Entree": [
            ItemWeight(probability=0.4, item="Orange Chicken"),
            ItemWeight(probability=0.6),
        ],
        "Side": [
            ItemWeight(probability=0.4, item="Fried Rice"),
            ItemWeight(probability=0.3, item="Chow Mein"),
            ItemWeight(probability=0.3),
        ],
        "Appetizer": [
            ItemWeight(probability=0.3, item="Cream Cheese Rangoon"),
            ItemWeight(probability=0.3, item="Chicken Egg Roll"),
            ItemWeight(probability=0.2, item="Vegetable Spring Roll"),
            ItemWeight(probability=0.2),
        ],
        # Sums to 0.9; the remainder goes to Large Drink
        "Drink": [
            ItemWeight(probability=0.3, item="Bottled Water"),
            ItemWeight(probability=0.2, item="Small Drink"),
            ItemWeight(probability=0.2, item="Medium Drink"),
            ItemWeight(probability=0.2, item="Large Drink"),
        ],
    },
    customer_names=DEFAULT_CUSTOMER_NAMES,
    weekly_hours={
        WEEKDAY_NAMES[day]: hours for day, hours in default_weekly_hours().items()
    },
)
