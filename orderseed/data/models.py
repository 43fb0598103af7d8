"""
Value objects shared by the generator and the persistence layer.

Reference records are read-only snapshots of the menu, staff and
inventory tables. Order specs are the in-memory description of one
synthesized order, built once and never mutated.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from datetime import datetime
from enum import IntEnum, IntFlag
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class OrderStatus(IntEnum):
    """Fulfillment status of an in-flight order."""

    PENDING = 0  # submitted, in the queue
    IN_PROGRESS = 1  # being prepared
    COMPLETED = 2  # ready for pickup
    CANCELLED = 3  # will not be prepared


class AccessFlags(IntFlag):
    """Job position permission bits."""

    NONE = 0x00
    READ_EMPLOYEES = 0x01
    READ_INVENTORY = 0x02
    READ_ORDERS = 0x04
    READ_MENU = 0x08
    READ_ALL = 0x0F
    WRITE_EMPLOYEES = 0x10
    WRITE_INVENTORY = 0x20
    WRITE_ORDERS = 0x40
    WRITE_MENU = 0x80
    WRITE_ALL = 0xF0
    BASIC_ORDERING = 0x4E
    ALL = 0xFF


class CategoryRecord(BaseModel):
    """A sellable category (Meal, Drink, Appetizer, ...)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    importance: int = 0


class ComponentRecord(BaseModel):
    """One component slot of a sellable: a feature and how many units."""

    model_config = ConfigDict(frozen=True)

    feature_name: str
    amount: int = Field(default=1, ge=1)


class SellableRecord(BaseModel):
    """A purchasable menu offering such as a Bowl or a Plate."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: float = Field(..., ge=0)
    categories: Tuple[str, ...] = ()
    components: Tuple[ComponentRecord, ...] = ()


class ItemRecord(BaseModel):
    """A concrete menu item such as Orange Chicken or Fried Rice."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    additional_price: float = Field(default=0.0, ge=0)
    features: Tuple[str, ...] = ()


class EmployeeRecord(BaseModel):
    """An employee eligible to take orders."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    access: int = 0


class ReferenceData(BaseModel):
    """
    Snapshot of all reference collections needed for sampling.

    Fetched once before any order is generated and shared read-only by
    every sampling call.
    """

    model_config = ConfigDict(frozen=True)

    categories: Tuple[CategoryRecord, ...] = ()
    sellables: Tuple[SellableRecord, ...] = ()
    items: Tuple[ItemRecord, ...] = ()
    employees: Tuple[EmployeeRecord, ...] = ()

    def category_names(self) -> List[str]:
        """Names of all fetched categories."""
        return [c.name for c in self.categories]

    def sellables_in(self, category: str) -> List[SellableRecord]:
        """Sellables belonging to a category."""
        return [s for s in self.sellables if category in s.categories]

    def items_with(self, feature: str) -> List[ItemRecord]:
        """Items carrying a feature."""
        return [i for i in self.items if feature in i.features]

    def summary(self) -> Dict[str, int]:
        """Collection sizes, for logging."""
        return {
            "categories": len(self.categories),
            "sellables": len(self.sellables),
            "items": len(self.items),
            "employees": len(self.employees),
        }


class SoldItemSpec(BaseModel):
    """A resolved item line inside a sold sellable."""

    model_config = ConfigDict(frozen=True)

    item_id: int
    item_name: str
    amount: int = Field(default=1, ge=1)
    additional_price: float = Field(default=0.0, ge=0)

    @property
    def surcharge(self) -> float:
        """Extra charge for this line."""
        return self.amount * self.additional_price


class SoldSellableSpec(BaseModel):
    """One chosen sellable in an order, with optional item lines."""

    model_config = ConfigDict(frozen=True)

    sellable_id: int
    sellable_name: str
    category: str
    price: float = Field(..., ge=0)
    sold_items: Tuple[SoldItemSpec, ...] = ()

    @property
    def surcharge(self) -> float:
        """Sum of item surcharges (zero when items are unresolved)."""
        return sum(item.surcharge for item in self.sold_items)


class RecentOrderMarker(BaseModel):
    """Marks an order as part of today's in-flight batch."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus = OrderStatus.COMPLETED


class OrderSpec(BaseModel):
    """Fully composed, not-yet-persisted order."""

    model_config = ConfigDict(frozen=True)

    customer_name: str = Field(..., min_length=1)
    employee_id: int
    order_date: datetime
    total_price: float = Field(..., ge=0)
    sold_sellables: Tuple[SoldSellableSpec, ...] = Field(..., min_length=1)
    recent: Optional[RecentOrderMarker] = None

    @property
    def is_recent(self) -> bool:
        """Whether the order carries a RecentOrderMarker."""
        return self.recent is not None

    @property
    def base_price(self) -> float:
        """Sum of the chosen sellables' base prices."""
        return round(sum(s.price for s in self.sold_sellables), 2)

    def with_marker(self, marker: RecentOrderMarker) -> "OrderSpec":
        """Return a copy of this spec tagged as a recent order."""
        return self.model_copy(update={"recent": marker})
