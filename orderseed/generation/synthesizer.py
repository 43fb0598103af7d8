"""
Builds one complete order specification.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from orderseed.data.models import (
    EmployeeRecord,
    OrderSpec,
    ReferenceData,
    SellableRecord,
    SoldItemSpec,
    SoldSellableSpec,
)
from orderseed.errors import ReferenceDataError
from orderseed.generation.combos import ComboComposer
from orderseed.generation.config import ItemWeight
from orderseed.sampling.weighted import WeightedOption, WeightedSampler

logger = logging.getLogger(__name__)


class OrderSynthesizer:
    """
    Composes an OrderSpec from the shared reference snapshot.

    Total price is the sum of the chosen sellables' base prices. Item
    lines can optionally be resolved for each sellable component, and
    their surcharges optionally added to the total.
    """

    def __init__(
        self,
        composer: ComboComposer,
        reference: ReferenceData,
        customer_names: Sequence[str],
        sampler: WeightedSampler,
        item_weights: Optional[Mapping[str, Sequence[ItemWeight]]] = None,
        resolve_items: bool = False,
        include_surcharges: bool = False,
    ):
        """
        Initialize the synthesizer.

        Args:
            composer: Combo composer bound to the same reference snapshot
            reference: Pre-fetched reference data (employees pre-filtered)
            customer_names: Flat pool of customer display names
            sampler: Shared weighted sampler
            item_weights: Feature name -> item weight table
            resolve_items: Whether to build SoldItem lines per component
            include_surcharges: Whether item surcharges count toward total
        """
        self.composer = composer
        self.customer_names = list(customer_names)
        self.employees: List[EmployeeRecord] = list(reference.employees)
        self.sampler = sampler
        self.resolve_items = resolve_items
        self.include_surcharges = include_surcharges and resolve_items
        self.item_options: Dict[str, List[WeightedOption]] = {}

        if resolve_items:
            features = sorted(
                {c.feature_name for s in reference.sellables for c in s.components}
            )
            for feature in features:
                self.item_options[feature] = self._resolve_feature(
                    feature, (item_weights or {}).get(feature, []), reference
                )

    @staticmethod
    def _resolve_feature(
        feature: str,
        weights: Sequence[ItemWeight],
        reference: ReferenceData,
    ) -> List[WeightedOption]:
        candidates = reference.items_with(feature)
        if not candidates:
            raise ReferenceDataError(f"No items fetched with feature '{feature}'")

        if not weights:
            return [WeightedOption(value=candidates)]

        options = []
        for weight in weights:
            if weight.item is None:
                matches = candidates
            else:
                matches = [i for i in candidates if i.name == weight.item]
            if matches:
                options.append(WeightedOption(probability=weight.probability, value=matches))
            else:
                logger.warning(f"Item '{weight.item}' not available as '{feature}'")

        return options or [WeightedOption(value=candidates)]

    def _sold_items(self, sellable: SellableRecord) -> tuple:
        if not self.resolve_items:
            return ()

        lines = []
        for component in sellable.components:
            item = self.sampler.select(
                self.sampler.choose(self.item_options[component.feature_name])
            )
            lines.append(
                SoldItemSpec(
                    item_id=item.id,
                    item_name=item.name,
                    amount=component.amount,
                    additional_price=item.additional_price,
                )
            )
        return tuple(lines)

    def synthesize(self, order_date: datetime) -> OrderSpec:
        """
        Build one order.

        Args:
            order_date: Timestamp to stamp on the order

        Returns:
            Immutable OrderSpec (nothing is written)
        """
        customer_name = self.sampler.select(self.customer_names)
        employee = self.sampler.select(self.employees)

        sold = tuple(
            SoldSellableSpec(
                sellable_id=sellable.id,
                sellable_name=sellable.name,
                category=category,
                price=sellable.price,
                sold_items=self._sold_items(sellable),
            )
            for category, sellable in self.composer.compose_combo()
        )

        total = sum(s.price for s in sold)
        if self.include_surcharges:
            total += sum(s.surcharge for s in sold)

        return OrderSpec(
            customer_name=customer_name,
            employee_id=employee.id,
            order_date=order_date,
            total_price=round(total, 2),
            sold_sellables=sold,
        )
