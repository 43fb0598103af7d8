"""
Two-level order composition: combo template, then sellable per category.

Weight tables name sellables, but draws are made only from candidates
present in the fetched reference data, so deleted or unknown sellables
can never be selected.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from orderseed.data.models import ReferenceData, SellableRecord
from orderseed.errors import ReferenceDataError
from orderseed.generation.config import ComboTemplate, SellableWeight, combo_options
from orderseed.sampling.weighted import WeightedOption, WeightedSampler

logger = logging.getLogger(__name__)

ComboDraw = List[Tuple[str, SellableRecord]]


class ComboComposer:
    """
    Samples which categories an order contains and one sellable for each.

    Weight tables are resolved against the reference snapshot once, at
    construction, into weighted options over candidate lists.
    """

    def __init__(
        self,
        combos: Sequence[ComboTemplate],
        sellable_weights: Mapping[str, Sequence[SellableWeight]],
        reference: ReferenceData,
        sampler: WeightedSampler,
    ):
        """
        Initialize the composer.

        Args:
            combos: Combo templates with probabilities
            sellable_weights: Category name -> sellable weight table
            reference: Pre-fetched reference data
            sampler: Shared weighted sampler

        Raises:
            ReferenceDataError: If a template category has no fetched sellables
        """
        self.sampler = sampler
        self.combo_options = combo_options(combos)
        self.sellable_options: Dict[str, List[WeightedOption]] = {}

        for category in sorted({name for c in combos for name in c.categories}):
            self.sellable_options[category] = self._resolve_category(
                category, sellable_weights.get(category, []), reference
            )

    @staticmethod
    def _resolve_category(
        category: str,
        weights: Sequence[SellableWeight],
        reference: ReferenceData,
    ) -> List[WeightedOption]:
        candidates = reference.sellables_in(category)
        if not candidates:
            raise ReferenceDataError(f"No sellables fetched for category '{category}'")

        options = []
        for weight in weights:
            if weight.sellable is None:
                matches = candidates
            else:
                matches = [s for s in candidates if s.name == weight.sellable]

            if not matches:
                logger.warning(
                    f"Sellable '{weight.sellable}' not available in '{category}'; "
                    "its weight falls through to the remaining options"
                )
                continue
            options.append(WeightedOption(probability=weight.probability, value=matches))

        if not options:
            raise ReferenceDataError(
                f"No weighted sellable of category '{category}' is available"
            )
        return options

    def compose_combo(self) -> ComboDraw:
        """
        Draw one order shape.

        Returns:
            (category name, sellable) pairs, one per chosen category,
            in template order
        """
        categories = self.sampler.choose(self.combo_options)
        return [
            (category, self.sampler.select(self.sampler.choose(self.sellable_options[category])))
            for category in categories
        ]
