"""
Weighted choice primitive for synthetic order generation.

A distribution is an ordered list of options, each with an optional
probability. Options without a probability form a catch-all bucket that
is returned as soon as the walk reaches it.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from typing import Any, Generic, Optional, Sequence, TypeVar, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from orderseed.errors import EmptyDistributionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WeightedOption(BaseModel, Generic[T]):
    """One entry of a discrete distribution."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    probability: Optional[float] = Field(
        default=None, gt=0, le=1, description="Omit for a catch-all option"
    )
    value: T


def explicit_mass(options: Sequence[WeightedOption[Any]]) -> float:
    """Sum of the explicit probabilities in a distribution."""
    return float(sum(o.probability for o in options if o.probability is not None))


class WeightedSampler:
    """
    Draws values from weighted and flat candidate lists.

    Uses a numpy Generator so a run can optionally be made reproducible
    by passing a seed.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the sampler.

        Args:
            rng: Random generator to draw from (takes precedence over seed)
            seed: Seed for a new generator when rng is not given
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def choose(self, options: Sequence[WeightedOption[T]]) -> T:
        """
        Pick one value according to the configured probabilities.

        Walks the options in order, subtracting each probability from a
        uniform draw in [0, 1). An option without a probability is
        returned immediately when reached. If the probabilities sum to
        less than 1 and the draw lands in the uncovered remainder, the
        last listed option is returned.

        Args:
            options: Ordered weighted options

        Returns:
            The chosen option's value

        Raises:
            EmptyDistributionError: If options is empty
        """
        if not options:
            raise EmptyDistributionError("Cannot choose from an empty distribution")

        p = float(self.rng.random())

        for option in options:
            if option.probability is None or p < option.probability:
                return option.value
            p -= option.probability

        # Remainder mass belongs to the last option
        logger.debug("Draw fell past explicit mass; using last option")
        return options[-1].value

    def select(self, items: Sequence[T]) -> T:
        """
        Pick one item uniformly.

        Args:
            items: Flat candidate pool

        Returns:
            One element of items

        Raises:
            EmptyDistributionError: If items is empty
        """
        if len(items) == 0:
            raise EmptyDistributionError("Cannot select from an empty candidate pool")

        return items[int(self.rng.integers(len(items)))]

    def uniform(self, low: float, high: float) -> float:
        """Draw a float uniformly from [low, high)."""
        return float(self.rng.uniform(low, high))


def as_options(
    pairs: Sequence[Union[WeightedOption[T], tuple]],
) -> list:
    """
    Build a list of WeightedOptions from (probability, value) pairs.

    Already-built options are passed through unchanged.
    """
    options = []
    for pair in pairs:
        if isinstance(pair, WeightedOption):
            options.append(pair)
        else:
            probability, value = pair
            options.append(WeightedOption(probability=probability, value=value))
    return options
