"""
Tests for combo composition.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

from collections import Counter

import pytest

from orderseed.data.models import ReferenceData
from orderseed.errors import ReferenceDataError
from orderseed.generation.combos import ComboComposer
from orderseed.generation.config import (
    DEFAULT_GENERATOR_CONFIG,
    ComboTemplate,
    SellableWeight,
)


@pytest.fixture
def composer(reference, sampler):
    """Composer over the default tables."""
    return ComboComposer(
        DEFAULT_GENERATOR_CONFIG.combos,
        DEFAULT_GENERATOR_CONFIG.sellable_weights,
        reference,
        sampler,
    )


class TestComposeCombo:
    """Tests for ComboComposer.compose_combo."""

    def test_options_match_config(self, composer):
        """Test the composer draws from the config's combo options."""
        assert composer.combo_options == DEFAULT_GENERATOR_CONFIG.combo_options()

    def test_shape_matches_a_template(self, composer):
        """Test every draw is one of the configured category lists."""
        shapes = {tuple(c.categories) for c in DEFAULT_GENERATOR_CONFIG.combos}

        for _ in range(500):
            combo = composer.compose_combo()
            assert tuple(category for category, _ in combo) in shapes

    def test_sellable_belongs_to_category(self, composer):
        """Test each chosen sellable is in its category."""
        for _ in range(500):
            for category, sellable in composer.compose_combo():
                assert category in sellable.categories

    def test_combo_frequencies(self, composer):
        """Test combo shapes follow their probabilities."""
        n = 20000
        counts = Counter(
            tuple(category for category, _ in composer.compose_combo()) for _ in range(n)
        )

        assert counts[("Meal",)] / n == pytest.approx(0.4, abs=0.02)
        assert counts[("Meal", "Drink")] / n == pytest.approx(0.2, abs=0.02)
        assert counts[("Kids Meal",)] / n == pytest.approx(0.025, abs=0.01)

    def test_meal_weights(self, composer):
        """Test Meal sellables follow their weights."""
        n = 20000
        meals = Counter()
        for _ in range(n):
            for category, sellable in composer.compose_combo():
                if category == "Meal":
                    meals[sellable.name] += 1

        total = sum(meals.values())
        assert meals["Bowl"] / total == pytest.approx(0.4, abs=0.02)
        assert meals["Family Meal"] / total == pytest.approx(0.1, abs=0.02)


class TestResolution:
    """Tests for resolving weight tables against reference data."""

    def test_missing_category_raises(self, reference, sampler):
        """Test a template category with no fetched sellables."""
        no_kids = ReferenceData(
            categories=reference.categories,
            sellables=tuple(s for s in reference.sellables if s.name != "Kids Meal"),
            items=reference.items,
            employees=reference.employees,
        )
        with pytest.raises(ReferenceDataError):
            ComboComposer(
                DEFAULT_GENERATOR_CONFIG.combos,
                DEFAULT_GENERATOR_CONFIG.sellable_weights,
                no_kids,
                sampler,
            )

    def test_unavailable_sellable_is_dropped(self, reference, sampler):
        """Test a named sellable missing from the snapshot falls through."""
        composer = ComboComposer(
            [ComboTemplate(probability=1.0, categories=["Meal"])],
            {
                "Meal": [
                    SellableWeight(probability=0.5, sellable="Retired Bundle"),
                    SellableWeight(probability=0.5, sellable="Bowl"),
                ]
            },
            reference,
            sampler,
        )
        names = {composer.compose_combo()[0][1].name for _ in range(200)}
        assert names == {"Bowl"}

    def test_no_available_sellable_raises(self, reference, sampler):
        """Test every weighted sellable missing."""
        with pytest.raises(ReferenceDataError):
            ComboComposer(
                [ComboTemplate(probability=1.0, categories=["Meal"])],
                {"Meal": [SellableWeight(probability=1.0, sellable="Retired Bundle")]},
                reference,
                sampler,
            )

    def test_any_sellable_weight(self, reference, sampler):
        """Test a weight without a name covers the whole category."""
        composer = ComboComposer(
            [ComboTemplate(probability=1.0, categories=["A la Carte"])],
            {"A la Carte": [SellableWeight()]},
            reference,
            sampler,
        )
        names = {composer.compose_combo()[0][1].name for _ in range(500)}
        assert len(names) == 5
