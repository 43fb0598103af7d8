"""
Tests for generator configuration and application settings.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging

import pytest
from pydantic import ValidationError

from config import settings as app_settings
from orderseed.data.models import OrderStatus
from orderseed.errors import ConfigurationError
from orderseed.generation.config import (
    DEFAULT_GENERATOR_CONFIG,
    ComboTemplate,
    GeneratorConfig,
    SellableWeight,
)


def _config(**overrides):
    fields = dict(
        combos=[ComboTemplate(probability=1.0, categories=["Meal"])],
        sellable_weights={"Meal": [SellableWeight(probability=1.0, sellable="Bowl")]},
        customer_names=["Avery"],
        weekly_hours={},
    )
    fields.update(overrides)
    return GeneratorConfig(**fields)


class TestDefaultConfig:
    """Tests for the built-in tables."""

    def test_combo_mass_is_one(self):
        """Test the combo table covers the full probability mass."""
        assert DEFAULT_GENERATOR_CONFIG.combo_mass() == pytest.approx(1.0)

    def test_weekly_hours_by_number(self):
        """Test weekday names map to Python weekday numbers."""
        hours = DEFAULT_GENERATOR_CONFIG.weekly_hours_by_number()
        assert hours[6] is None
        assert hours[4].closes.hour == 22 and hours[4].closes.minute == 30

    def test_defaults(self):
        """Test run sizes and recent status."""
        assert DEFAULT_GENERATOR_CONFIG.historical_order_count == 10000
        assert DEFAULT_GENERATOR_CONFIG.recent_order_count == 50
        assert DEFAULT_GENERATOR_CONFIG.recent_status == OrderStatus.COMPLETED

    def test_name_pool_keeps_repeats(self):
        """Test repeated names stay in the pool and weigh more."""
        names = DEFAULT_GENERATOR_CONFIG.customer_names
        assert len(names) == 427
        assert names.count("Brian") == 5
        assert names.count("Mary") == 1

    def test_drink_table_leaves_remainder(self):
        """Test the drink table sums below one."""
        mass = sum(w.probability for w in DEFAULT_GENERATOR_CONFIG.item_weights["Drink"])
        assert mass == pytest.approx(0.9)


class TestValidation:
    """Tests for GeneratorConfig validation."""

    def test_minimal_config(self):
        """Test a minimal valid config."""
        config = _config()
        assert config.combo_mass() == pytest.approx(1.0)

    def test_mass_above_one_rejected(self):
        """Test a combo table summing above one."""
        with pytest.raises(ValidationError):
            _config(
                combos=[
                    ComboTemplate(probability=0.7, categories=["Meal"]),
                    ComboTemplate(probability=0.6, categories=["Meal"]),
                ]
            )

    def test_sellable_mass_above_one_rejected(self):
        """Test a sellable table summing above one."""
        with pytest.raises(ValidationError):
            _config(
                sellable_weights={
                    "Meal": [
                        SellableWeight(probability=0.6, sellable="Bowl"),
                        SellableWeight(probability=0.6, sellable="Plate"),
                    ]
                }
            )

    def test_mass_below_one_accepted(self, caplog):
        """Test a partial table is accepted and noted at debug level."""
        with caplog.at_level(logging.DEBUG, logger="orderseed.generation.config"):
            config = _config(combos=[ComboTemplate(probability=0.5, categories=["Meal"])])

        assert config.combo_mass() == pytest.approx(0.5)
        assert "remainder" in caplog.text

    def test_category_without_weights_rejected(self):
        """Test a combo naming a category with no sellable table."""
        with pytest.raises(ValidationError):
            _config(combos=[ComboTemplate(probability=1.0, categories=["Meal", "Drink"])])

    def test_empty_table_rejected(self):
        """Test an empty sellable table."""
        with pytest.raises(ValidationError):
            _config(sellable_weights={"Meal": []})

    def test_empty_names_rejected(self):
        """Test an empty customer name pool."""
        with pytest.raises(ValidationError):
            _config(customer_names=[])

    def test_unknown_weekday_rejected(self):
        """Test a misspelt weekday."""
        with pytest.raises(ValidationError):
            _config(weekly_hours={"funday": None})

    def test_unknown_field_rejected(self):
        """Test extra keys are not silently ignored."""
        with pytest.raises(ValidationError):
            _config(combo_table=[])


class TestFromJsonFile:
    """Tests for loading config overrides."""

    def test_round_trip(self, tmp_path):
        """Test a dumped config loads back unchanged."""
        path = tmp_path / "generator.json"
        path.write_text(DEFAULT_GENERATOR_CONFIG.model_dump_json(), encoding="utf-8")

        loaded = GeneratorConfig.from_json_file(path)
        assert loaded == DEFAULT_GENERATOR_CONFIG

    def test_missing_file(self, tmp_path):
        """Test a path that does not exist."""
        with pytest.raises(ConfigurationError):
            GeneratorConfig.from_json_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            GeneratorConfig.from_json_file(path)

    def test_invalid_tables(self, tmp_path):
        """Test JSON that fails validation."""
        path = tmp_path / "bad.json"
        path.write_text('{"combos": []}', encoding="utf-8")
        with pytest.raises(ConfigurationError):
            GeneratorConfig.from_json_file(path)


class TestSettings:
    """Tests for application settings."""

    def test_defaults(self):
        """Test base defaults."""
        settings = app_settings.Settings(_env_file=None)
        assert settings.database_url.startswith("sqlite+aiosqlite://")
        assert settings.historical_order_count == 10000
        assert settings.random_seed is None

    def test_testing_settings_are_small(self):
        """Test the testing profile keeps runs short."""
        settings = app_settings.TestingSettings(_env_file=None)
        assert settings.historical_order_count < 10000
        assert settings.environment == "testing"

    def test_environment_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("RECENT_ORDER_COUNT", "7")
        monkeypatch.setenv("RANDOM_SEED", "11")
        settings = app_settings.Settings(_env_file=None)
        assert settings.recent_order_count == 7
        assert settings.random_seed == 11
