"""Combo composition, order synthesis and batch orchestration."""

from orderseed.generation.combos import ComboComposer
from orderseed.generation.config import GeneratorConfig
from orderseed.generation.orchestrator import BatchOrchestrator
from orderseed.generation.synthesizer import OrderSynthesizer

__all__ = ["ComboComposer", "GeneratorConfig", "BatchOrchestrator", "OrderSynthesizer"]
