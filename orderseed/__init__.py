"""
OrderSeed

Synthetic order history generator for the restaurant kiosk demo database.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

from orderseed.db.store import OrderStore
from orderseed.generation.config import DEFAULT_GENERATOR_CONFIG, GeneratorConfig
from orderseed.generation.orchestrator import BatchOrchestrator
from orderseed.sampling.calendar import BusinessCalendar
from orderseed.sampling.weighted import WeightedSampler

__version__ = "1.0.0"
__author__ = "Seon Sivasathan"

__all__ = [
    "BatchOrchestrator",
    "BusinessCalendar",
    "DEFAULT_GENERATOR_CONFIG",
    "GeneratorConfig",
    "OrderStore",
    "WeightedSampler",
]
