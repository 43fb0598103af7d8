"""
Exception hierarchy for the order generator.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""


class OrderSeedError(Exception):
    """Base exception for order generation errors."""

    pass


class ConfigurationError(OrderSeedError):
    """Raised when generator configuration cannot be loaded or validated."""

    pass


class SamplingError(OrderSeedError):
    """Base exception for sampling failures."""

    pass


class EmptyDistributionError(SamplingError):
    """Raised when a sampler is given zero candidates."""

    pass


class NoOpenDayInRangeError(SamplingError):
    """Raised when a date range contains no day the business is open."""

    pass


class ReferenceDataError(OrderSeedError):
    """Raised when reference data is missing or could not be fetched."""

    pass


class PersistenceError(OrderSeedError):
    """Raised when a bulk write fails and has been rolled back."""

    pass
