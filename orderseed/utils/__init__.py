"""Utility functions."""

from orderseed.utils.log_config import configure_logging

__all__ = ["configure_logging"]
