"""Reference records and order specifications."""

from orderseed.data.models import OrderSpec, OrderStatus, ReferenceData

__all__ = ["OrderSpec", "OrderStatus", "ReferenceData"]
